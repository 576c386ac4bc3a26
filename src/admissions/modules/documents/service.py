"""
Documents Service Layer

Loads an application the caller may access and renders it as a PDF in a
worker thread.
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser
from admissions.modules.applications import service as application_service
from admissions.modules.applications.policies import Action
from admissions.modules.departments import repository as department_repository
from admissions.modules.documents.generator import ApplicationPDFGenerator

logger = logging.getLogger(__name__)


async def render_application_form(
    db: AsyncSession,
    user: CurrentUser,
    application_id: UUID,
) -> tuple[str, bytes]:
    """
    Render the application form.

    Returns:
        Tuple of (filename, PDF bytes)

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        ForbiddenError: If the caller is neither the owner nor an admin
    """
    application = await application_service.get_application(
        db, user, application_id, action=Action.APPLICATION_PDF
    )

    pdf = await asyncio.to_thread(ApplicationPDFGenerator().application_form, application)
    logger.info(f"Rendered application form {application.application_no} for {user.uid}")
    return f"application_{application.application_no}.pdf", pdf


async def render_hall_ticket(
    db: AsyncSession,
    user: CurrentUser,
    application_id: UUID,
) -> tuple[str, bytes]:
    """
    Render the hall ticket. Owners need an approved application.

    Returns:
        Tuple of (filename, PDF bytes)

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        ForbiddenError: If the caller is not an admin and the application is
            not theirs or not approved
    """
    application = await application_service.get_application(
        db, user, application_id, action=Action.HALL_TICKET_PDF
    )

    department_name = None
    if application.department_id:
        department = await department_repository.get_by_id(db, application.department_id)
        department_name = department.name if department else None

    pdf = await asyncio.to_thread(
        ApplicationPDFGenerator().hall_ticket, application, department_name
    )
    logger.info(f"Rendered hall ticket {application.application_no} for {user.uid}")
    return f"hall_ticket_{application.application_no}.pdf", pdf
