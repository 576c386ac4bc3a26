"""
Documents Router

Endpoints:
- GET /pdf/application/{id} - Application form (owner or admin)
- GET /pdf/hall-ticket/{id} - Hall ticket (owner of an approved application, or admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.database import get_db
from admissions.core.errors import ServiceError, internal_error_response, to_http_exception
from admissions.modules.documents import service

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_RESPONSES = {
    200: {"content": {"application/pdf": {}}, "description": "PDF download"},
    403: {"description": "Not permitted to download this document"},
    404: {"description": "Application not found"},
}


def _pdf_response(filename: str, content: bytes) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/application/{application_id}",
    response_class=Response,
    summary="Download Application Form",
    responses=PDF_RESPONSES,
)
async def download_application_form(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> Response:
    try:
        filename, content = await service.render_application_form(db, user, application_id)
        return _pdf_response(filename, content)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error generating application PDF for {application_id}: {e}")
        raise internal_error_response() from e


@router.get(
    "/hall-ticket/{application_id}",
    response_class=Response,
    summary="Download Hall Ticket",
    responses=PDF_RESPONSES,
)
async def download_hall_ticket(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> Response:
    try:
        filename, content = await service.render_hall_ticket(db, user, application_id)
        return _pdf_response(filename, content)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error generating hall ticket PDF for {application_id}: {e}")
        raise internal_error_response() from e
