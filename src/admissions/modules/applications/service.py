"""
Applications Service Layer

Submission, lookups and the admin review transitions.

Every transition loads the application, applies one lifecycle function
and commits. Notifications about an approval change are sent after the
commit; a delivery problem is logged and never undoes the transition.
"""

import logging
from datetime import UTC, datetime
from math import ceil
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser
from admissions.core.config import settings
from admissions.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from admissions.modules.applications import lifecycle, repository
from admissions.modules.applications.models import Application
from admissions.modules.applications.numbering import generate_application_number
from admissions.modules.applications.policies import Action, authorize
from admissions.modules.applications.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    ExamScheduleRequest,
)
from admissions.modules.departments import repository as department_repository
from admissions.modules.departments.service import DepartmentNotFoundError
from admissions.modules.notifications import service as notification_service
from admissions.modules.payments import service as payment_service
from admissions.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ApplicationNotFoundError(NotFoundError):
    """Raised when an application is not found."""

    def __init__(self, identifier: object | None = None):
        super().__init__("Application", identifier)


class MissingRequiredFieldsError(BadRequestError):
    """Raised when a submission lacks fields every application needs."""

    def __init__(self, fields: list[str]):
        super().__init__(
            message=f"Missing required fields: {', '.join(fields)}",
            error_code="MISSING_REQUIRED_FIELDS",
        )


class DuplicatePaymentError(ConflictError):
    """Raised when a payment has already been used for an application."""

    def __init__(self, transaction_id: str):
        super().__init__(
            message=f"Payment {transaction_id} has already been used for an application.",
            error_code="DUPLICATE_PAYMENT",
        )


class ReadOnlyFieldError(ForbiddenError):
    """Raised when an update touches fields the caller may not set."""

    def __init__(self, fields: list[str]):
        super().__init__(f"These fields cannot be changed here: {', '.join(sorted(fields))}")
        self.error_code = "READ_ONLY_FIELDS"


def _now() -> datetime:
    return datetime.now(UTC)


def _dump(block) -> dict[str, Any]:
    return block.model_dump(by_alias=True, mode="json", exclude_none=True)


# ============================================
# Submission
# ============================================


async def submit_application(
    db: AsyncSession,
    user: CurrentUser,
    data: ApplicationCreate,
) -> Application:
    """
    Create an application backed by a verified payment.

    The payment signature is checked again here, whatever the client
    reports. The application number is allocated in the same transaction
    as the insert, so a failed insert does not consume a number.

    Raises:
        MissingRequiredFieldsError: If name or mobile number is missing
        InvalidPaymentError: If the payment is missing, mis-signed or the wrong amount
        DuplicatePaymentError: If the payment already backs an application
    """
    authorize(user, Action.CREATE)

    missing = []
    if not (data.personal_info.name or "").strip():
        missing.append("personalInfo.name")
    if not (data.contact_info.mobile_number or "").strip():
        missing.append("contactInfo.mobileNumber")
    if missing:
        raise MissingRequiredFieldsError(missing)

    payment = data.payment
    payment_service.check_fee_amount(payment.amount)
    payment_service.verify_payment(payment.order_id, payment.payment_id, payment.signature)

    if await repository.get_by_transaction_id(db, payment.payment_id):
        logger.warning(f"Payment {payment.payment_id} reused by user {user.uid}")
        raise DuplicatePaymentError(payment.payment_id)

    try:
        application_no = await generate_application_number(db)
        application = await repository.create(
            db,
            application_no=application_no,
            user_id=user.uid,
            personal_info=_dump(data.personal_info),
            address_info=_dump(data.address_info),
            contact_info=_dump(data.contact_info),
            educational_info=_dump(data.educational_info),
            payment_transaction_id=payment.payment_id,
            payment_order_id=payment.order_id,
            payment_amount=payment.amount,
            payment_date=_now(),
        )
    except IntegrityError as e:
        await db.rollback()
        raise DuplicatePaymentError(payment.payment_id) from e

    logger.info(f"Application {application.application_no} submitted by user {user.uid}")
    return application


# ============================================
# Lookups
# ============================================


async def _load(db: AsyncSession, application_id: UUID) -> Application:
    application = await repository.get_by_id(db, application_id)
    if not application:
        raise ApplicationNotFoundError(application_id)
    return application


async def get_application(
    db: AsyncSession,
    user: CurrentUser,
    application_id: UUID,
    action: Action = Action.VIEW,
) -> Application:
    """
    Get an application the caller may access.

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        ForbiddenError: If the caller may not perform ``action`` on it
    """
    application = await _load(db, application_id)
    authorize(user, action, application)
    return application


async def get_application_by_number(
    db: AsyncSession,
    user: CurrentUser,
    application_no: str,
) -> Application:
    application = await repository.get_by_number(db, application_no)
    if not application:
        raise ApplicationNotFoundError(application_no)
    authorize(user, Action.VIEW, application)
    return application


async def list_applications(
    db: AsyncSession,
    user: CurrentUser,
    *,
    status: str | None = None,
    department_id: UUID | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Application], dict[str, int]]:
    """
    List applications visible to the caller.

    Admins see every application and may filter. Everyone else sees only
    their own applications, and filters are ignored.

    Returns:
        Tuple of (applications, pagination dict)
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    if user.is_admin:
        authorize(user, Action.LIST_ALL)
        applications, total = await repository.list_applications(
            db,
            status=status,
            department_id=department_id,
            search=search.strip() if search else None,
            page=page,
            limit=limit,
        )
    else:
        authorize(user, Action.LIST_OWN)
        applications, total = await repository.list_applications(
            db, user_id=user.uid, page=page, limit=limit
        )

    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": ceil(total / limit) if total else 0,
    }
    return applications, pagination


async def get_stats(db: AsyncSession) -> dict[str, int]:
    return await repository.get_stats(db)


# ============================================
# Updates
# ============================================


async def update_application(
    db: AsyncSession,
    user: CurrentUser,
    application_id: UUID,
    data: ApplicationUpdate,
) -> Application:
    """
    Amend an application.

    Owners may edit the content blocks until the application is approved.
    Admins may always edit them, and may also set ``status`` (approval,
    qualification, department) and ``examInfo``. Those go through the same
    lifecycle rules as the dedicated transition endpoints and are committed
    together. A change of approval notifies the owner after the commit.
    Payment fields are never accepted.

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        ForbiddenError: If the caller may not edit it
        ReadOnlyFieldError: If the body carries fields the caller may not set
        NotApprovedError: If a qualification or exam change needs approval
        DepartmentNotFoundError: If ``status.departmentId`` is unknown
    """
    application = await _load(db, application_id)

    if data.model_extra:
        raise ReadOnlyFieldError(list(data.model_extra))

    authorize(user, Action.VIEW, application)

    review_fields = [
        alias
        for field, alias in (("status", "status"), ("exam_info", "examInfo"))
        if getattr(data, field) is not None
    ]
    if review_fields:
        if not user.is_admin:
            raise ReadOnlyFieldError(review_fields)
        authorize(user, Action.REVIEW, application)

    changes = {
        field: _dump(block)
        for field in lifecycle.CONTENT_FIELDS
        if (block := getattr(data, field)) is not None
    }
    if not changes and not review_fields:
        return application

    status_update = data.status
    department_given = (
        status_update is not None and "department_id" in status_update.model_fields_set
    )
    if department_given and status_update.department_id is not None:
        department = await department_repository.get_by_id(db, status_update.department_id)
        if not department:
            raise DepartmentNotFoundError(status_update.department_id)

    now = _now()
    if changes:
        lifecycle.apply_content_update(application, changes, now, as_owner=not user.is_admin)

    approval_changed = False
    if status_update is not None:
        if status_update.is_approved is not None:
            approval_changed = lifecycle.apply_approval(
                application, status_update.is_approved, user.uid, now
            )
        if department_given:
            lifecycle.apply_department(application, status_update.department_id, now)
        if status_update.is_qualified is not None:
            lifecycle.apply_qualification(
                application,
                status_update.is_qualified,
                user.uid,
                now,
                require_approval=settings.require_approval_for_qualification,
            )

    exam = data.exam_info
    if exam is not None:
        lifecycle.apply_exam_schedule(
            application,
            now,
            center_name=exam.center_name,
            exam_date=exam.exam_date,
            exam_time=exam.exam_time,
            issue_hall_ticket=settings.issue_hall_ticket_on_schedule,
        )
        if exam.hall_ticket_issued and not application.hall_ticket_issued:
            lifecycle.apply_hall_ticket(application, now)

    application = await repository.save(db, application)

    logger.info(
        f"Application {application.application_no} updated by {user.uid}: "
        f"{sorted([*changes, *review_fields])}"
    )

    if approval_changed:
        await _notify_safely(db, application)

    return application


async def _notify_approval_change(db: AsyncSession, application: Application) -> None:
    owner = await UserRepository.get_by_uid(db, application.user_id)
    if owner is None:
        logger.warning(
            f"Owner {application.user_id} of application {application.application_no} not found; "
            "skipping notification"
        )
        return

    decision = "approved" if application.is_approved else "disapproved"
    await notification_service.notify_user(
        db,
        owner,
        f"Your application {application.application_no} has been {decision}.",
        metadata={
            "applicationId": str(application.id),
            "applicationNo": application.application_no,
            "statusChange": decision,
        },
    )


async def _notify_safely(db: AsyncSession, application: Application) -> None:
    try:
        await _notify_approval_change(db, application)
    except Exception as e:
        logger.error(f"Failed to notify owner of application {application.application_no}: {e}")


async def set_approval(
    db: AsyncSession,
    admin: CurrentUser,
    application_id: UUID,
    approved: bool,
) -> Application:
    """
    Approve or disapprove an application, notifying the owner on change.

    Raises:
        ApplicationNotFoundError: If it doesn't exist
    """
    application = await _load(db, application_id)
    authorize(admin, Action.REVIEW, application)

    changed = lifecycle.apply_approval(application, approved, admin.uid, _now())
    application = await repository.save(db, application)
    logger.info(
        f"Application {application.application_no} approval set to {approved} by {admin.uid}"
    )

    if changed:
        await _notify_safely(db, application)

    return application


async def set_qualification(
    db: AsyncSession,
    admin: CurrentUser,
    application_id: UUID,
    qualified: bool,
) -> Application:
    """
    Record the qualification decision.

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        NotApprovedError: If the application is not approved
    """
    application = await _load(db, application_id)
    authorize(admin, Action.REVIEW, application)

    lifecycle.apply_qualification(
        application,
        qualified,
        admin.uid,
        _now(),
        require_approval=settings.require_approval_for_qualification,
    )
    application = await repository.save(db, application)

    logger.info(
        f"Application {application.application_no} qualification set to {qualified} by {admin.uid}"
    )
    return application


async def assign_department(
    db: AsyncSession,
    admin: CurrentUser,
    application_id: UUID,
    department_id: UUID | None,
) -> Application:
    """
    Assign a department, or clear it with None.

    Raises:
        ApplicationNotFoundError: If the application doesn't exist
        DepartmentNotFoundError: If the department doesn't exist
    """
    application = await _load(db, application_id)
    authorize(admin, Action.REVIEW, application)

    if department_id is not None:
        department = await department_repository.get_by_id(db, department_id)
        if not department:
            raise DepartmentNotFoundError(department_id)

    lifecycle.apply_department(application, department_id, _now())
    application = await repository.save(db, application)

    logger.info(f"Application {application.application_no} assigned department {department_id}")
    return application


async def schedule_exam(
    db: AsyncSession,
    admin: CurrentUser,
    application_id: UUID,
    data: ExamScheduleRequest,
) -> Application:
    """
    Set exam centre, date and time.

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        NotApprovedError: If the application is not approved
    """
    application = await _load(db, application_id)
    authorize(admin, Action.REVIEW, application)

    lifecycle.apply_exam_schedule(
        application,
        _now(),
        center_name=data.center_name,
        exam_date=data.exam_date,
        exam_time=data.exam_time,
        issue_hall_ticket=settings.issue_hall_ticket_on_schedule,
    )
    application = await repository.save(db, application)

    logger.info(f"Exam scheduled for application {application.application_no} by {admin.uid}")
    return application


async def issue_hall_ticket(
    db: AsyncSession,
    admin: CurrentUser,
    application_id: UUID,
) -> Application:
    """
    Issue the hall ticket.

    Raises:
        ApplicationNotFoundError: If it doesn't exist
        NotApprovedError: If the application is not approved
    """
    application = await _load(db, application_id)
    authorize(admin, Action.REVIEW, application)

    lifecycle.apply_hall_ticket(application, _now())
    application = await repository.save(db, application)

    logger.info(f"Hall ticket issued for application {application.application_no}")
    return application
