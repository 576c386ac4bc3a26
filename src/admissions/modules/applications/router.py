"""
Applications Router

Endpoints:
- POST /applications - Submit an application (payment confirmation required)
- GET /applications - List (admins: all, filtered; others: own)
- GET /applications/stats - Dashboard counts (admin)
- GET /applications/by-number/{application_no} - Lookup by number
- GET /applications/{id} - Get one
- PATCH /applications/{id} - Amend content blocks
- POST /applications/{id}/approval|qualification|department|exam|hall-ticket
  - Admin review transitions
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_admin_user, get_current_user
from admissions.core.database import get_db
from admissions.core.errors import ServiceError, internal_error_response, to_http_exception
from admissions.core.rate_limit import RATE_LIMIT_ADMIN_ACTION, enforce_rate_limit
from admissions.modules.applications import service
from admissions.modules.applications.lifecycle import state_of
from admissions.modules.applications.models import Application
from admissions.modules.applications.schemas import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    ApprovalRequest,
    DepartmentAssignment,
    ExamInfoResponse,
    ExamScheduleRequest,
    PaginationInfo,
    PaymentInfoResponse,
    QualificationRequest,
    StatsResponse,
    StatusFilter,
    StatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(application: Application) -> ApplicationResponse:
    """Convert the flat ORM record into the nested API shape."""
    return ApplicationResponse(
        id=application.id,
        application_no=application.application_no,
        user_id=application.user_id,
        personal_info=application.personal_info or {},
        address_info=application.address_info or {},
        contact_info=application.contact_info or {},
        educational_info=application.educational_info or {},
        payment_info=PaymentInfoResponse(
            transaction_id=application.payment_transaction_id,
            order_id=application.payment_order_id,
            amount=application.payment_amount,
            date=application.payment_date,
            status=application.payment_status,
        ),
        status=StatusResponse(
            is_approved=application.is_approved,
            is_qualified=application.is_qualified,
            department_id=application.department_id,
            applied_at=application.applied_at,
            updated_at=application.updated_at,
            reviewed_by=application.reviewed_by,
            reviewed_at=application.reviewed_at,
            state=state_of(application),
        ),
        exam_info=ExamInfoResponse(
            center_name=application.exam_center_name,
            exam_date=application.exam_date,
            exam_time=application.exam_time,
            hall_ticket_issued=application.hall_ticket_issued,
            hall_ticket_issued_at=application.hall_ticket_issued_at,
        ),
    )


# ============================================
# Submission and listing
# ============================================


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Application",
    description="""
Submit an entrance examination application.

The body must carry the payment confirmation returned by the checkout
widget (`orderId`, `paymentId`, `signature`) and the amount paid. The
signature is verified again server-side. A payment can back only one
application.

The new application is `pending` and receives the next application number.
""",
    responses={
        400: {"description": "Missing required fields or invalid payment"},
        401: {"description": "Unauthorized - invalid or missing token"},
        409: {"description": "Payment already used"},
    },
)
async def submit_application(
    data: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ApplicationResponse:
    try:
        application = await service.submit_application(db, user, data)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error submitting application: {e}")
        raise internal_error_response() from e


@router.get(
    "",
    response_model=ApplicationListResponse,
    summary="List Applications",
    description="""
Admins receive every application, newest first, filtered by `status`,
`departmentId` and a case-insensitive `search` over application number,
name, mobile number and email.

Other users receive only their own applications; filters are ignored.
""",
)
async def list_applications(
    status_filter: StatusFilter | None = Query(None, alias="status"),
    department_id: UUID | None = Query(None, alias="departmentId"),
    search: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=service.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ApplicationListResponse:
    try:
        applications, pagination = await service.list_applications(
            db,
            user,
            status=status_filter,
            department_id=department_id,
            search=search,
            page=page,
            limit=limit,
        )
        return ApplicationListResponse(
            applications=[_to_response(a) for a in applications],
            pagination=PaginationInfo(**pagination),
        )
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error listing applications: {e}")
        raise internal_error_response() from e


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Application Statistics",
    description="Counts of applications per review state. **Access:** Admin only",
)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> StatsResponse:
    try:
        return StatsResponse(**await service.get_stats(db))
    except Exception as e:
        logger.exception(f"Error computing application stats: {e}")
        raise internal_error_response() from e


@router.get(
    "/by-number/{application_no}",
    response_model=ApplicationResponse,
    summary="Get Application by Number",
)
async def get_application_by_number(
    application_no: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ApplicationResponse:
    try:
        application = await service.get_application_by_number(db, user, application_no)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error fetching application {application_no}: {e}")
        raise internal_error_response() from e


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    summary="Get Application",
    responses={
        403: {"description": "Not your application"},
        404: {"description": "Application not found"},
    },
)
async def get_application(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ApplicationResponse:
    try:
        application = await service.get_application(db, user, application_id)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error fetching application {application_id}: {e}")
        raise internal_error_response() from e


@router.patch(
    "/{application_id}",
    response_model=ApplicationResponse,
    summary="Update Application",
    description="""
Amend any of `personalInfo`, `addressInfo`, `contactInfo` and
`educationalInfo`. Keys inside a block are merged into the stored block.
Owners may edit only until the application is approved.

Admins may also send `status` (`isApproved`, `isQualified`, `departmentId`)
and `examInfo` (`centerName`, `examDate`, `examTime`, `hallTicketIssued`).
These follow the same rules as the transition endpoints, and a change of
`isApproved` notifies the applicant. Payment fields are read-only.
""",
    responses={
        403: {"description": "Application frozen, not yours, not approved, or read-only fields"},
        404: {"description": "Application not found"},
    },
)
async def update_application(
    application_id: UUID,
    data: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ApplicationResponse:
    try:
        application = await service.update_application(db, user, application_id, data)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating application {application_id}: {e}")
        raise internal_error_response() from e


# ============================================
# Admin review transitions
# ============================================


@router.post(
    "/{application_id}/approval",
    response_model=ApplicationResponse,
    summary="Approve or Disapprove",
    description="""
Set the approval decision. When the decision changes, the applicant is
notified by email and, if they have a phone number, by SMS.

**Access:** Admin only
""",
)
async def set_approval(
    application_id: UUID,
    data: ApprovalRequest,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ApplicationResponse:
    await enforce_rate_limit(f"admin:applications:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        application = await service.set_approval(db, admin, application_id, data.approved)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error setting approval on {application_id}: {e}")
        raise internal_error_response() from e


@router.post(
    "/{application_id}/qualification",
    response_model=ApplicationResponse,
    summary="Qualify or Disqualify",
    description="Record the qualification decision. Requires an approved application.",
    responses={403: {"description": "Application not approved"}},
)
async def set_qualification(
    application_id: UUID,
    data: QualificationRequest,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ApplicationResponse:
    await enforce_rate_limit(f"admin:applications:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        application = await service.set_qualification(db, admin, application_id, data.qualified)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error setting qualification on {application_id}: {e}")
        raise internal_error_response() from e


@router.post(
    "/{application_id}/department",
    response_model=ApplicationResponse,
    summary="Assign Department",
    description="Assign a department, or clear it with `departmentId: null`.",
    responses={404: {"description": "Application or department not found"}},
)
async def assign_department(
    application_id: UUID,
    data: DepartmentAssignment,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ApplicationResponse:
    await enforce_rate_limit(f"admin:applications:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        application = await service.assign_department(
            db, admin, application_id, data.department_id
        )
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error assigning department on {application_id}: {e}")
        raise internal_error_response() from e


@router.post(
    "/{application_id}/exam",
    response_model=ApplicationResponse,
    summary="Schedule Exam",
    description="""
Merge exam centre, date and time into the application. Setting a date or
time also issues the hall ticket unless disabled in configuration.
""",
    responses={403: {"description": "Application not approved"}},
)
async def schedule_exam(
    application_id: UUID,
    data: ExamScheduleRequest,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ApplicationResponse:
    await enforce_rate_limit(f"admin:applications:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        application = await service.schedule_exam(db, admin, application_id, data)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error scheduling exam on {application_id}: {e}")
        raise internal_error_response() from e


@router.post(
    "/{application_id}/hall-ticket",
    response_model=ApplicationResponse,
    summary="Issue Hall Ticket",
    responses={403: {"description": "Application not approved"}},
)
async def issue_hall_ticket(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ApplicationResponse:
    await enforce_rate_limit(f"admin:applications:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        application = await service.issue_hall_ticket(db, admin, application_id)
        return _to_response(application)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error issuing hall ticket on {application_id}: {e}")
        raise internal_error_response() from e
