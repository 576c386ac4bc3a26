"""
Application Schemas

Request and response bodies for the applications API. Content blocks are
loose: every field is optional at the schema level and the service checks
the ones a submission cannot do without.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import ConfigDict, Field

from admissions.modules.applications.lifecycle import ApplicationState
from admissions.modules.applications.models import PaymentStatus
from admissions.modules.shared.schemas import CamelModel

# ============================================
# Content blocks
# ============================================


class PersonalInfo(CamelModel):
    name: str | None = Field(None, max_length=200)
    father_name: str | None = Field(None, max_length=200)
    mother_name: str | None = Field(None, max_length=200)
    guardian_name: str | None = Field(None, max_length=200)
    date_of_birth: str | None = Field(None, max_length=20)
    photo: str | None = None


class AddressInfo(CamelModel):
    place: str | None = Field(None, max_length=200)
    mahallu: str | None = Field(None, max_length=200)
    post_office: str | None = Field(None, max_length=200)
    pin_code: str | None = Field(None, max_length=10)
    panchayath: str | None = Field(None, max_length=200)
    constituency: str | None = Field(None, max_length=200)
    district: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)


class ContactInfo(CamelModel):
    mobile_number: str | None = Field(None, max_length=20)
    candidate_mobile: str | None = Field(None, max_length=20)
    whatsapp_number: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=255)


class EducationalInfo(CamelModel):
    madrasa: str | None = Field(None, max_length=200)
    school: str | None = Field(None, max_length=200)
    reg_no: str | None = Field(None, max_length=50)
    medium: str | None = Field(None, max_length=50)
    hifz_completed: bool | None = None


# ============================================
# Requests
# ============================================


class PaymentConfirmation(CamelModel):
    """What the checkout widget returned, plus the amount paid in rupees."""

    order_id: str = ""
    payment_id: str = ""
    signature: str = ""
    amount: Decimal = Field(..., gt=0)


class ApplicationCreate(CamelModel):
    """Request body for POST /applications."""

    personal_info: PersonalInfo
    address_info: AddressInfo = Field(default_factory=AddressInfo)
    contact_info: ContactInfo
    educational_info: EducationalInfo = Field(default_factory=EducationalInfo)
    payment: PaymentConfirmation


class StatusUpdate(CamelModel):
    """Review fields an admin may set through PATCH. ``departmentId: null`` clears it."""

    is_approved: bool | None = None
    is_qualified: bool | None = None
    department_id: UUID | None = None


class ExamInfoUpdate(CamelModel):
    center_name: str | None = Field(None, min_length=1, max_length=200)
    exam_date: date | None = None
    exam_time: str | None = Field(None, min_length=1, max_length=50)
    hall_ticket_issued: Literal[True] | None = None


class ApplicationUpdate(CamelModel):
    """
    Request body for PATCH /applications/{id}.

    Everyone may send the content blocks; ``status`` and ``examInfo`` are
    for admins. Unknown keys such as ``paymentInfo`` are kept so the
    service can reject them explicitly.
    """

    model_config = ConfigDict(extra="allow")

    personal_info: PersonalInfo | None = None
    address_info: AddressInfo | None = None
    contact_info: ContactInfo | None = None
    educational_info: EducationalInfo | None = None
    status: StatusUpdate | None = None
    exam_info: ExamInfoUpdate | None = None


class ApprovalRequest(CamelModel):
    approved: bool


class QualificationRequest(CamelModel):
    qualified: bool


class DepartmentAssignment(CamelModel):
    department_id: UUID | None = None


class ExamScheduleRequest(CamelModel):
    center_name: str | None = Field(None, min_length=1, max_length=200)
    exam_date: date | None = None
    exam_time: str | None = Field(None, min_length=1, max_length=50)


StatusFilter = Literal["pending", "approved", "disapproved", "qualified", "disqualified"]


# ============================================
# Responses
# ============================================


class PaymentInfoResponse(CamelModel):
    transaction_id: str
    order_id: str
    amount: Decimal
    date: datetime
    status: PaymentStatus


class StatusResponse(CamelModel):
    is_approved: bool
    is_qualified: bool | None
    department_id: UUID | None
    applied_at: datetime
    updated_at: datetime
    reviewed_by: str | None
    reviewed_at: datetime | None
    state: ApplicationState


class ExamInfoResponse(CamelModel):
    center_name: str | None
    exam_date: date | None
    exam_time: str | None
    hall_ticket_issued: bool
    hall_ticket_issued_at: datetime | None


class ApplicationResponse(CamelModel):
    id: UUID
    application_no: str
    user_id: str
    personal_info: dict[str, Any]
    address_info: dict[str, Any]
    contact_info: dict[str, Any]
    educational_info: dict[str, Any]
    payment_info: PaymentInfoResponse
    status: StatusResponse
    exam_info: ExamInfoResponse


class PaginationInfo(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ApplicationListResponse(CamelModel):
    applications: list[ApplicationResponse]
    pagination: PaginationInfo


class StatsResponse(CamelModel):
    total: int
    pending: int
    approved: int
    disapproved: int
    qualified: int
    disqualified: int
    hall_tickets_issued: int
