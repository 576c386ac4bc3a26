"""
Application Models

Entrance examination applications.

Content blocks (personal, address, contact, education) are stored as JSONB
documents with camelCase keys, exactly as the API exchanges them. Payment,
review status and exam details are flat columns because they are filtered,
constrained or transitioned individually.
"""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from admissions.modules.shared import BaseModel, enum_values


class PaymentStatus(str, enum.Enum):
    """Status of the fee payment backing an application."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Application(BaseModel):
    """
    An applicant's entrance examination application.

    ``is_qualified`` is tri-state: None until an admin decides, then
    True or False. ``reviewed_at`` is None until an admin first acts.
    """

    __tablename__ = "applications"

    # Identity (immutable after creation)
    application_no: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    # Content blocks
    personal_info: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    address_info: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    contact_info: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    educational_info: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    # Payment (set once at creation)
    payment_transaction_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    payment_order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status", values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.COMPLETED,
    )

    # Review status
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_qualified: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    department_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Exam (populated after approval)
    exam_center_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    exam_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    exam_time: Mapped[str | None] = mapped_column(String(50), nullable=True)
    hall_ticket_issued: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hall_ticket_issued_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_applications_user_applied_at", "user_id", "applied_at"),
        Index("ix_applications_applied_at", "applied_at"),
        Index("ix_applications_department_id", "department_id"),
        Index("ix_applications_review", "is_approved", "is_qualified", "reviewed_at"),
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, application_no={self.application_no})>"
