"""
Notification Models

Outbound messages to applicants, tracked from pending to a terminal
sent or failed status.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from admissions.modules.shared import BaseModel, enum_values


class NotificationType(str, enum.Enum):
    """Delivery channel."""

    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"


class NotificationStatus(str, enum.Enum):
    """Delivery status. SENT and FAILED are terminal."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Notification(BaseModel):
    """A single message to one user over one channel."""

    __tablename__ = "notifications"

    # Owner uid (matches users.uid)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type", values_callable=enum_values),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[NotificationStatus] = mapped_column(
        Enum(NotificationStatus, name="notification_status", values_callable=enum_values),
        nullable=False,
        default=NotificationStatus.PENDING,
    )

    send_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # "metadata" is reserved on declarative classes
    meta: Mapped[dict] = mapped_column("metadata", JSONB, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_notifications_user_send_at", "user_id", "send_at"),
        Index("ix_notifications_status_send_at", "status", "send_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type.value}, status={self.status.value})>"
