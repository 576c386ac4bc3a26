"""
Notification Schemas
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from admissions.modules.notifications.models import NotificationStatus, NotificationType
from admissions.modules.shared.schemas import CamelModel


class NotificationCreate(CamelModel):
    """Request body for POST /notifications."""

    user_id: str = Field(..., min_length=1, max_length=128)
    type: NotificationType
    message: str = Field(..., min_length=1, max_length=1600)
    send_at: datetime | None = None
    metadata: dict[str, Any] | None = None


class NotificationResponse(CamelModel):
    id: UUID
    user_id: str
    type: NotificationType
    message: str
    status: NotificationStatus
    send_at: datetime
    sent_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="meta")


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]
