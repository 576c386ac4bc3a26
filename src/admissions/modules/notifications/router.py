"""
Notifications Router

Endpoints:
- POST /notifications - Admin sends (or schedules) a notification
- GET /notifications - Own notifications; admins may filter by pending
  status or by user
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_admin_user, get_current_user
from admissions.core.database import get_db
from admissions.core.errors import ServiceError, internal_error_response, to_http_exception
from admissions.core.rate_limit import RATE_LIMIT_NOTIFICATION_SEND, enforce_rate_limit
from admissions.modules.notifications import service
from admissions.modules.notifications.schemas import (
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send Notification",
    description="""
Create a notification for a user.

If `sendAt` is omitted or already past, delivery is attempted immediately
and the returned status reflects the outcome (`sent`, `failed`, or
`pending` when the user has no contact for the channel).

**Access:** Admin only
""",
    responses={
        401: {"description": "Unauthorized - invalid or missing token"},
        403: {"description": "Forbidden - not an admin"},
        404: {"description": "User not found"},
    },
)
async def create_notification(
    data: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> NotificationResponse:
    await enforce_rate_limit(f"admin:notifications:{admin.uid}", RATE_LIMIT_NOTIFICATION_SEND)

    try:
        notification = await service.enqueue(
            db,
            user_id=data.user_id,
            type=data.type,
            message=data.message,
            send_at=data.send_at,
            metadata=data.metadata,
        )
        logger.info(f"Admin {admin.uid} created notification {notification.id}")
        return NotificationResponse.model_validate(notification)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error creating notification: {e}")
        raise internal_error_response() from e


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List Notifications",
    description="""
Non-admins always receive their own notifications, newest first.

Admins may pass `pending=true` for every pending notification, or
`userId` for one user's notifications.
""",
)
async def list_notifications(
    pending: bool = Query(False, description="Admin only: list all pending notifications"),
    user_id: str | None = Query(None, alias="userId", description="Admin only: filter by user"),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> NotificationListResponse:
    try:
        if user.is_admin and pending:
            notifications = await service.list_pending(db)
        elif user.is_admin and user_id:
            notifications = await service.list_for_user(db, user_id)
        else:
            notifications = await service.list_for_user(db, user.uid)

        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications]
        )
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error listing notifications: {e}")
        raise internal_error_response() from e
