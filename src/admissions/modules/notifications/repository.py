"""
Notification Repository

Database operations for notifications.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification, NotificationStatus, NotificationType


async def create(
    db: AsyncSession,
    *,
    user_id: str,
    type: NotificationType,
    message: str,
    send_at: datetime,
    meta: dict | None = None,
) -> Notification:
    """Create a pending notification."""
    notification = Notification(
        user_id=user_id,
        type=type,
        message=message,
        status=NotificationStatus.PENDING,
        send_at=send_at,
        meta=dict(meta or {}),
    )

    db.add(notification)
    await db.commit()
    await db.refresh(notification)

    return notification


async def list_for_user(db: AsyncSession, user_id: str) -> list[Notification]:
    """A user's notifications, newest send time first."""
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.send_at.desc())
    )
    return list(result.scalars().all())


async def list_pending(
    db: AsyncSession,
    *,
    due_before: datetime | None = None,
    after: tuple[datetime, UUID] | None = None,
    limit: int | None = None,
) -> list[Notification]:
    """
    Pending notifications, oldest send time first.

    Args:
        due_before: Only include notifications whose send_at has arrived
        after: Keyset cursor; only rows after this (send_at, id) pair
        limit: Cap on rows returned
    """
    query = select(Notification).where(Notification.status == NotificationStatus.PENDING)
    if due_before is not None:
        query = query.where(Notification.send_at <= due_before)
    if after is not None:
        query = query.where(tuple_(Notification.send_at, Notification.id) > tuple_(*after))
    query = query.order_by(Notification.send_at.asc(), Notification.id.asc())
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def update_status(
    db: AsyncSession,
    notification: Notification,
    status: NotificationStatus,
    meta_updates: dict | None = None,
) -> Notification:
    """
    Move a notification to ``status``, merging ``meta_updates`` into its
    metadata. Entering SENT stamps sent_at.
    """
    notification.status = status
    if meta_updates:
        # Reassign so the JSONB change is detected
        notification.meta = {**(notification.meta or {}), **meta_updates}
    if status == NotificationStatus.SENT:
        notification.sent_at = datetime.now(UTC)

    await db.commit()
    await db.refresh(notification)

    return notification
