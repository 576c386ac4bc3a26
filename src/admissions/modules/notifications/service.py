"""
Notifications Service Layer

Creates notifications and hands them to the matching channel.

Delivery rules:
- A notification whose send time has arrived is dispatched as soon as it
  is enqueued; later ones wait for dispatch_due().
- If the user has no contact for the channel (no email for EMAIL, no
  phone for SMS/WHATSAPP) the notification stays pending.
- A channel error marks the notification failed with the error text in
  its metadata. There is no automatic retry.
- Success marks it sent, stamps sent_at and records the delivery id.
  A send that was only logged because the provider is not configured is
  marked sent with ``simulated`` set in its metadata.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.errors import DeliveryError, NotFoundError
from admissions.modules.notifications import repository
from admissions.modules.notifications.channels import get_channel
from admissions.modules.notifications.models import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from admissions.modules.users.models import User
from admissions.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

DUE_BATCH_SIZE = 100


class UserNotFoundError(NotFoundError):
    """Raised when a notification targets an unknown user."""

    def __init__(self, uid: str):
        super().__init__("User", uid)


async def _load_user(db: AsyncSession, user_id: str) -> User:
    user = await UserRepository.get_by_uid(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def dispatch(
    db: AsyncSession,
    notification: Notification,
    user: User | None = None,
) -> Notification:
    """
    Attempt delivery of a pending notification.

    Args:
        db: Database session
        notification: The notification; non-pending ones are returned untouched
        user: The recipient, if already loaded

    Returns:
        The notification in its new state
    """
    if notification.status != NotificationStatus.PENDING:
        return notification

    if user is None:
        user = await UserRepository.get_by_uid(db, notification.user_id)
        if user is None:
            logger.warning(
                f"Notification {notification.id} targets unknown user {notification.user_id}"
            )
            return notification

    channel = get_channel(notification.type)
    contact = channel.contact(user)
    if not contact:
        logger.info(
            f"Notification {notification.id} left pending: user {user.uid} "
            f"has no {notification.type.value} contact"
        )
        return notification

    try:
        delivery_id = await channel.send(contact, notification.message)
    except DeliveryError as e:
        logger.error(f"Notification {notification.id} failed: {e}")
        return await repository.update_status(
            db, notification, NotificationStatus.FAILED, {"error": str(e)}
        )

    meta = {
        channel.delivery_id_key: delivery_id,
        "sendTime": datetime.now(UTC).isoformat(),
    }
    if delivery_id is None:
        # Provider not configured; the message was only logged
        meta["simulated"] = True
        logger.warning(f"Notification {notification.id} simulated; provider not configured")
    else:
        logger.info(f"Notification {notification.id} sent via {notification.type.value}")

    return await repository.update_status(db, notification, NotificationStatus.SENT, meta)


async def enqueue(
    db: AsyncSession,
    *,
    user_id: str,
    type: NotificationType,
    message: str,
    send_at: datetime | None = None,
    metadata: dict | None = None,
    user: User | None = None,
) -> Notification:
    """
    Record a notification and dispatch it immediately if it is due.

    Args:
        db: Database session
        user_id: Recipient uid
        type: Channel
        message: Message body
        send_at: When to send; defaults to now
        metadata: Free-form context stored with the notification
        user: The recipient, if already loaded

    Returns:
        The notification after any immediate dispatch

    Raises:
        UserNotFoundError: If the recipient does not exist
    """
    if user is None:
        user = await _load_user(db, user_id)

    now = datetime.now(UTC)
    send_at = send_at or now
    if send_at.tzinfo is None:
        send_at = send_at.replace(tzinfo=UTC)

    notification = await repository.create(
        db,
        user_id=user_id,
        type=type,
        message=message,
        send_at=send_at,
        meta=metadata,
    )
    logger.info(
        f"Queued {type.value} notification {notification.id} for user {user_id} "
        f"at {send_at.isoformat()}"
    )

    if send_at <= now:
        notification = await dispatch(db, notification, user)

    return notification


async def notify_user(
    db: AsyncSession,
    user: User,
    message: str,
    metadata: dict | None = None,
) -> list[Notification]:
    """
    Send ``message`` to a user by email, and by SMS when they have a phone.

    Returns:
        The notifications created
    """
    notifications = [
        await enqueue(
            db,
            user_id=user.uid,
            type=NotificationType.EMAIL,
            message=message,
            metadata=metadata,
            user=user,
        )
    ]
    if user.phone_number:
        notifications.append(
            await enqueue(
                db,
                user_id=user.uid,
                type=NotificationType.SMS,
                message=message,
                metadata=metadata,
                user=user,
            )
        )
    return notifications


async def dispatch_due(db: AsyncSession, limit: int = DUE_BATCH_SIZE) -> dict[str, int]:
    """
    Dispatch pending notifications whose send time has arrived.

    Intended for an external scheduler (see scripts/dispatch_due_notifications.py).

    Walks the due notifications oldest first in pages of ``limit``. Rows
    left pending (no contact on file) are passed over with a cursor, so
    they never hide newer deliverable ones. The run ends with the page in
    which ``limit`` delivery attempts have been made, or when nothing due
    is left.

    Returns:
        Counts of notifications by outcome: sent, failed, pending
    """
    limit = max(limit, 1)
    due_before = datetime.now(UTC)
    counts = {"sent": 0, "failed": 0, "pending": 0}
    cursor = None

    while True:
        page = await repository.list_pending(
            db, due_before=due_before, after=cursor, limit=limit
        )
        for notification in page:
            result = await dispatch(db, notification)
            counts[result.status.value] += 1

        if len(page) < limit or counts["sent"] + counts["failed"] >= limit:
            break
        cursor = (page[-1].send_at, page[-1].id)

    logger.info(f"Dispatched due notifications: {counts}")
    return counts


async def list_for_user(db: AsyncSession, user_id: str) -> list[Notification]:
    return await repository.list_for_user(db, user_id)


async def list_pending(db: AsyncSession) -> list[Notification]:
    return await repository.list_pending(db)
