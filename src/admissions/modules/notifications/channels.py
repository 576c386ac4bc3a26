"""
Notification Channels

Maps each notification type to the contact field it needs on the user
record, the sender that delivers it, and the metadata key that records the
provider's delivery id.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from admissions.core import email, sms
from admissions.modules.notifications.models import NotificationType
from admissions.modules.users.models import User


@dataclass(frozen=True)
class Channel:
    contact: Callable[[User], str | None]
    send: Callable[[str, str], Awaitable[str | None]]
    delivery_id_key: str


async def _send_email(to: str, message: str) -> str | None:
    return await email.send_notification_email(to, message)


async def _send_sms(to: str, message: str) -> str | None:
    return await sms.send_sms(to, message)


async def _send_whatsapp(to: str, message: str) -> str | None:
    return await sms.send_whatsapp(to, message)


CHANNELS: dict[NotificationType, Channel] = {
    NotificationType.EMAIL: Channel(
        contact=lambda user: user.email,
        send=_send_email,
        delivery_id_key="emailId",
    ),
    NotificationType.SMS: Channel(
        contact=lambda user: user.phone_number,
        send=_send_sms,
        delivery_id_key="smsId",
    ),
    NotificationType.WHATSAPP: Channel(
        contact=lambda user: user.phone_number,
        send=_send_whatsapp,
        delivery_id_key="whatsappId",
    ),
}


def get_channel(notification_type: NotificationType) -> Channel:
    return CHANNELS[notification_type]
