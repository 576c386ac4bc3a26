"""
SMS and WhatsApp Service using Twilio

The Twilio REST client is synchronous, so calls run in a worker thread
bounded by EXTERNAL_CALL_TIMEOUT_SECONDS.
"""

import asyncio
import logging
from functools import lru_cache

from twilio.rest import Client

from admissions.core.config import settings
from admissions.core.errors import DeliveryError

logger = logging.getLogger(__name__)


@lru_cache
def _get_client(account_sid: str, auth_token: str) -> Client:
    return Client(account_sid, auth_token)


def twilio_client() -> Client | None:
    """Return a Twilio client, or None when credentials are not configured."""
    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        return None
    return _get_client(settings.twilio_account_sid, settings.twilio_auth_token)


async def _create_message(body: str, from_: str, to: str) -> str:
    client = twilio_client()
    if client is None:
        raise DeliveryError("Twilio client not configured")

    try:
        message = await asyncio.wait_for(
            asyncio.to_thread(client.messages.create, body=body, from_=from_, to=to),
            timeout=settings.external_call_timeout_seconds,
        )
    except TimeoutError as e:
        logger.error(f"Timed out sending message to {to}")
        raise DeliveryError("Messaging provider timed out") from e
    except Exception as e:
        logger.error(f"Failed to send message to {to}: {e}")
        raise DeliveryError(str(e)) from e

    return message.sid


async def send_sms(to_phone: str, body: str) -> str:
    """
    Send an SMS.

    Returns:
        The Twilio message sid

    Raises:
        DeliveryError: If Twilio is not configured or the send failed
    """
    if not settings.twilio_phone_number:
        raise DeliveryError("TWILIO_PHONE_NUMBER not configured")

    sid = await _create_message(body, settings.twilio_phone_number, to_phone)
    logger.info(f"SMS sent to {to_phone}, sid: {sid}")
    return sid


def _whatsapp_address(number: str) -> str:
    # WhatsApp addresses use the bare international number
    return f"whatsapp:{number.removeprefix('+')}"


async def send_whatsapp(to_phone: str, body: str) -> str:
    """
    Send a WhatsApp message.

    Returns:
        The Twilio message sid

    Raises:
        DeliveryError: If Twilio is not configured or the send failed
    """
    if not settings.twilio_whatsapp_number:
        raise DeliveryError("TWILIO_WHATSAPP_NUMBER not configured")

    sid = await _create_message(
        body,
        f"whatsapp:{settings.twilio_whatsapp_number}",
        _whatsapp_address(to_phone),
    )
    logger.info(f"WhatsApp message sent to {to_phone}, sid: {sid}")
    return sid
