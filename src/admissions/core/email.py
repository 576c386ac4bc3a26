"""
Email Service using Resend

Sends applicant notifications by email.
"""

import asyncio
import logging
from html import escape

import resend

from admissions.core.config import settings
from admissions.core.errors import DeliveryError

logger = logging.getLogger(__name__)

NOTIFICATION_SUBJECT = "Entrance Examination - Notification"


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
    text_content: str | None = None,
) -> str | None:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email
        text_content: Optional plain-text alternative

    Returns:
        The provider's message id, or None when RESEND_API_KEY is unset and
        the email was only logged

    Raises:
        DeliveryError: If the provider rejected the message or timed out
    """
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return None

    resend.api_key = settings.resend_api_key
    params: resend.Emails.SendParams = {
        "from": settings.email_from,
        "to": [to_email],
        "subject": subject,
        "html": html_content,
    }
    if text_content:
        params["text"] = text_content

    try:
        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.wait_for(
            asyncio.to_thread(resend.Emails.send, params),
            timeout=settings.external_call_timeout_seconds,
        )
    except TimeoutError as e:
        logger.error(f"Timed out sending email to {to_email}")
        raise DeliveryError("Email provider timed out") from e
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        raise DeliveryError(str(e)) from e

    logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
    return email["id"]


def render_notification_email(message: str) -> str:
    """Wrap a plain notification message in the standard HTML layout."""
    safe_message = escape(message)
    safe_title = escape(settings.exam_title.title())
    safe_institution = escape(settings.institution_name)

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ color: #333; margin-bottom: 16px; }}
            .footer {{ margin-top: 32px; padding-top: 16px; border-top: 1px solid #e5e7eb; color: #666; font-size: 12px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h2 class="header">{safe_title}</h2>

            <p>{safe_message}</p>

            <div class="footer">
                <p>This is an automated message. Please do not reply to this email.</p>
                <p>{safe_institution}</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_notification_email(to_email: str, message: str) -> str | None:
    """Send a notification message as an email."""
    return await send_email(
        to_email=to_email,
        subject=NOTIFICATION_SUBJECT,
        html_content=render_notification_email(message),
        text_content=message,
    )
