"""
Payments Service Layer

Application fee collection through Razorpay.

Flow:
1. create_order() registers an order with the gateway for the fee amount.
2. The client completes checkout and receives (order_id, payment_id,
   signature) from the gateway.
3. verify_payment() recomputes HMAC-SHA256("{order_id}|{payment_id}")
   with the gateway secret and compares it in constant time.

Submitting an application re-runs step 3 server-side, so a client cannot
create an application with a payment it did not make.
"""

import asyncio
import hashlib
import hmac
import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Any

import razorpay

from admissions.core.config import settings
from admissions.core.errors import BadRequestError, InternalError

logger = logging.getLogger(__name__)

ORDER_PURPOSE = "Entrance Examination Application Fee"


class PaymentGatewayError(InternalError):
    """Raised when the gateway is unconfigured, unreachable or times out."""

    def __init__(self, message: str = "Failed to create payment order. Please try again."):
        super().__init__(message=message, error_code="PAYMENT_GATEWAY_ERROR")


class InvalidPaymentError(BadRequestError):
    """Raised when payment details are missing or the signature does not match."""

    def __init__(self, message: str, error_code: str = "INVALID_PAYMENT"):
        super().__init__(message=message, error_code=error_code)


@lru_cache
def _get_client(key_id: str, key_secret: str) -> razorpay.Client:
    return razorpay.Client(auth=(key_id, key_secret))


def to_minor_units(amount: Decimal) -> int:
    """Convert a rupee amount to paise."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def check_fee_amount(amount: Decimal) -> None:
    """
    Validate an amount against the configured application fee.

    Raises:
        InvalidPaymentError: If the amount is not positive, or differs from the
            fee while ENFORCE_FEE_SCHEDULE is on
    """
    if amount <= 0:
        raise InvalidPaymentError("Amount must be greater than zero.", "INVALID_AMOUNT")

    if settings.enforce_fee_schedule and amount != settings.application_fee_amount:
        logger.warning(f"Rejected fee amount {amount}; expected {settings.application_fee_amount}")
        raise InvalidPaymentError(
            f"The application fee is {settings.application_fee_amount}.",
            "INVALID_AMOUNT",
        )


async def create_order(
    amount: Decimal,
    user_uid: str,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a gateway order for the application fee.

    Args:
        amount: Fee in rupees
        user_uid: The paying user's uid, recorded in the order notes
        metadata: Extra notes to attach to the order

    Returns:
        Dict with order_id, amount (paise), currency and key

    Raises:
        InvalidPaymentError: If the amount is not acceptable
        PaymentGatewayError: If the gateway is unavailable
    """
    check_fee_amount(amount)

    if not settings.payments_configured:
        logger.error("Razorpay credentials not configured")
        raise PaymentGatewayError("Payment service not configured. Please contact support.")

    order_data = {
        "amount": to_minor_units(amount),
        "currency": settings.payment_currency,
        "receipt": f"receipt_{int(time.time() * 1000)}",
        "notes": {
            **(metadata or {}),
            "userId": user_uid,
            "purpose": ORDER_PURPOSE,
        },
    }

    client = _get_client(settings.razorpay_key_id, settings.razorpay_key_secret)
    try:
        order = await asyncio.wait_for(
            asyncio.to_thread(client.order.create, data=order_data),
            timeout=settings.external_call_timeout_seconds,
        )
    except TimeoutError as e:
        logger.error(f"Razorpay order creation timed out for user {user_uid}")
        raise PaymentGatewayError() from e
    except Exception as e:
        logger.error(f"Razorpay order creation failed for user {user_uid}: {e}")
        raise PaymentGatewayError() from e

    logger.info(f"Created Razorpay order {order['id']} for user {user_uid}")
    return {
        "order_id": order["id"],
        "amount": order["amount"],
        "currency": order.get("currency", settings.payment_currency),
        "key": settings.razorpay_key_id,
    }


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of ``{order_id}|{payment_id}``."""
    message = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def verify_signature(
    order_id: str,
    payment_id: str,
    signature: str,
    secret: str | None = None,
) -> bool:
    """Constant-time check of a gateway payment signature."""
    expected = compute_signature(order_id, payment_id, secret or settings.razorpay_key_secret)
    # Bytes, so a non-ASCII signature is a mismatch rather than a TypeError
    return hmac.compare_digest(expected.encode(), signature.encode("utf-8"))


def verify_payment(order_id: str, payment_id: str, signature: str) -> None:
    """
    Verify a payment confirmation.

    Raises:
        InvalidPaymentError: If a field is missing or the signature does not match
        PaymentGatewayError: If the gateway secret is not configured
    """
    if not order_id or not payment_id or not signature:
        raise InvalidPaymentError("Missing required payment details.", "MISSING_PAYMENT_FIELDS")

    if not settings.razorpay_key_secret:
        logger.error("Razorpay secret not configured; cannot verify payments")
        raise PaymentGatewayError("Payment service not configured. Please contact support.")

    if not verify_signature(order_id, payment_id, signature):
        logger.warning(f"Invalid payment signature for order {order_id}")
        raise InvalidPaymentError("Invalid payment signature.", "INVALID_PAYMENT_SIGNATURE")

    logger.info(f"Verified payment {payment_id} for order {order_id}")
