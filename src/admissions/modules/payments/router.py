"""
Payments Router

Both endpoints require an authenticated user and are rate limited per user.
"""

import logging

from fastapi import APIRouter, Depends

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.errors import ServiceError, internal_error_response, to_http_exception
from admissions.core.rate_limit import RATE_LIMIT_PAYMENT, enforce_rate_limit
from admissions.modules.payments import service
from admissions.modules.payments.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    summary="Create Payment Order",
    responses={
        400: {"description": "Amount missing, non-positive, or not the application fee"},
        429: {"description": "Too many requests"},
        500: {"description": "Payment gateway unavailable"},
    },
)
async def create_order(
    data: CreateOrderRequest,
    user: CurrentUser = Depends(get_current_user),
) -> CreateOrderResponse:
    """Create a gateway order for the application fee (amount in rupees)."""
    await enforce_rate_limit(f"payment:create-order:{user.uid}", RATE_LIMIT_PAYMENT)

    try:
        order = await service.create_order(data.amount, user.uid, data.metadata)
        return CreateOrderResponse(**order)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error creating payment order: {e}")
        raise internal_error_response() from e


@router.post(
    "/verify",
    response_model=VerifyPaymentResponse,
    summary="Verify Payment",
    responses={
        400: {"description": "Missing payment details or invalid signature"},
        429: {"description": "Too many requests"},
    },
)
async def verify_payment(
    data: VerifyPaymentRequest,
    user: CurrentUser = Depends(get_current_user),
) -> VerifyPaymentResponse:
    """Verify the signature the gateway returned to the checkout widget."""
    await enforce_rate_limit(f"payment:verify:{user.uid}", RATE_LIMIT_PAYMENT)

    try:
        service.verify_payment(data.order_id, data.payment_id, data.signature)
        return VerifyPaymentResponse(
            success=True,
            order_id=data.order_id,
            payment_id=data.payment_id,
            user_id=user.uid,
        )
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error verifying payment: {e}")
        raise internal_error_response() from e
