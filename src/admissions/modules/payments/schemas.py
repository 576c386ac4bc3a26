"""
Payment Schemas
"""

from decimal import Decimal
from typing import Any

from pydantic import Field

from admissions.modules.shared.schemas import CamelModel


class CreateOrderRequest(CamelModel):
    """Request body for POST /payment/create-order. Amount is in rupees."""

    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    metadata: dict[str, Any] | None = None


class CreateOrderResponse(CamelModel):
    order_id: str
    amount: int = Field(..., description="Order amount in paise")
    currency: str
    key: str = Field(..., description="Public gateway key for the checkout widget")


class VerifyPaymentRequest(CamelModel):
    """Gateway callback fields, as returned to the checkout widget."""

    order_id: str = ""
    payment_id: str = ""
    signature: str = ""


class VerifyPaymentResponse(CamelModel):
    success: bool
    order_id: str
    payment_id: str
    user_id: str
