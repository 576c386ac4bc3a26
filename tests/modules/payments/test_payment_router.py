"""
HTTP tests for payment verification.
"""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from admissions.modules.payments.service import compute_signature

SECRET = "test_gateway_secret"


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def gateway_secret():
    with patch("admissions.modules.payments.service.settings") as mock_settings:
        mock_settings.razorpay_key_secret = SECRET
        yield mock_settings


@pytest.mark.asyncio
async def test_verify_valid_signature(api_app, sign_in, applicant, gateway_secret):
    sign_in(applicant)
    body = {
        "orderId": "order_Q1w2E3r4T5y6",
        "paymentId": "pay_A1s2D3f4G5h6",
        "signature": compute_signature("order_Q1w2E3r4T5y6", "pay_A1s2D3f4G5h6", SECRET),
    }

    async with _client(api_app) as client:
        response = await client.post("/api/v1/payment/verify", json=body)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["userId"] == "applicant-uid"


@pytest.mark.asyncio
@pytest.mark.parametrize("signature", ["0" * 64, "é" * 64, "नमस्ते"])
async def test_verify_mismatched_signature_is_bad_request(
    api_app, sign_in, applicant, gateway_secret, signature
):
    sign_in(applicant)
    body = {
        "orderId": "order_Q1w2E3r4T5y6",
        "paymentId": "pay_A1s2D3f4G5h6",
        "signature": signature,
    }

    async with _client(api_app) as client:
        response = await client.post("/api/v1/payment/verify", json=body)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "INVALID_PAYMENT_SIGNATURE"
