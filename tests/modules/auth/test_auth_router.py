"""
HTTP tests for session exchange and the profile endpoints.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from admissions.core.config import settings
from admissions.core.security import decode_token
from admissions.modules.users.models import User, UserRole

ROUTER = "admissions.modules.auth.router"


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _assertion(claims: dict, secret: str | None = None) -> str:
    payload = {"exp": datetime.now(UTC) + timedelta(minutes=5), **claims}
    return jwt.encode(
        payload,
        secret or settings.identity_provider_secret,
        algorithm=settings.identity_provider_algorithm,
    )


@pytest.fixture
def stored_user():
    user = MagicMock(spec=User)
    user.id = uuid4()
    user.uid = "applicant-uid"
    user.phone_number = "+919876543210"
    user.role = UserRole.USER
    user.display_name = None
    user.photo_url = None
    user.email = None
    user.created_at = user.updated_at = datetime(2025, 3, 1, tzinfo=UTC)
    return user


@pytest.mark.asyncio
async def test_session_exchange_provisions_user(api_app, stored_user):
    token = _assertion(
        {"sub": "applicant-uid", "phone_number": "+919876543210", "role": "admin"}
    )

    with patch(f"{ROUTER}.user_service") as mock_users:
        mock_users.get_or_provision_user = AsyncMock(return_value=stored_user)

        async with _client(api_app) as client:
            response = await client.post("/api/v1/auth/session", json={"idToken": token})

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["uid"] == "applicant-uid"
    # Role comes from the stored record, not the assertion
    assert body["user"]["role"] == "user"

    claims = decode_token(body["accessToken"])
    assert claims["sub"] == "applicant-uid"
    assert claims["type"] == "access"
    assert "role" not in claims

    kwargs = mock_users.get_or_provision_user.await_args.kwargs
    assert kwargs["uid"] == "applicant-uid"
    assert kwargs["phone_number"] == "+919876543210"


@pytest.mark.asyncio
async def test_session_with_forged_assertion(api_app):
    token = _assertion({"sub": "applicant-uid"}, secret="not-the-provider-secret")

    async with _client(api_app) as client:
        response = await client.post("/api/v1/auth/session", json={"idToken": token})

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "INVALID_IDENTITY_ASSERTION"


@pytest.mark.asyncio
async def test_session_assertion_without_subject(api_app):
    token = _assertion({"phone_number": "+919876543210"})

    async with _client(api_app) as client:
        response = await client.post("/api/v1/auth/session", json={"idToken": token})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_me(api_app, sign_in, applicant, stored_user):
    sign_in(applicant)

    with patch(f"{ROUTER}.UserRepository") as mock_repo:
        mock_repo.get_by_uid = AsyncMock(return_value=stored_user)

        async with _client(api_app) as client:
            response = await client.get("/api/v1/auth/me")

    assert response.status_code == 200
    assert response.json()["phoneNumber"] == "+919876543210"


@pytest.mark.asyncio
async def test_update_me(api_app, sign_in, applicant, stored_user):
    sign_in(applicant)

    async def fake_update(db, user, *, display_name=None, photo_url=None, email=None):
        user.display_name = display_name
        user.email = email
        return user

    with (
        patch(f"{ROUTER}.UserRepository") as mock_repo,
        patch(f"{ROUTER}.user_service") as mock_users,
    ):
        mock_repo.get_by_uid = AsyncMock(return_value=stored_user)
        mock_users.update_profile = AsyncMock(side_effect=fake_update)

        async with _client(api_app) as client:
            response = await client.patch(
                "/api/v1/auth/me",
                json={"displayName": "Muhammed Ali", "email": "ali@example.com"},
            )

    assert response.status_code == 200
    body = response.json()
    assert body["displayName"] == "Muhammed Ali"
    assert body["email"] == "ali@example.com"
    assert body["role"] == "user"
