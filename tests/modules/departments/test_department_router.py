"""
HTTP tests for department management.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

SERVICE = "admissions.modules.departments.service"


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_delete_department_scenario(api_app, sign_in, admin):
    """Deleting unknown -> 404, existing -> success, same again -> 404."""
    sign_in(admin)
    existing_id = uuid4()
    stored = {existing_id}

    async def fake_delete(db, id):
        if id in stored:
            stored.remove(id)
            return True
        return False

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.delete_by_id = AsyncMock(side_effect=fake_delete)

        async with _client(api_app) as client:
            unknown = await client.delete(f"/api/v1/departments/{uuid4()}")
            first = await client.delete(f"/api/v1/departments/{existing_id}")
            second = await client.delete(f"/api/v1/departments/{existing_id}")

    assert unknown.status_code == 404
    assert unknown.json()["detail"]["error"] == "DEPARTMENT_NOT_FOUND"
    assert first.status_code == 200
    assert first.json() == {"success": True}
    assert second.status_code == 404


@pytest.mark.asyncio
async def test_create_department_normalises_code(api_app, sign_in, admin):
    sign_in(admin)

    async def fake_create(db, *, name, code, description):
        department = MagicMock()
        department.id = uuid4()
        department.name = name
        department.code = code
        department.description = description
        department.created_at = department.updated_at = "2025-03-01T09:30:00Z"
        return department

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_code = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(side_effect=fake_create)

        async with _client(api_app) as client:
            response = await client.post(
                "/api/v1/departments",
                json={"name": "  Computer Science ", "code": "cs01"},
            )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Computer Science"
    assert body["code"] == "CS01"


@pytest.mark.asyncio
async def test_duplicate_department_code(api_app, sign_in, admin):
    sign_in(admin)

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_code = AsyncMock(return_value=MagicMock(id=uuid4()))

        async with _client(api_app) as client:
            response = await client.post(
                "/api/v1/departments", json={"name": "Arabic", "code": "AR"}
            )

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "DUPLICATE_DEPARTMENT_CODE"


@pytest.mark.asyncio
async def test_invalid_department_code_rejected(api_app, sign_in, admin):
    sign_in(admin)

    async with _client(api_app) as client:
        response = await client.post(
            "/api/v1/departments", json={"name": "Arabic", "code": "A"}
        )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_users_cannot_create_departments(api_app, sign_in, applicant):
    sign_in(applicant)

    async with _client(api_app) as client:
        response = await client.post("/api/v1/departments", json={"name": "Arabic", "code": "AR"})

    assert response.status_code == 403
