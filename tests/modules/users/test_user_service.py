"""
Tests for first-login provisioning and profile updates.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from admissions.modules.users.models import User, UserRole
from admissions.modules.users.service import get_or_provision_user, update_profile

SERVICE = "admissions.modules.users.service"


@pytest.fixture
def existing_user():
    user = MagicMock(spec=User)
    user.uid = "applicant-uid"
    user.role = UserRole.USER
    user.phone_number = "+919876543210"
    return user


@pytest.mark.asyncio
async def test_existing_user_is_returned(mock_db, existing_user):
    with patch(f"{SERVICE}.UserRepository") as mock_repo:
        mock_repo.get_by_uid = AsyncMock(return_value=existing_user)
        mock_repo.create = AsyncMock()

        user = await get_or_provision_user(
            mock_db, uid="applicant-uid", phone_number="+919876543210"
        )

    assert user is existing_user
    mock_repo.create.assert_not_called()
    mock_db.commit.assert_not_called()


@pytest.mark.asyncio
async def test_existing_user_phone_is_refreshed(mock_db, existing_user):
    with patch(f"{SERVICE}.UserRepository") as mock_repo:
        mock_repo.get_by_uid = AsyncMock(return_value=existing_user)

        await get_or_provision_user(mock_db, uid="applicant-uid", phone_number="+910000000000")

    assert existing_user.phone_number == "+910000000000"
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_new_user_gets_user_role(mock_db):
    with (
        patch(f"{SERVICE}.UserRepository") as mock_repo,
        patch(f"{SERVICE}.settings") as mock_settings,
    ):
        mock_settings.admin_uid_set = {"admin-uid"}
        mock_repo.get_by_uid = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(return_value=MagicMock(role=UserRole.USER))

        await get_or_provision_user(mock_db, uid="new-uid", phone_number="+911111111111")

    assert mock_repo.create.await_args.kwargs["role"] == UserRole.USER
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_allow_listed_uid_gets_admin_role(mock_db):
    with (
        patch(f"{SERVICE}.UserRepository") as mock_repo,
        patch(f"{SERVICE}.settings") as mock_settings,
    ):
        mock_settings.admin_uid_set = {"admin-uid"}
        mock_repo.get_by_uid = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(return_value=MagicMock(role=UserRole.ADMIN))

        await get_or_provision_user(mock_db, uid="admin-uid")

    assert mock_repo.create.await_args.kwargs["role"] == UserRole.ADMIN


@pytest.mark.asyncio
async def test_existing_role_is_never_changed(mock_db, existing_user):
    with (
        patch(f"{SERVICE}.UserRepository") as mock_repo,
        patch(f"{SERVICE}.settings") as mock_settings,
    ):
        mock_settings.admin_uid_set = {"applicant-uid"}
        mock_repo.get_by_uid = AsyncMock(return_value=existing_user)

        user = await get_or_provision_user(mock_db, uid="applicant-uid")

    assert user.role == UserRole.USER


@pytest.mark.asyncio
async def test_concurrent_first_login_returns_winner(mock_db, existing_user):
    with patch(f"{SERVICE}.UserRepository") as mock_repo:
        mock_repo.get_by_uid = AsyncMock(side_effect=[None, existing_user])
        mock_repo.create = AsyncMock(side_effect=IntegrityError("insert", {}, Exception()))

        user = await get_or_provision_user(mock_db, uid="applicant-uid")

    assert user is existing_user
    mock_db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_profile_ignores_unset_fields(mock_db, existing_user):
    with patch(f"{SERVICE}.UserRepository") as mock_repo:
        mock_repo.update_profile = AsyncMock(return_value=existing_user)

        await update_profile(mock_db, existing_user, display_name="Ali", email=None)

    mock_repo.update_profile.assert_awaited_once_with(
        mock_db, existing_user, display_name="Ali"
    )


@pytest.mark.asyncio
async def test_update_profile_without_changes(mock_db, existing_user):
    with patch(f"{SERVICE}.UserRepository") as mock_repo:
        mock_repo.update_profile = AsyncMock()

        result = await update_profile(mock_db, existing_user)

    assert result is existing_user
    mock_repo.update_profile.assert_not_called()
