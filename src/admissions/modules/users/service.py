"""
Users Service

First-login provisioning and profile updates.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.config import settings
from admissions.modules.users.models import User, UserRole
from admissions.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


def _initial_role(uid: str) -> UserRole:
    return UserRole.ADMIN if uid in settings.admin_uid_set else UserRole.USER


async def get_or_provision_user(
    db: AsyncSession,
    *,
    uid: str,
    phone_number: str | None = None,
    display_name: str | None = None,
    email: str | None = None,
) -> User:
    """
    Return the user for ``uid``, creating the record on first login.

    New users get the admin role only when their uid is on the configured
    allow-list. An existing user's role is never changed here.

    Args:
        db: Database session
        uid: External identity uid from a validated assertion
        phone_number: Phone number from the assertion
        display_name: Optional display name from the assertion
        email: Optional email from the assertion

    Returns:
        The existing or newly created User
    """
    user = await UserRepository.get_by_uid(db, uid)
    if user:
        if phone_number and user.phone_number != phone_number:
            user.phone_number = phone_number
            await db.commit()
            await db.refresh(user)
        return user

    try:
        user = await UserRepository.create(
            db,
            uid=uid,
            role=_initial_role(uid),
            phone_number=phone_number,
            display_name=display_name,
            email=email,
        )
        await db.commit()
    except IntegrityError:
        # Concurrent first login for the same uid
        await db.rollback()
        user = await UserRepository.get_by_uid(db, uid)
        if user is None:
            raise
        return user

    logger.info(f"Provisioned user {uid} with role {user.role.value}")
    return user


async def update_profile(
    db: AsyncSession,
    user: User,
    *,
    display_name: str | None = None,
    photo_url: str | None = None,
    email: str | None = None,
) -> User:
    """Update the caller's own profile. Role and uid are not editable."""
    changes = {
        key: value
        for key, value in {
            "display_name": display_name,
            "photo_url": photo_url,
            "email": email,
        }.items()
        if value is not None
    }
    if not changes:
        return user

    logger.info(f"Updating profile for user {user.uid}: {sorted(changes)}")
    return await UserRepository.update_profile(db, user, **changes)
