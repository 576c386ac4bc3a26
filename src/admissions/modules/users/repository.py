"""
User Repository

Database operations for user management.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        uid: str,
        role: UserRole,
        phone_number: str | None = None,
        display_name: str | None = None,
        photo_url: str | None = None,
        email: str | None = None,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            uid: External identity uid (unique)
            role: User's role
            phone_number: Verified phone number (optional)
            display_name: Display name (optional)
            photo_url: Avatar URL (optional)
            email: Contact email (optional)

        Returns:
            Created User instance
        """
        user = User(
            uid=uid,
            role=role,
            phone_number=phone_number,
            display_name=display_name,
            photo_url=photo_url,
            email=email,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.uid} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_uid(db: AsyncSession, uid: str) -> User | None:
        """
        Get a user by external uid.

        Args:
            db: Database session
            uid: External identity uid

        Returns:
            User instance or None if not found
        """
        result = await db.execute(select(User).where(User.uid == uid))
        return result.scalar_one_or_none()

    @staticmethod
    async def update_profile(db: AsyncSession, user: User, **fields) -> User:
        """Apply profile changes and commit."""
        for key, value in fields.items():
            setattr(user, key, value)

        await db.commit()
        await db.refresh(user)
        return user
