"""
Authentication router.

Endpoints:
- POST /auth/session - Exchange an identity assertion for a session token
- GET /auth/me - Current user's profile
- PATCH /auth/me - Update display name, photo or email
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.config import settings
from admissions.core.database import get_db
from admissions.core.errors import internal_error_response
from admissions.core.security import create_access_token, decode_identity_assertion
from admissions.modules.auth.schemas import (
    ProfileUpdate,
    SessionRequest,
    SessionResponse,
    UserResponse,
)
from admissions.modules.users import service as user_service
from admissions.modules.users.models import User
from admissions.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        uid=user.uid,
        phone_number=user.phone_number,
        role=user.role.value,
        display_name=user.display_name,
        photo_url=user.photo_url,
        email=user.email,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.post("/session", response_model=SessionResponse)
async def create_session(
    data: SessionRequest,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    """
    Exchange a provider identity assertion for a session token.

    The user record is created on first login. The role always comes from
    the stored record, never from the assertion.

    Raises:
        HTTPException 401: Invalid or expired assertion
    """
    claims = decode_identity_assertion(data.id_token)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "INVALID_IDENTITY_ASSERTION",
                "message": "Invalid or expired identity assertion.",
            },
        )

    try:
        user = await user_service.get_or_provision_user(
            db,
            uid=claims["sub"],
            phone_number=claims.get("phone_number"),
            display_name=claims.get("name"),
            email=claims.get("email"),
        )
    except Exception as e:
        logger.exception(f"Error provisioning user {claims['sub']}: {e}")
        raise internal_error_response() from e

    access_token = create_access_token(subject=user.uid)
    logger.info(f"Session created for user {user.uid} (role: {user.role.value})")

    return SessionResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user=_user_response(user),
    )


async def _load_user(db: AsyncSession, current: CurrentUser) -> User:
    user = await UserRepository.get_by_uid(db, current.uid)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "USER_NOT_FOUND", "message": "User account not found."},
        )
    return user


@router.get("/me", response_model=UserResponse)
async def get_me(
    db: AsyncSession = Depends(get_db),
    current: CurrentUser = Depends(get_current_user),
) -> UserResponse:
    """Return the caller's profile."""
    return _user_response(await _load_user(db, current))


@router.patch("/me", response_model=UserResponse)
async def update_me(
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current: CurrentUser = Depends(get_current_user),
) -> UserResponse:
    """Update the caller's display name, photo URL or email."""
    user = await _load_user(db, current)

    try:
        user = await user_service.update_profile(
            db,
            user,
            display_name=data.display_name,
            photo_url=data.photo_url,
            email=data.email,
        )
    except Exception as e:
        logger.exception(f"Error updating profile for {current.uid}: {e}")
        raise internal_error_response() from e

    return _user_response(user)
