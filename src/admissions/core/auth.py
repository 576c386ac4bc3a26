"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.

The bearer token only identifies the caller (its ``sub`` claim is the
external uid). The caller's role is looked up in the users table on every
request, so promoting or demoting a user takes effect immediately and a
tampered claim cannot grant admin rights.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.database import get_db
from admissions.core.security import decode_token
from admissions.modules.users.models import User, UserRole
from admissions.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=False,
    description="Session bearer token issued by POST /auth/session",
)


@dataclass
class CurrentUser:
    """
    Represents the authenticated caller.

    Attributes:
        id: Internal user id
        uid: External identity uid (owner key on applications)
        role: Role resolved from the users table
        phone_number: Verified phone number, if any
        email: Contact email, if any
        display_name: Display name, if any
    """

    id: UUID
    uid: str
    role: UserRole
    phone_number: str | None = None
    email: str | None = None
    display_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(
            id=user.id,
            uid=user.uid,
            role=user.role,
            phone_number=user.phone_number,
            email=user.email,
            display_name=user.display_name,
        )

    def __str__(self) -> str:
        return f"CurrentUser(uid={self.uid}, role={self.role.value})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    FastAPI dependency that validates the bearer token and loads the caller.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or
            names a user that does not exist
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("AUTHENTICATION_REQUIRED", "Authentication required.")

    payload = decode_token(credentials.credentials)
    if payload is None:
        logger.warning("Invalid or expired session token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    uid = payload.get("sub")
    if not uid:
        raise _unauthorized("INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims.")

    user = await UserRepository.get_by_uid(db, uid)
    if user is None:
        logger.warning(f"Token presented for unknown user {uid}")
        raise _unauthorized("UNKNOWN_USER", "User account not found.")

    return CurrentUser.from_user(user)


async def get_current_admin_user(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """
    FastAPI dependency that requires the caller to be an admin.

    Raises:
        HTTPException 401: If not authenticated
        HTTPException 403: If the caller's stored role is not admin
    """
    if not user.is_admin:
        logger.warning(f"Access denied: user {user.uid} has role '{user.role.value}'")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "ADMIN_ACCESS_REQUIRED",
                "message": "Admin access is required for this endpoint.",
            },
        )

    return user


__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_current_admin_user",
]
