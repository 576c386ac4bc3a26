"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from admissions.modules.shared.schemas import CamelModel


class SessionRequest(CamelModel):
    """Identity assertion from the phone-verification provider."""

    id_token: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """User profile."""

    id: UUID
    uid: str
    phone_number: str | None
    role: str
    display_name: str | None
    photo_url: str | None
    email: str | None
    created_at: datetime
    updated_at: datetime


class SessionResponse(CamelModel):
    """Session token and the caller's profile."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class ProfileUpdate(CamelModel):
    """Request body for PATCH /auth/me. Role and phone number are not editable."""

    display_name: str | None = Field(None, min_length=1, max_length=200)
    photo_url: str | None = Field(None, max_length=2048)
    email: EmailStr | None = None
