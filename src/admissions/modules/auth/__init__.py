"""Authentication module."""

from admissions.modules.auth.router import router
from admissions.modules.auth.schemas import SessionRequest, SessionResponse, UserResponse

__all__ = ["router", "SessionRequest", "SessionResponse", "UserResponse"]
