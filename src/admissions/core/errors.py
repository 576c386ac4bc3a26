"""
Service Errors

Exception taxonomy raised by the service layer. Routers translate these
into HTTPException responses of the form
``{"detail": {"error": <code>, "message": <text>}}``.
"""

from fastapi import HTTPException


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """Raised when the caller is not authenticated."""

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message=message, error_code="UNAUTHORIZED", status_code=401)


class ForbiddenError(ServiceError):
    """Raised when the caller may not perform the operation."""

    def __init__(self, message: str = "You do not have permission to perform this action."):
        super().__init__(message=message, error_code="FORBIDDEN", status_code=403)


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str, identifier: object | None = None):
        message = f"{resource} {identifier} not found" if identifier else f"{resource} not found"
        super().__init__(
            message=message,
            error_code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
        )


class BadRequestError(ServiceError):
    """Raised when input is missing or malformed."""

    def __init__(self, message: str, error_code: str = "BAD_REQUEST"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class ConflictError(ServiceError):
    """Raised when the request collides with existing state."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message=message, error_code=error_code, status_code=409)


class InternalError(ServiceError):
    """Raised when an external collaborator fails or times out."""

    def __init__(self, message: str, error_code: str = "INTERNAL_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=500)


def to_http_exception(e: ServiceError) -> HTTPException:
    """Convert a service error to an HTTPException."""
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


def internal_error_response() -> HTTPException:
    """Generic 500 used when an unexpected exception escapes a service."""
    return HTTPException(
        status_code=500,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


class DeliveryError(Exception):
    """Raised by a messaging channel when a message could not be handed off."""
