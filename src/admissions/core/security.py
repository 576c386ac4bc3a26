"""
Security Utilities

JWT helpers built on python-jose.

Two kinds of token pass through here:
- identity assertions signed by the phone-verification provider, exchanged
  once per login for a session token
- session access tokens signed by this service

Neither token carries the caller's role; roles are always read from the
users table.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from admissions.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str,
    additional_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session access token.

    Args:
        subject: The user's external uid (stored in the ``sub`` claim)
        additional_claims: Extra non-authoritative claims (e.g. phone number)
        expires_delta: Lifetime override; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT string
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode: dict[str, Any] = dict(additional_claims or {})
    to_encode.update({"sub": subject, "iat": now, "exp": expire, "type": "access"})

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a session access token.

    Returns:
        The claims, or None if the signature, algorithm or expiry is invalid
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Access token rejected: {e}")
        return None


def decode_identity_assertion(assertion: str) -> dict[str, Any] | None:
    """
    Validate an identity assertion issued by the phone-verification provider.

    The assertion must carry a ``sub`` (the provider uid) and, normally,
    ``phone_number``. Audience is checked only when configured.

    Returns:
        The claims, or None if the assertion is not valid
    """
    options = {"verify_aud": settings.identity_provider_audience is not None}
    try:
        claims = jwt.decode(
            assertion,
            settings.identity_provider_secret,
            algorithms=[settings.identity_provider_algorithm],
            audience=settings.identity_provider_audience,
            options=options,
        )
    except JWTError as e:
        logger.warning(f"Identity assertion rejected: {e}")
        return None

    if not claims.get("sub"):
        logger.warning("Identity assertion rejected: missing 'sub' claim")
        return None

    return claims
