"""
Core module - Configuration, database, security, and utilities.
"""

from admissions.core.config import get_settings, settings
from admissions.core.database import Base, close_db, get_db, init_db
from admissions.core.redis import close_redis, get_redis, init_redis
from admissions.core.security import create_access_token, decode_identity_assertion, decode_token

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "create_access_token",
    "decode_token",
    "decode_identity_assertion",
]
