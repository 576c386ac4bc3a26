"""
Users module - Identity records and roles.
"""

from admissions.modules.users.models import User, UserRole
from admissions.modules.users.repository import UserRepository

__all__ = ["User", "UserRole", "UserRepository"]
