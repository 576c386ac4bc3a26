"""
User Models

Identity records keyed by the phone-verification provider's uid.
"""

from enum import Enum

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from admissions.modules.shared import BaseModel, enum_values


class UserRole(str, Enum):
    """User roles in the system."""

    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    """
    User model for authentication and authorization.

    The role stored here is the only source of truth for permission
    checks; it is never taken from a token.
    """

    __tablename__ = "users"

    # External identity
    uid: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        index=True,
        nullable=False,
    )
    phone_number: Mapped[str | None] = mapped_column(
        String(20),
        index=True,
        nullable=True,
    )

    # Role and permissions
    role: Mapped[UserRole] = mapped_column(
        ENUM(
            UserRole,
            name="user_role",
            create_type=True,
            values_callable=enum_values,
        ),
        nullable=False,
        default=UserRole.USER,
    )

    # Profile fields
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, uid={self.uid}, role={self.role.value})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
