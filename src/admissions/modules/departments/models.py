"""
Department Models
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from admissions.modules.shared import BaseModel


class Department(BaseModel):
    """
    An academic department applicants can be assigned to.

    Deleting a department clears ``department_id`` on any application that
    referenced it (ON DELETE SET NULL on the application side).
    """

    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(10), unique=True, index=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, code={self.code})>"
