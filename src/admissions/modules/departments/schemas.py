"""
Department Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from admissions.modules.shared.schemas import CamelModel

CODE_PATTERN = r"^[A-Z0-9]{2,10}$"


def _normalise_code(value):
    if isinstance(value, str):
        return value.strip().upper()
    return value


class DepartmentCreate(CamelModel):
    """Request body for POST /departments."""

    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(..., pattern=CODE_PATTERN)
    description: str = Field("", max_length=2000)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("code", mode="before")
    @classmethod
    def normalise_code(cls, value):
        return _normalise_code(value)


class DepartmentUpdate(CamelModel):
    """Request body for PATCH /departments/{id}. Name and code may not be blanked."""

    name: str | None = Field(None, min_length=1, max_length=200)
    code: str | None = Field(None, pattern=CODE_PATTERN)
    description: str | None = Field(None, max_length=2000)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("code", mode="before")
    @classmethod
    def normalise_code(cls, value):
        return _normalise_code(value)


class DepartmentResponse(CamelModel):
    id: UUID
    name: str
    code: str
    description: str
    created_at: datetime
    updated_at: datetime


class DepartmentListResponse(CamelModel):
    departments: list[DepartmentResponse]


class DeleteDepartmentResponse(CamelModel):
    success: bool = True
