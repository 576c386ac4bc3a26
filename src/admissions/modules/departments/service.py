"""
Departments Service Layer

Validation and orchestration for department management.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.errors import ConflictError, NotFoundError
from admissions.modules.departments import repository
from admissions.modules.departments.models import Department
from admissions.modules.departments.schemas import DepartmentCreate, DepartmentUpdate

logger = logging.getLogger(__name__)


class DepartmentNotFoundError(NotFoundError):
    """Raised when a department is not found."""

    def __init__(self, department_id: UUID | None = None):
        super().__init__("Department", department_id)


class DuplicateDepartmentCodeError(ConflictError):
    """Raised when a department code is already in use."""

    def __init__(self, code: str):
        super().__init__(
            message=f"A department with code '{code}' already exists.",
            error_code="DUPLICATE_DEPARTMENT_CODE",
        )


async def _ensure_code_available(
    db: AsyncSession, code: str, exclude_id: UUID | None = None
) -> None:
    existing = await repository.get_by_code(db, code)
    if existing and existing.id != exclude_id:
        logger.warning(f"Duplicate department code: {code}")
        raise DuplicateDepartmentCodeError(code)


async def create_department(db: AsyncSession, data: DepartmentCreate) -> Department:
    """
    Create a department.

    Raises:
        DuplicateDepartmentCodeError: If the code is taken
    """
    await _ensure_code_available(db, data.code)

    try:
        department = await repository.create(
            db, name=data.name, code=data.code, description=data.description
        )
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateDepartmentCodeError(data.code) from e

    logger.info(f"Created department {department.id} ({department.code})")
    return department


async def list_departments(db: AsyncSession) -> list[Department]:
    return await repository.list_all(db)


async def get_department(db: AsyncSession, department_id: UUID) -> Department:
    """
    Get a department by ID.

    Raises:
        DepartmentNotFoundError: If it doesn't exist
    """
    department = await repository.get_by_id(db, department_id)
    if not department:
        raise DepartmentNotFoundError(department_id)
    return department


async def update_department(
    db: AsyncSession, department_id: UUID, data: DepartmentUpdate
) -> Department:
    """
    Update name, code or description.

    Raises:
        DepartmentNotFoundError: If it doesn't exist
        DuplicateDepartmentCodeError: If the new code is taken
    """
    department = await get_department(db, department_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "code" in changes and changes["code"] != department.code:
        await _ensure_code_available(db, changes["code"], exclude_id=department.id)

    if not changes:
        return department

    try:
        department = await repository.update(db, department, **changes)
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateDepartmentCodeError(changes.get("code", department.code)) from e

    logger.info(f"Updated department {department_id}: {sorted(changes)}")
    return department


async def delete_department(db: AsyncSession, department_id: UUID) -> None:
    """
    Delete a department. Applications referencing it keep no department.

    Raises:
        DepartmentNotFoundError: If it doesn't exist
    """
    deleted = await repository.delete_by_id(db, department_id)
    if not deleted:
        raise DepartmentNotFoundError(department_id)

    logger.info(f"Deleted department {department_id}")
