"""
Department Repository

Database operations for departments.
"""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Department


async def create(db: AsyncSession, *, name: str, code: str, description: str) -> Department:
    """Create a new department."""
    department = Department(name=name, code=code, description=description)

    db.add(department)
    await db.commit()
    await db.refresh(department)

    return department


async def get_by_id(db: AsyncSession, id: UUID) -> Department | None:
    """Get department by ID."""
    return await db.get(Department, id)


async def get_by_code(db: AsyncSession, code: str) -> Department | None:
    """Get department by its unique code."""
    result = await db.execute(select(Department).where(Department.code == code))
    return result.scalar_one_or_none()


async def list_all(db: AsyncSession) -> list[Department]:
    """All departments, sorted by name."""
    result = await db.execute(select(Department).order_by(Department.name.asc()))
    return list(result.scalars().all())


async def update(db: AsyncSession, department: Department, **fields) -> Department:
    """Apply field changes to a department and commit."""
    for key, value in fields.items():
        setattr(department, key, value)

    await db.commit()
    await db.refresh(department)

    return department


async def delete_by_id(db: AsyncSession, id: UUID) -> bool:
    """
    Hard-delete a department.

    Returns:
        True if a row was deleted, False if none matched
    """
    result = await db.execute(delete(Department).where(Department.id == id))
    await db.commit()
    return result.rowcount > 0
