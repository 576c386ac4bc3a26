"""
Departments Router

Any authenticated user may list and read departments; only admins may
create, update or delete them.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import CurrentUser, get_current_admin_user, get_current_user
from admissions.core.database import get_db
from admissions.core.errors import ServiceError, internal_error_response, to_http_exception
from admissions.core.rate_limit import RATE_LIMIT_ADMIN_ACTION, enforce_rate_limit
from admissions.modules.departments import service
from admissions.modules.departments.schemas import (
    DeleteDepartmentResponse,
    DepartmentCreate,
    DepartmentListResponse,
    DepartmentResponse,
    DepartmentUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ADMIN_RESPONSES = {
    401: {"description": "Unauthorized - invalid or missing token"},
    403: {"description": "Forbidden - not an admin"},
}


@router.get("", response_model=DepartmentListResponse, summary="List Departments")
async def list_departments(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> DepartmentListResponse:
    """List all departments sorted by name."""
    try:
        departments = await service.list_departments(db)
        return DepartmentListResponse(
            departments=[DepartmentResponse.model_validate(d) for d in departments]
        )
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error listing departments: {e}")
        raise internal_error_response() from e


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Department",
    responses={
        **_ADMIN_RESPONSES,
        409: {"description": "Department code already exists"},
    },
)
async def create_department(
    data: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> DepartmentResponse:
    """Create a department. Code must be 2-10 uppercase letters or digits."""
    await enforce_rate_limit(f"admin:departments:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        department = await service.create_department(db, data)
        logger.info(f"Admin {admin.uid} created department {department.code}")
        return DepartmentResponse.model_validate(department)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error creating department: {e}")
        raise internal_error_response() from e


@router.get(
    "/{department_id}",
    response_model=DepartmentResponse,
    summary="Get Department",
    responses={404: {"description": "Department not found"}},
)
async def get_department(
    department_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> DepartmentResponse:
    try:
        department = await service.get_department(db, department_id)
        return DepartmentResponse.model_validate(department)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error fetching department {department_id}: {e}")
        raise internal_error_response() from e


@router.patch(
    "/{department_id}",
    response_model=DepartmentResponse,
    summary="Update Department",
    responses={
        **_ADMIN_RESPONSES,
        404: {"description": "Department not found"},
        409: {"description": "Department code already exists"},
    },
)
async def update_department(
    department_id: UUID,
    data: DepartmentUpdate,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> DepartmentResponse:
    """Update a department. Empty name or code is rejected."""
    await enforce_rate_limit(f"admin:departments:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        department = await service.update_department(db, department_id, data)
        logger.info(f"Admin {admin.uid} updated department {department_id}")
        return DepartmentResponse.model_validate(department)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating department {department_id}: {e}")
        raise internal_error_response() from e


@router.delete(
    "/{department_id}",
    response_model=DeleteDepartmentResponse,
    summary="Delete Department",
    responses={
        **_ADMIN_RESPONSES,
        404: {"description": "Department not found"},
    },
)
async def delete_department(
    department_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> DeleteDepartmentResponse:
    """
    Delete a department.

    Applications assigned to it are left without a department.
    """
    await enforce_rate_limit(f"admin:departments:{admin.uid}", RATE_LIMIT_ADMIN_ACTION)

    try:
        await service.delete_department(db, department_id)
        logger.info(f"Admin {admin.uid} deleted department {department_id}")
        return DeleteDepartmentResponse(success=True)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error deleting department {department_id}: {e}")
        raise internal_error_response() from e
