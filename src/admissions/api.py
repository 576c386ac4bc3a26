from fastapi import APIRouter

from admissions.modules.applications import router as applications_router
from admissions.modules.auth import router as auth_router
from admissions.modules.departments import router as departments_router
from admissions.modules.documents import router as documents_router
from admissions.modules.notifications import router as notifications_router
from admissions.modules.payments import router as payments_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(
    applications_router, prefix="/applications", tags=["Applications"]
)

api_router.include_router(departments_router, prefix="/departments", tags=["Departments"])

api_router.include_router(
    notifications_router, prefix="/notifications", tags=["Notifications"]
)

api_router.include_router(payments_router, prefix="/payment", tags=["Payments"])

api_router.include_router(documents_router, prefix="/pdf", tags=["Documents"])
