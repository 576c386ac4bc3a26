"""
Departments module - Admin-managed academic departments.

API Endpoints:
- GET /departments - List departments (any authenticated user)
- POST /departments - Create department (admin)
- GET /departments/{id} - Get department
- PATCH /departments/{id} - Update department (admin)
- DELETE /departments/{id} - Delete department (admin)
"""

from .router import router

__all__ = ["router"]
