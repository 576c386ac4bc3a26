"""
Applications module - Entrance examination applications and their review.

API Endpoints:
- POST /applications - Submit application (payment required)
- GET /applications - List applications
- GET /applications/stats - Counts per review state (admin)
- GET /applications/by-number/{application_no} - Lookup by number
- GET /applications/{id} - Get application
- PATCH /applications/{id} - Amend content blocks
- POST /applications/{id}/approval - Approve or disapprove (admin)
- POST /applications/{id}/qualification - Qualify or disqualify (admin)
- POST /applications/{id}/department - Assign department (admin)
- POST /applications/{id}/exam - Schedule exam (admin)
- POST /applications/{id}/hall-ticket - Issue hall ticket (admin)
"""

from .router import router

__all__ = ["router"]
