"""
Notifications module - Email, SMS and WhatsApp messages to applicants.
"""

from .router import router

__all__ = ["router"]
