"""
Payments module - Application fee orders and signature verification.

API Endpoints:
- POST /payment/create-order - Create a gateway order for the application fee
- POST /payment/verify - Verify a gateway payment signature
"""

from .router import router

__all__ = ["router"]
