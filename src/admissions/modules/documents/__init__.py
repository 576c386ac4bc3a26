"""
Documents module - Application form and hall ticket PDFs.
"""

from .router import router

__all__ = ["router"]
