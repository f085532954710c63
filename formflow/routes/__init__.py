"""Routes package for FastAPI endpoints.

This package contains all API route modules for the form service.
"""

from formflow.routes import forms, health

__all__ = ["forms", "health"]
