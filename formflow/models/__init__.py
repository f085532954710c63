"""Database models and session management.

This package contains all SQLAlchemy ORM models and database utilities.
"""

from formflow.models.database import Base, engine, SessionLocal, get_db
from formflow.models.response import FormResponse, ResponseAnswer

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "FormResponse",
    "ResponseAnswer",
]
