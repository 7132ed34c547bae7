"""Database and cache module for the gallery layout service."""

from gallery_layout.db.base import Base, get_db, engine, SessionLocal
from gallery_layout.db.models import Submission, SubmissionStatus

__all__ = [
    "Base",
    "get_db",
    "engine",
    "SessionLocal",
    "Submission",
    "SubmissionStatus",
]
