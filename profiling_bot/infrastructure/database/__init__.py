"""Infrastructure database module."""

from .connection import Base, DatabaseManager
from .models import ActiveSessionModel, CompletedSessionModel

__all__ = [
    "Base",
    "DatabaseManager",
    "ActiveSessionModel",
    "CompletedSessionModel",
]
