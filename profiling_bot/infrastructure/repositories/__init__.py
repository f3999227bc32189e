"""Infrastructure repositories module."""

from .sql_session_repository import SQLSessionRepository
from .memory_session_repository import InMemorySessionRepository

__all__ = [
    "SQLSessionRepository",
    "InMemorySessionRepository",
]
