"""Domain repository interfaces."""

from .session_repository import ISessionRepository
from .quiz_repository import IQuizConfigurationProvider

__all__ = [
    "ISessionRepository",
    "IQuizConfigurationProvider",
]
