"""Application DTOs module."""

from .session_dto import CurrentQuestionDTO

__all__ = [
    "CurrentQuestionDTO",
]
