"""Domain entities module."""

from .quiz import SHARE_TEMPLATE_FIELDS, AnswerOption, Question, PersonalityType, QuizSettings
from .session import TestSession, SessionOrders
from .result import TestResult

__all__ = [
    "SHARE_TEMPLATE_FIELDS",
    "AnswerOption",
    "Question",
    "PersonalityType",
    "QuizSettings",
    "TestSession",
    "SessionOrders",
    "TestResult",
]
