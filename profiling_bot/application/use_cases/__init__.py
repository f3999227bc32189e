"""Application use cases module."""

from .test_session_use_cases import TestSessionStateMachine

__all__ = [
    "TestSessionStateMachine",
]
