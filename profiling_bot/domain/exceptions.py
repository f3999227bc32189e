"""Domain exceptions."""

from typing import Optional
from uuid import UUID


class ProfilingBotException(Exception):
    """Base exception for the profiling bot."""

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code
        super().__init__(message)


class SessionNotFoundError(ProfilingBotException):
    """Test session not found."""

    def __init__(self, session_id: UUID):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} not found",
            code="SESSION_NOT_FOUND"
        )


class InvalidStateError(ProfilingBotException):
    """Operation attempted against a session in the wrong lifecycle state."""


class SessionAlreadyCompletedError(InvalidStateError):
    """Session is already completed."""

    def __init__(self, session_id: UUID):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} already completed",
            code="SESSION_ALREADY_COMPLETED"
        )


class SessionIncompleteError(InvalidStateError):
    """Completion requested while some questions are unanswered."""

    def __init__(self, session_id: UUID, answered: int, total: int):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} has {answered} of {total} answers",
            code="SESSION_INCOMPLETE"
        )


class SessionNotCompletedError(ProfilingBotException):
    """Scoring requested for a session that has not been completed."""

    def __init__(self, session_id: UUID):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} is not completed",
            code="SESSION_NOT_COMPLETED"
        )


class InvalidInputError(ProfilingBotException):
    """Caller submitted data that does not fit the session."""


class QuestionMismatchError(InvalidInputError):
    """Answer submitted for a question other than the current one."""

    def __init__(self, session_id: UUID, question_id: int, expected_question_id: Optional[int]):
        self.session_id = session_id
        self.question_id = question_id
        self.expected_question_id = expected_question_id
        super().__init__(
            message=(
                f"Session {session_id}: question {question_id} is not current "
                f"(expected {expected_question_id})"
            ),
            code="QUESTION_MISMATCH"
        )


class InvalidAnswerError(InvalidInputError):
    """Answer id is not valid for the question."""

    def __init__(self, question_id: int, answer_id: int):
        self.question_id = question_id
        self.answer_id = answer_id
        super().__init__(
            message=f"Answer {answer_id} not found for question {question_id}",
            code="INVALID_ANSWER"
        )


class ActiveSessionExistsError(ProfilingBotException):
    """User already has a different active session."""

    def __init__(self, user_id: int, session_id: Optional[UUID] = None):
        self.user_id = user_id
        self.session_id = session_id
        super().__init__(
            message=f"User {user_id} already has an active session",
            code="ACTIVE_SESSION_EXISTS"
        )


class ConfigurationError(ProfilingBotException):
    """Quiz configuration is missing or inconsistent."""

    def __init__(self, reason: str, details: str = None):
        message = f"Invalid quiz configuration: {reason}"
        if details:
            message += f" - {details}"

        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR"
        )
