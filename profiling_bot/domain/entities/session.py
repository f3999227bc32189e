"""Test session domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple
from uuid import UUID, uuid4

from ..exceptions import (
    InvalidAnswerError,
    QuestionMismatchError,
    SessionAlreadyCompletedError,
    SessionIncompleteError,
)


@dataclass(frozen=True)
class SessionOrders:
    """Per-session display order of questions and of each question's answers."""

    question_order: Tuple[int, ...]
    answer_order: Dict[int, Tuple[int, ...]]


@dataclass
class TestSession:
    """One user's attempt at the quiz.

    Questions and answers are always stored by their original ids;
    ``question_order`` and ``answer_order`` only describe what the user sees.
    ``current_question_position`` is 1-based and reaches
    ``total_questions + 1`` once every question has been answered.
    """

    __test__ = False

    id: UUID
    user_id: int
    user_name: str
    started_at: datetime
    question_order: Tuple[int, ...]
    answer_order: Dict[int, Tuple[int, ...]]
    current_question_position: int = 1
    answers: Dict[int, int] = field(default_factory=dict)
    completed_at: Optional[datetime] = None
    result_category_id: Optional[int] = None
    result_category_name: Optional[str] = None

    @property
    def total_questions(self) -> int:
        """Number of questions in this session."""
        return len(self.question_order)

    @property
    def is_completed(self) -> bool:
        """Check if session is completed."""
        return self.completed_at is not None

    @property
    def is_pending_completion(self) -> bool:
        """All questions answered, result not yet computed."""
        return not self.is_completed and len(self.answers) == self.total_questions

    @property
    def current_question_id(self) -> Optional[int]:
        """Original id of the question at the current position."""
        if 1 <= self.current_question_position <= self.total_questions:
            return self.question_order[self.current_question_position - 1]
        return None

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def get_original_question_id(self, position: int) -> int:
        """Get original question id by 1-based position in this session."""
        if 1 <= position <= self.total_questions:
            return self.question_order[position - 1]
        raise IndexError(f"Question position {position} out of range")

    def get_original_answer_id(self, question_id: int, display_index: int) -> int:
        """Get original answer id by 1-based display index for a question."""
        order = self.answer_order.get(question_id)
        if order and 1 <= display_index <= len(order):
            return order[display_index - 1]
        raise IndexError(f"Answer index {display_index} out of range for question {question_id}")

    def record_answer(self, question_id: int, answer_id: int) -> None:
        """Record answer for the current question and advance the pointer."""
        if self.is_completed:
            raise SessionAlreadyCompletedError(self.id)

        expected = self.current_question_id
        if question_id != expected:
            raise QuestionMismatchError(self.id, question_id, expected)

        if answer_id not in self.answer_order.get(question_id, ()):
            raise InvalidAnswerError(question_id, answer_id)

        self.answers[question_id] = answer_id
        self.current_question_position += 1

    def mark_completed(self, completed_at: datetime) -> None:
        """Mark session as completed."""
        if self.is_completed:
            raise SessionAlreadyCompletedError(self.id)

        if len(self.answers) != self.total_questions:
            raise SessionIncompleteError(self.id, len(self.answers), self.total_questions)

        self.current_question_position = self.total_questions + 1
        self.completed_at = completed_at

    def set_result(self, category_id: int, category_name: str) -> None:
        """Stamp the classification result."""
        self.result_category_id = category_id
        self.result_category_name = category_name

    @classmethod
    def create_new(
        cls,
        user_id: int,
        user_name: str,
        orders: SessionOrders,
        started_at: datetime
    ) -> "TestSession":
        """Create new session at the first question."""
        return cls(
            id=uuid4(),
            user_id=user_id,
            user_name=user_name,
            started_at=started_at,
            question_order=tuple(orders.question_order),
            answer_order={qid: tuple(order) for qid, order in orders.answer_order.items()},
        )
