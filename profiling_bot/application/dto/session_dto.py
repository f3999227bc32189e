"""Test session DTOs for application layer."""

from dataclasses import dataclass
from typing import Tuple
from uuid import UUID

from ...domain.entities import AnswerOption, Question


@dataclass(frozen=True)
class CurrentQuestionDTO:
    """Question at a session's current position, answers in session order."""

    session_id: UUID
    position: int
    total_questions: int
    question: Question
    answers: Tuple[AnswerOption, ...]

    @property
    def ordered_answer_ids(self) -> Tuple[int, ...]:
        return tuple(answer.id for answer in self.answers)
