"""Quiz definition entities."""

from dataclasses import dataclass
from typing import Optional, Tuple

# Placeholders a personality type's share_template may use
SHARE_TEMPLATE_FIELDS = frozenset({"user_name", "type_name"})


@dataclass(frozen=True)
class AnswerOption:
    """Single answer option, tagged with the personality type it scores for."""

    id: int
    text: str
    category_id: int


@dataclass(frozen=True)
class Question:
    """Quiz question with its answer options in configuration order."""

    id: int
    text: str
    answers: Tuple[AnswerOption, ...] = ()

    @property
    def answer_ids(self) -> Tuple[int, ...]:
        """Answer ids in configuration order."""
        return tuple(answer.id for answer in self.answers)

    def get_answer(self, answer_id: int) -> Optional[AnswerOption]:
        """Get answer option by its original id."""
        for answer in self.answers:
            if answer.id == answer_id:
                return answer
        return None


@dataclass(frozen=True)
class PersonalityType:
    """Personality type (scoring category) with its display texts."""

    id: int
    name: str
    short_name: str = ""
    slogan: str = ""
    full_name: str = ""
    description: str = ""
    strengths: str = ""
    sphere: str = ""
    recommendations: str = ""
    image_path: str = ""
    share_template: str = ""

    @property
    def title(self) -> str:
        """Full name when configured, short name otherwise."""
        return self.full_name or self.name


@dataclass(frozen=True)
class QuizSettings:
    """Bot texts and quiz size settings."""

    name: str
    welcome_message: str
    channel_link: str
    intro_message: str
    completion_message: str
    total_questions: int
    answers_per_question: int
