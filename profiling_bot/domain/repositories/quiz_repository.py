"""Quiz configuration provider interface."""

from abc import ABC, abstractmethod
from typing import Optional, List

from ..entities import Question, PersonalityType, QuizSettings


class IQuizConfigurationProvider(ABC):
    """Read-only source of the quiz definition."""

    @abstractmethod
    async def get_settings(self) -> QuizSettings:
        """Get bot texts and quiz size settings."""
        pass

    @abstractmethod
    async def get_questions(self) -> List[Question]:
        """Get questions in configuration order."""
        pass

    @abstractmethod
    async def get_categories(self) -> List[PersonalityType]:
        """Get personality types ordered by id."""
        pass

    @abstractmethod
    async def get_total_question_count(self) -> int:
        """Get number of questions per session."""
        pass

    async def get_question(self, question_id: int) -> Optional[Question]:
        """Get question by ID."""
        for question in await self.get_questions():
            if question.id == question_id:
                return question
        return None

    async def get_category(self, category_id: int) -> Optional[PersonalityType]:
        """Get personality type by ID."""
        for category in await self.get_categories():
            if category.id == category_id:
                return category
        return None

    @abstractmethod
    async def validate(self) -> None:
        """Raise ConfigurationError if the quiz definition is inconsistent."""
        pass

    @abstractmethod
    async def reload(self) -> None:
        """Drop cached configuration and load it again."""
        pass
