"""Shared fixtures for profiling bot tests."""

from datetime import datetime, timezone
from typing import List

import pytest

from profiling_bot.domain.entities import (
    AnswerOption,
    PersonalityType,
    Question,
    QuizSettings,
)
from profiling_bot.domain.repositories import IQuizConfigurationProvider
from profiling_bot.infrastructure.repositories import InMemorySessionRepository


class StaticQuizProvider(IQuizConfigurationProvider):
    """Quiz definition held in memory."""

    def __init__(self, settings: QuizSettings, questions: List[Question], categories: List[PersonalityType]):
        self.settings = settings
        self.questions = questions
        self.categories = categories

    async def get_settings(self) -> QuizSettings:
        return self.settings

    async def get_questions(self) -> List[Question]:
        return list(self.questions)

    async def get_categories(self) -> List[PersonalityType]:
        return list(self.categories)

    async def get_total_question_count(self) -> int:
        return self.settings.total_questions

    async def validate(self) -> None:
        pass

    async def reload(self) -> None:
        pass


def make_settings(total_questions: int = 2, answers_per_question: int = 2, **overrides) -> QuizSettings:
    values = dict(
        name="Профайлинг",
        welcome_message="Добро пожаловать!",
        channel_link="https://t.me/profiling_channel",
        intro_message="Поехали!",
        completion_message="Тест пройден!",
        total_questions=total_questions,
        answers_per_question=answers_per_question,
    )
    values.update(overrides)
    return QuizSettings(**values)


@pytest.fixture
def categories():
    """Three personality types"""
    return [
        PersonalityType(id=1, name="Социальный", full_name="Социальный тип", description="Любит людей"),
        PersonalityType(id=2, name="Творческий", full_name="Творческий тип", slogan="Мир как холст"),
        PersonalityType(id=3, name="Технический"),
    ]


@pytest.fixture
def questions():
    """Two questions with two answers each; answer N scores for type N"""
    return [
        Question(
            id=1,
            text="Что вы выберете?",
            answers=(
                AnswerOption(id=1, text="Друзей", category_id=1),
                AnswerOption(id=2, text="Краски", category_id=2),
            ),
        ),
        Question(
            id=2,
            text="Где вы работаете?",
            answers=(
                AnswerOption(id=1, text="В команде", category_id=1),
                AnswerOption(id=2, text="В студии", category_id=2),
            ),
        ),
    ]


@pytest.fixture
def quiz_provider(questions, categories):
    return StaticQuizProvider(make_settings(), questions, categories)


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def build_quiz_provider():
    """Factory for a provider over custom questions and types"""

    def _build(questions, categories, **settings_kwargs):
        settings_kwargs.setdefault("total_questions", len(questions))
        return StaticQuizProvider(make_settings(**settings_kwargs), questions, categories)

    return _build
