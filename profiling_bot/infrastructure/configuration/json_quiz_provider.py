"""Quiz configuration loaded from JSON files."""

import asyncio
import json
import logging
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ...domain.entities import SHARE_TEMPLATE_FIELDS, AnswerOption, PersonalityType, Question, QuizSettings
from ...domain.exceptions import ConfigurationError
from ...domain.repositories import IQuizConfigurationProvider

logger = logging.getLogger(__name__)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AnswerOptionSchema(_ConfigModel):
    id: int
    text: str
    category_id: int = Field(alias="idPersonalityType")


class QuestionSchema(_ConfigModel):
    id: int
    text: str
    answers: List[AnswerOptionSchema] = Field(default_factory=list)


class PersonalityTypeSchema(_ConfigModel):
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


class QuizSettingsSchema(_ConfigModel):
    name: str
    welcome_message: str = ""
    channel_link: str = ""
    intro_message: str = ""
    completion_message: str = ""
    total_questions: int
    answers_per_question: int


DEFAULT_SETTINGS = QuizSettings(
    name="Профайлинг",
    welcome_message=(
        "Добро пожаловать! Это тест-ключ к знакомству с собой! "
        "Он поможет определить твой тип личности."
    ),
    channel_link="",
    intro_message=(
        "Пройдя тест, ты узнаешь:\n"
        "• Свой преобладающий тип личности\n"
        "• Сильные стороны и зоны роста\n"
        "• Рекомендации по развитию\n\n"
        "Поехали!"
    ),
    completion_message="🎉 Поздравляем! Вы успешно прошли тест!",
    total_questions=8,
    answers_per_question=5,
)


def _template_fields(template: str) -> set:
    """Placeholder names used in a format string."""
    try:
        return {
            field_name
            for _, field_name, _, _ in string.Formatter().parse(template)
            if field_name is not None
        }
    except ValueError as e:
        raise ConfigurationError("malformed share template", str(e)) from e


@dataclass(frozen=True)
class _QuizSnapshot:
    settings: QuizSettings
    questions: List[Question]
    categories: List[PersonalityType]


class JsonQuizConfigurationProvider(IQuizConfigurationProvider):
    """Reads ``test-config.json``, ``questions.json`` and ``personality-types.json``.

    The parsed definition is cached. ``reload()`` drops the cache; with
    ``cache_ttl`` set, the cache is also refreshed once it is older than
    that many seconds.
    """

    SETTINGS_FILE = "test-config.json"
    QUESTIONS_FILE = "questions.json"
    CATEGORIES_FILE = "personality-types.json"

    def __init__(
        self,
        config_dir: Union[str, Path],
        cache_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.config_dir = Path(config_dir)
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._snapshot: Optional[_QuizSnapshot] = None
        self._loaded_at = 0.0
        self._load_lock = asyncio.Lock()

    async def get_settings(self) -> QuizSettings:
        return (await self._get_snapshot()).settings

    async def get_questions(self) -> List[Question]:
        return list((await self._get_snapshot()).questions)

    async def get_categories(self) -> List[PersonalityType]:
        return list((await self._get_snapshot()).categories)

    async def get_total_question_count(self) -> int:
        return (await self.get_settings()).total_questions

    async def validate(self) -> None:
        """Raise ConfigurationError if the quiz definition is inconsistent."""

        self._check(await self._get_snapshot())
        logger.info("Configuration validation passed")

    async def reload(self) -> None:
        """Re-read the files now.

        Raises ConfigurationError if the new definition is invalid; the
        previous one stays in use.
        """
        async with self._load_lock:
            await self._refresh(raise_errors=True)
        logger.info("Configuration reloaded")

    def _check(self, snapshot: _QuizSnapshot) -> None:
        settings, questions, categories = snapshot.settings, snapshot.questions, snapshot.categories

        if not settings.name:
            raise ConfigurationError("bot name is not configured")

        if not questions:
            raise ConfigurationError("no questions configured")

        if not categories:
            raise ConfigurationError("no personality types configured")

        category_ids = [c.id for c in categories]
        if len(set(category_ids)) != len(category_ids):
            raise ConfigurationError("duplicate personality type id")

        if min(category_ids) < 1:
            raise ConfigurationError("personality type ids must start from 1")

        question_ids = [q.id for q in questions]
        if len(set(question_ids)) != len(question_ids):
            raise ConfigurationError("duplicate question id")

        if len(questions) != settings.total_questions:
            raise ConfigurationError(
                "questions count mismatch",
                f"expected {settings.total_questions}, got {len(questions)}"
            )

        known_categories = set(category_ids)
        for question in questions:
            if not question.answers:
                raise ConfigurationError("question without answers", f"question {question.id}")

            answer_ids = question.answer_ids
            if len(set(answer_ids)) != len(answer_ids):
                raise ConfigurationError("duplicate answer id", f"question {question.id}")

            if len(answer_ids) != settings.answers_per_question:
                logger.warning(
                    f"Question {question.id} has {len(answer_ids)} answers, "
                    f"expected {settings.answers_per_question}"
                )

            for answer in question.answers:
                if answer.category_id not in known_categories:
                    raise ConfigurationError(
                        "unknown personality type",
                        f"question {question.id}, answer {answer.id}: {answer.category_id}"
                    )

        for category in categories:
            unknown = _template_fields(category.share_template) - SHARE_TEMPLATE_FIELDS
            if unknown:
                raise ConfigurationError(
                    "unknown share template placeholder",
                    f"personality type {category.id}: {sorted(unknown)}"
                )

    async def _get_snapshot(self) -> _QuizSnapshot:
        if self._is_fresh():
            return self._snapshot

        async with self._load_lock:
            if not self._is_fresh():
                await self._refresh(raise_errors=False)

        return self._snapshot

    async def _refresh(self, raise_errors: bool) -> None:
        if self._snapshot is None:
            self._snapshot = await asyncio.to_thread(self._load)
            self._loaded_at = self._clock()
            return

        # A loaded definition is only replaced by one that validates
        try:
            snapshot = await asyncio.to_thread(self._load)
            self._check(snapshot)
        except ConfigurationError as e:
            self._loaded_at = self._clock()
            logger.error(f"Keeping previous quiz configuration: {e.message}")
            if raise_errors:
                raise
            return

        self._snapshot = snapshot
        self._loaded_at = self._clock()

    def _is_fresh(self) -> bool:
        if self._snapshot is None:
            return False
        if self.cache_ttl is None:
            return True
        return self._clock() - self._loaded_at < self.cache_ttl

    def _load(self) -> _QuizSnapshot:
        settings = self._load_settings()

        questions = [
            Question(
                id=q.id,
                text=q.text,
                answers=tuple(
                    AnswerOption(id=a.id, text=a.text, category_id=a.category_id)
                    for a in q.answers
                )
            )
            for q in self._read_list(self.QUESTIONS_FILE, QuestionSchema)
        ]

        categories = sorted(
            (
                PersonalityType(**t.model_dump())
                for t in self._read_list(self.CATEGORIES_FILE, PersonalityTypeSchema)
            ),
            key=lambda c: c.id
        )

        logger.debug(
            f"Loaded {len(questions)} questions and {len(categories)} personality types "
            f"from {self.config_dir}"
        )
        return _QuizSnapshot(settings=settings, questions=questions, categories=categories)

    def _load_settings(self) -> QuizSettings:
        path = self.config_dir / self.SETTINGS_FILE
        if not path.exists():
            logger.warning(f"Config file not found: {path}. Using defaults.")
            return DEFAULT_SETTINGS

        try:
            schema = QuizSettingsSchema.model_validate(self._read_json(path))
        except ValidationError as e:
            raise ConfigurationError(f"invalid {self.SETTINGS_FILE}", str(e)) from e

        return QuizSettings(**schema.model_dump())

    def _read_list(self, file_name: str, schema: type) -> list:
        path = self.config_dir / file_name
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return []

        try:
            return TypeAdapter(List[schema]).validate_python(self._read_json(path))
        except ValidationError as e:
            raise ConfigurationError(f"invalid {file_name}", str(e)) from e

    def _read_json(self, path: Path):
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"invalid JSON in {path.name}", str(e)) from e
