"""Bot message texts and formatting."""

import logging
from datetime import datetime
from html import escape
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from aiogram.types import User

from ...application.dto import CurrentQuestionDTO
from ...domain.entities import PersonalityType, QuizSettings, TestResult, TestSession

logger = logging.getLogger(__name__)

START_TEST_BUTTON = "Начать тест"

SESSION_NOT_FOUND = "❌ Сессия не найдена. Нажмите «Начать тест», чтобы пройти тест заново."
TEST_ALREADY_COMPLETED = "Тест уже завершён."
STALE_ANSWER = "Ответ на этот вопрос уже принят."
CONTINUE_TEST = "✅ Продолжаем тест!"
RESTART_TEST = "🔄 Начинаем тест заново!"
RESULT_NOT_FOUND = "❌ Результат не найден или у вас нет доступа."
UNKNOWN_COMMAND = "Неизвестная команда. Используйте /start для начала теста."
UNKNOWN_TEXT = "Нажмите кнопку «Начать тест», чтобы пройти тест, или используйте /help."
INTERNAL_ERROR = "❌ Произошла внутренняя ошибка. Пожалуйста, попробуйте позже."


def get_user_name(user: Optional[User]) -> str:
    """Display name for a Telegram user."""
    if user is None:
        return ""
    if user.username:
        return f"@{user.username}"
    if user.full_name:
        return user.full_name
    return f"User_{user.id}"


def format_date(value: datetime, timezone_name: str) -> str:
    return value.astimezone(ZoneInfo(timezone_name)).strftime("%d.%m.%Y")


def format_help(total_questions: int) -> str:
    return (
        "Привет! Я - бот для определения типа личности.\n\n"
        f"Пройди тест из {total_questions} вопросов и узнай свой тип!\n\n"
        "Доступные команды:\n"
        "/start - начать работу с ботом\n"
        "/help - показать эту справку\n\n"
        f"Нажми кнопку «{START_TEST_BUTTON}» для старта."
    )


def format_continue_or_restart(session: TestSession) -> str:
    return (
        "У вас есть незавершённый тест "
        f"({session.answered_count} из {session.total_questions} вопросов).\n"
        "Продолжить или начать заново?"
    )


def format_question(dto: CurrentQuestionDTO) -> str:
    """Question text followed by its answers, numbered in session order."""

    lines = [
        f"<b>Вопрос {dto.position} из {dto.total_questions}</b>",
        "",
        escape(dto.question.text),
        "",
    ]
    lines.extend(
        f"{index}. {escape(answer.text)}"
        for index, answer in enumerate(dto.answers, start=1)
    )
    return "\n".join(lines)


def format_scores(result: TestResult, categories: Sequence[PersonalityType]) -> str:
    return "\n".join(
        f"{escape(category.name)}: {result.score_for(category.id)}"
        for category in sorted(categories, key=lambda c: c.id)
    )


def format_result(
    result: TestResult,
    category: PersonalityType,
    categories: Sequence[PersonalityType],
    settings: QuizSettings,
    timezone_name: str
) -> str:
    """Result message shown when a test is completed."""

    parts = [
        escape(settings.completion_message),
        f"🎯 <b>{escape(category.title)}</b>",
    ]
    if category.description:
        parts.append(escape(category.description))
    if category.sphere:
        parts.append(f"✨ {escape(category.sphere)}")
    if category.strengths:
        parts.append(f"💪 {escape(category.strengths)}")
    if category.recommendations:
        parts.append(f"📋 {escape(category.recommendations)}")

    parts.append(f"📊 <b>Ваши баллы по типам:</b>\n{format_scores(result, categories)}")
    parts.append(f"📅 {format_date(result.completed_at, timezone_name)}")

    return "\n\n".join(parts)


class _ShareTemplateValues(dict):
    def __missing__(self, key):
        return "{" + key + "}"


def render_share_template(category: PersonalityType, user_name: str) -> Optional[str]:
    """Fill a type's share template; None if there is none or it cannot be rendered.

    Unknown named placeholders are left as written.
    """
    if not category.share_template:
        return None

    values = _ShareTemplateValues(user_name=user_name, type_name=category.title)
    try:
        return category.share_template.format_map(values)
    except (AttributeError, IndexError, KeyError, ValueError) as e:
        logger.warning(f"Share template of personality type {category.id} is broken: {e}")
        return None


def format_share_text(
    session: TestSession,
    category: PersonalityType,
    settings: QuizSettings,
    timezone_name: str
) -> str:
    """Text the user can forward to share the result."""

    text = render_share_template(category, session.user_name)
    if text is not None:
        parts = [escape(text)]
    else:
        parts = [
            f"🎉 {escape(session.user_name)} прошёл тест «{escape(settings.name)}»!",
            f"🎯 <b>{escape(category.title)}</b>",
        ]
        if category.slogan:
            parts.append(f"<i>{escape(category.slogan)}</i>")

    parts.append(f"📅 {format_date(session.completed_at, timezone_name)}")
    if settings.channel_link:
        parts.append(f"Пройти тест: {escape(settings.channel_link)}")

    return "\n\n".join(parts)
