"""Inline and reply keyboards."""

from uuid import UUID

from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from ...application.dto import CurrentQuestionDTO
from .messages import START_TEST_BUTTON


class AnswerCallback(CallbackData, prefix="answer"):
    """Answer button; carries original question and answer ids."""

    session_id: UUID
    question_id: int
    answer_id: int


class ContinueCallback(CallbackData, prefix="continue"):
    session_id: UUID


class RestartCallback(CallbackData, prefix="restart"):
    session_id: UUID


class ShareCallback(CallbackData, prefix="share"):
    session_id: UUID


def start_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=START_TEST_BUTTON)]],
        resize_keyboard=True,
        one_time_keyboard=True
    )


def answers_keyboard(dto: CurrentQuestionDTO) -> InlineKeyboardMarkup:
    """One numbered button per answer, in the session's display order."""

    builder = InlineKeyboardBuilder()
    for index, answer in enumerate(dto.answers, start=1):
        builder.button(
            text=str(index),
            callback_data=AnswerCallback(
                session_id=dto.session_id,
                question_id=dto.question.id,
                answer_id=answer.id
            )
        )
    builder.adjust(len(dto.answers))
    return builder.as_markup()


def continue_or_restart_keyboard(session_id: UUID) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text="▶️ Продолжить", callback_data=ContinueCallback(session_id=session_id))
    builder.button(text="🔄 Начать заново", callback_data=RestartCallback(session_id=session_id))
    builder.adjust(1)
    return builder.as_markup()


def result_keyboard(session_id: UUID) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.button(text="📤 Поделиться результатом", callback_data=ShareCallback(session_id=session_id))
    return builder.as_markup()
