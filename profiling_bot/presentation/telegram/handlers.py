"""Telegram handlers for the profiling test."""

import logging
from uuid import UUID

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, ErrorEvent, Message, ReplyKeyboardRemove

from ...application.use_cases import TestSessionStateMachine
from ...domain.entities import TestSession
from ...domain.exceptions import (
    InvalidInputError,
    InvalidStateError,
    SessionNotFoundError,
)
from ...domain.repositories import IQuizConfigurationProvider
from . import messages
from .keyboards import (
    AnswerCallback,
    ContinueCallback,
    RestartCallback,
    ShareCallback,
    answers_keyboard,
    continue_or_restart_keyboard,
    result_keyboard,
    start_keyboard,
)

logger = logging.getLogger(__name__)


async def cmd_start(message: Message, quiz_provider: IQuizConfigurationProvider):
    """Handle /start command - main entry point"""

    settings = await quiz_provider.get_settings()
    await message.answer(settings.welcome_message, reply_markup=start_keyboard())


async def cmd_help(message: Message, quiz_provider: IQuizConfigurationProvider):
    total = await quiz_provider.get_total_question_count()
    await message.answer(messages.format_help(total))


async def start_test(
    message: Message,
    state_machine: TestSessionStateMachine,
    quiz_provider: IQuizConfigurationProvider
):
    """Start a new test or offer to continue the unfinished one."""

    user = message.from_user
    existing = await state_machine.get_active_session(user.id)
    if existing is not None:
        await message.answer(
            messages.format_continue_or_restart(existing),
            reply_markup=continue_or_restart_keyboard(existing.id)
        )
        return

    session = await state_machine.start_test(user.id, messages.get_user_name(user))
    logger.info(f"User {user.id} started test, session {session.id}")

    settings = await quiz_provider.get_settings()
    await message.answer(settings.intro_message, reply_markup=ReplyKeyboardRemove())
    await send_current_question(message, state_machine, session.id)


async def unknown_command(message: Message):
    await message.answer(messages.UNKNOWN_COMMAND)


async def unknown_text(message: Message):
    await message.answer(messages.UNKNOWN_TEXT, reply_markup=start_keyboard())


async def answer_callback(
    callback: CallbackQuery,
    callback_data: AnswerCallback,
    state_machine: TestSessionStateMachine,
    quiz_provider: IQuizConfigurationProvider,
    display_timezone: str
):
    """Record the chosen answer and move to the next question or the result."""

    try:
        session = await state_machine.answer_question(
            callback_data.session_id,
            callback_data.question_id,
            callback_data.answer_id
        )
    except SessionNotFoundError:
        await callback.answer(messages.SESSION_NOT_FOUND, show_alert=True)
        return
    except InvalidStateError:
        await callback.answer(messages.TEST_ALREADY_COMPLETED, show_alert=True)
        return
    except InvalidInputError:
        await callback.answer(messages.STALE_ANSWER)
        return

    await callback.answer()

    if session.is_completed:
        await send_result(callback.message, state_machine, quiz_provider, session, display_timezone)
    else:
        await send_current_question(callback.message, state_machine, session.id)


async def continue_callback(
    callback: CallbackQuery,
    callback_data: ContinueCallback,
    state_machine: TestSessionStateMachine
):
    session = await state_machine.get_active_session(callback.from_user.id)
    if session is None or session.id != callback_data.session_id:
        await callback.answer(messages.SESSION_NOT_FOUND, show_alert=True)
        return

    await callback.answer(messages.CONTINUE_TEST)
    await send_current_question(callback.message, state_machine, session.id)


async def restart_callback(
    callback: CallbackQuery,
    callback_data: RestartCallback,
    state_machine: TestSessionStateMachine
):
    user = callback.from_user
    try:
        session = await state_machine.restart_test(
            user.id,
            messages.get_user_name(user),
            session_id=callback_data.session_id
        )
    except SessionNotFoundError:
        await callback.answer(messages.SESSION_NOT_FOUND, show_alert=True)
        return

    logger.info(f"User {user.id} restarted test, session {callback_data.session_id} -> {session.id}")

    await callback.answer(messages.RESTART_TEST)
    await send_current_question(callback.message, state_machine, session.id)


async def share_callback(
    callback: CallbackQuery,
    callback_data: ShareCallback,
    state_machine: TestSessionStateMachine,
    quiz_provider: IQuizConfigurationProvider,
    display_timezone: str
):
    session = await state_machine.get_completed_session(
        callback_data.session_id,
        user_id=callback.from_user.id
    )
    category = None
    if session is not None and session.result_category_id is not None:
        category = await quiz_provider.get_category(session.result_category_id)

    if category is None:
        await callback.answer(messages.RESULT_NOT_FOUND, show_alert=True)
        return

    settings = await quiz_provider.get_settings()
    await callback.answer()
    await callback.message.answer(
        messages.format_share_text(session, category, settings, display_timezone),
        parse_mode="HTML"
    )


async def error_handler(event: ErrorEvent):
    logger.error(f"Unhandled error in update {event.update.update_id}: {event.exception}", exc_info=event.exception)

    callback = event.update.callback_query
    if callback is not None:
        await callback.answer(messages.INTERNAL_ERROR, show_alert=True)
        return True

    message = event.update.message
    if message is not None:
        await message.answer(messages.INTERNAL_ERROR)
    return True


async def send_current_question(
    message: Message,
    state_machine: TestSessionStateMachine,
    session_id: UUID
) -> bool:
    """Send the session's current question; False if there is none."""

    dto = await state_machine.get_current_question(session_id)
    if dto is None:
        logger.warning(f"No current question for session {session_id}")
        return False

    await message.answer(
        messages.format_question(dto),
        reply_markup=answers_keyboard(dto),
        parse_mode="HTML"
    )
    return True


async def send_result(
    message: Message,
    state_machine: TestSessionStateMachine,
    quiz_provider: IQuizConfigurationProvider,
    session: TestSession,
    display_timezone: str
) -> None:
    result = await state_machine.calculate_result(session)
    category = await quiz_provider.get_category(result.category_id)
    categories = await quiz_provider.get_categories()
    settings = await quiz_provider.get_settings()

    await message.answer(
        messages.format_result(result, category, categories, settings, display_timezone),
        reply_markup=result_keyboard(session.id),
        parse_mode="HTML"
    )


def create_router() -> Router:
    """Build a router with every profiling test handler registered."""

    router = Router(name="profiling_test")

    router.message.register(cmd_start, CommandStart())
    router.message.register(cmd_help, Command("help"))
    router.message.register(start_test, F.text == messages.START_TEST_BUTTON)
    router.message.register(unknown_command, F.text.startswith("/"))
    router.message.register(unknown_text)

    router.callback_query.register(answer_callback, AnswerCallback.filter())
    router.callback_query.register(continue_callback, ContinueCallback.filter())
    router.callback_query.register(restart_callback, RestartCallback.filter())
    router.callback_query.register(share_callback, ShareCallback.filter())

    router.errors.register(error_handler)

    return router
