"""Telegram presentation layer."""

from aiogram import Dispatcher

from .handlers import create_router


def create_telegram_handlers(dp: Dispatcher, container) -> None:
    """Register bot handlers and the services they depend on."""

    dp["state_machine"] = container.state_machine
    dp["quiz_provider"] = container.quiz_provider
    dp["display_timezone"] = container.settings.display_timezone

    dp.include_router(create_router())


__all__ = [
    "create_telegram_handlers",
    "create_router",
]
