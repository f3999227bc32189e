"""Cloud function entry point.

Each invocation carries one Telegram webhook body. The container, bot and
dispatcher are built on the first call and reused while the function
instance stays warm.
"""

import base64
import json
import logging
from typing import Any, Dict, Optional, Tuple

from aiogram import Bot, Dispatcher
from aiogram.types import Update
from pydantic import ValidationError

from .config import get_container, get_settings
from .domain.exceptions import ConfigurationError
from .monitoring import setup_logging
from .presentation.telegram import create_telegram_handlers

logger = logging.getLogger(__name__)

_runtime: Optional[Tuple[Bot, Dispatcher]] = None


async def _get_runtime() -> Tuple[Bot, Dispatcher]:
    global _runtime
    if _runtime is not None:
        return _runtime

    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    if not settings.telegram_bot_token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is not set")

    container = get_container()
    await container.initialize()

    bot = Bot(token=settings.telegram_bot_token)
    dp = Dispatcher()
    create_telegram_handlers(dp, container)

    _runtime = (bot, dp)
    logger.info("Serverless runtime initialized")
    return _runtime


def _response(status_code: int, body: str) -> Dict[str, Any]:
    return {"statusCode": status_code, "body": body}


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Extract the JSON update from a function event.

    Raises ValueError if the body is missing or not a JSON object.
    """
    body = event.get("body")
    if not body:
        raise ValueError("Empty request body")

    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")

    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("Request body is not a JSON object")
    return data


async def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Process one webhook call."""

    try:
        data = parse_body(event)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Invalid request body: {e}")
        return _response(400, "Bad Request")

    bot, dp = await _get_runtime()

    try:
        update = Update.model_validate(data, context={"bot": bot})
    except ValidationError as e:
        logger.warning(f"Invalid update payload: {e}")
        return _response(400, "Bad Request")

    await dp.feed_update(bot, update)
    return _response(200, "OK")
