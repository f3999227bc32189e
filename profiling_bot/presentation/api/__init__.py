"""API presentation layer."""

import logging
import secrets
from typing import Optional

from aiogram.types import Update
from fastapi import FastAPI, Header, HTTPException, Request

from ... import __version__
from ...config import get_settings

logger = logging.getLogger(__name__)


def create_api_routes(app: FastAPI) -> None:
    """Create API routes."""

    settings = get_settings()

    @app.get("/")
    async def root():
        return {
            "message": f"{settings.app_name} API v{__version__}",
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        try:
            health_service = app.state.health_service
            health = await health_service.get_health_status()
            return health
        except Exception as e:
            return {"status": "error", "error": str(e)}

    @app.get("/ready")
    async def readiness_check():
        try:
            health_service = app.state.health_service
            readiness = await health_service.get_readiness_status()
            return readiness
        except Exception as e:
            return {"ready": False, "error": str(e)}

    @app.post(settings.telegram_webhook_path)
    async def telegram_webhook(
        request: Request,
        x_telegram_bot_api_secret_token: Optional[str] = Header(default=None)
    ):
        """Feed a Telegram update to the dispatcher."""

        expected = settings.telegram_webhook_secret
        if expected and not secrets.compare_digest(x_telegram_bot_api_secret_token or "", expected):
            logger.warning("Rejected webhook call with invalid secret token")
            raise HTTPException(status_code=403, detail="Invalid secret token")

        bot = getattr(app.state, "bot", None)
        dp = getattr(app.state, "dp", None)
        if bot is None or dp is None:
            raise HTTPException(status_code=503, detail="Telegram bot is not configured")

        try:
            update = Update.model_validate(await request.json(), context={"bot": bot})
        except ValueError as e:
            logger.warning(f"Invalid webhook payload: {e}")
            raise HTTPException(status_code=400, detail="Invalid update")

        await dp.feed_update(bot, update)
        return {"ok": True}
