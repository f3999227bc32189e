"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from aiogram import Bot, Dispatcher
from fastapi import FastAPI

from . import __version__
from .config import get_container, get_settings
from .monitoring import HealthCheckService, setup_logging
from .presentation.api import create_api_routes
from .presentation.telegram import create_telegram_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""

    # Startup
    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    logger.info("🚀 Starting Profiling Bot...")

    polling_task = None
    try:
        # Initialize dependency container
        container = get_container()
        await container.initialize()
        app.state.container = container

        # Initialize Telegram bot if configured
        if settings.telegram_bot_token:
            bot = Bot(token=settings.telegram_bot_token)
            dp = Dispatcher()

            # Register handlers
            create_telegram_handlers(dp, container)

            # Setup webhook or polling
            if settings.telegram_webhook_url:
                await bot.set_webhook(
                    url=f"{settings.telegram_webhook_url.rstrip('/')}{settings.telegram_webhook_path}",
                    secret_token=settings.telegram_webhook_secret,
                    allowed_updates=dp.resolve_used_update_types()
                )
                logger.info("📡 Telegram webhook configured")
            else:
                await bot.delete_webhook()
                polling_task = asyncio.create_task(
                    dp.start_polling(bot, handle_signals=False)
                )
                logger.info("🔄 Telegram polling started")

            app.state.bot = bot
            app.state.dp = dp
        else:
            logger.warning("TELEGRAM_BOT_TOKEN is not set, bot is disabled")

        # Initialize health check service
        health_service = HealthCheckService(container)
        app.state.health_service = health_service

        # Run initial health check
        health = await health_service.get_health_status()
        logger.info(f"📊 System health: {health['status']}")

        logger.info("✅ Profiling Bot started successfully!")

    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    yield

    # Shutdown
    logger.info("🛑 Shutting down Profiling Bot...")

    try:
        if polling_task is not None:
            await app.state.dp.stop_polling()
            polling_task.cancel()

        if getattr(app.state, "bot", None) is not None:
            await app.state.bot.session.close()

        if hasattr(app.state, "container"):
            await app.state.container.close()

        logger.info("✅ Shutdown completed")

    except Exception as e:
        logger.error(f"❌ Shutdown error: {e}")


def create_app() -> FastAPI:
    """Create FastAPI application."""

    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Telegram personality profiling test bot",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan
    )

    # Add API routes
    create_api_routes(app)

    return app


# Create application instance
app = create_app()


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "profiling_bot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
