"""Main entry point for the staff bot."""

import asyncio
import logging
import sys
from pathlib import Path

import sentry_sdk
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from posbot.api.errors import ApiError
from posbot.config import get_settings
from posbot.handlers import get_main_router
from posbot.security import WhitelistMiddleware
from posbot.services import get_backend


def setup_logging() -> None:
    """Configure logging based on settings."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    # Reduce noise from libraries
    logging.getLogger("aiogram").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def on_startup(bot: Bot) -> None:
    """Startup tasks."""
    logger = logging.getLogger(__name__)

    settings = get_settings()
    Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)

    # Resolve the tenant once so misconfiguration shows up in the log early
    try:
        tenant_id = await get_backend().tenants.get_tenant_id()
        logger.info("tenant_resolved", extra={"tenant_id": tenant_id})
    except ApiError as e:
        logger.error(
            "tenant_resolve_failed",
            extra={"error": str(e)},
            exc_info=True,
        )
        logger.warning("Bot will start but backend operations may fail")

    me = await bot.get_me()
    logger.info(
        "bot_started",
        extra={"username": me.username, "bot_id": me.id},
    )
    logger.info(
        "staff_configured",
        extra={"staff_ids": settings.staff_telegram_ids},
    )


async def on_shutdown(bot: Bot) -> None:
    """Shutdown tasks."""
    logger = logging.getLogger(__name__)
    logger.info("Bot shutting down...")

    await bot.session.close()


def setup_sentry() -> None:
    """Initialize Sentry SDK if DSN is configured."""
    settings = get_settings()
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
            send_default_pii=False,
        )
        logging.getLogger(__name__).info(
            f"Sentry initialized for environment: {settings.environment}"
        )


async def main() -> None:
    """Main async entry point."""
    setup_logging()
    setup_sentry()
    logger = logging.getLogger(__name__)

    settings = get_settings()

    if not settings.staff_telegram_ids:
        logger.error("STAFF_TELEGRAM_IDS not configured!")
        sys.exit(1)

    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    storage = MemoryStorage()
    dp = Dispatcher(storage=storage)

    dp.message.middleware(WhitelistMiddleware())
    dp.callback_query.middleware(WhitelistMiddleware())

    dp.include_router(get_main_router())

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    logger.info("Starting bot polling...")

    try:
        await dp.start_polling(
            bot,
            allowed_updates=["message", "callback_query"],
        )
    finally:
        await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
