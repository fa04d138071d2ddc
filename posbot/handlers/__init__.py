"""Telegram bot handlers."""

from aiogram import Router

from posbot.handlers.count import router as count_router
from posbot.handlers.critical import router as critical_router
from posbot.handlers.health import router as health_router
from posbot.handlers.stores import router as stores_router
from posbot.handlers.transfers import router as transfers_router


def get_main_router() -> Router:
    """Create and configure main router with all sub-routers."""
    main_router = Router()

    # Critical commands FIRST - always work regardless of FSM state
    main_router.include_router(critical_router)

    # Menu buttons before the count router's free-text handlers
    main_router.include_router(health_router)
    main_router.include_router(stores_router)
    main_router.include_router(transfers_router)
    main_router.include_router(count_router)

    return main_router


__all__ = ["get_main_router"]
