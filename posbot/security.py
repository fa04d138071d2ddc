"""Access middleware for store staff."""

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from posbot.config import get_settings


class WhitelistMiddleware(BaseMiddleware):
    """Middleware to restrict bot access to whitelisted staff only."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """Check if user is in whitelist before processing."""
        settings = get_settings()

        user_id: int | None = None

        if isinstance(event, Message) and event.from_user:
            user_id = event.from_user.id
        elif isinstance(event, CallbackQuery) and event.from_user:
            user_id = event.from_user.id

        if user_id is None:
            return None

        if user_id not in settings.staff_telegram_ids:
            if isinstance(event, Message):
                await event.answer("⛔ Хандах эрхгүй. Энэ бот зөвхөн дэлгүүрийн ажилтнуудад.")
            elif isinstance(event, CallbackQuery):
                await event.answer("⛔ Хандах эрхгүй", show_alert=True)
            return None

        return await handler(event, data)
