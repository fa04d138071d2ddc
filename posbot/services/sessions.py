"""Per-user count sessions for the bot."""

from __future__ import annotations

import logging

from posbot.config import get_settings
from posbot.count import CountSession
from posbot.services.backend import Backend, get_backend

logger = logging.getLogger(__name__)


class CountService:
    """Keeps one in-memory CountSession per Telegram user.

    Sessions are not persisted: a restart during APPLYING keeps the
    adjustments already committed server-side and loses only the progress view.
    """

    def __init__(self, backend: Backend | None = None):
        self._backend = backend
        self._sessions: dict[int, CountSession] = {}
        self._stores: dict[int, str] = {}

    @property
    def backend(self) -> Backend:
        if self._backend is None:
            self._backend = get_backend()
        return self._backend

    def selected_store(self, user_id: int) -> str | None:
        """Store picked by the user, else the configured default."""
        return self._stores.get(user_id) or get_settings().default_store_id or None

    def select_store(self, user_id: int, store_id: str) -> None:
        self._stores[user_id] = store_id
        self.clear_session(user_id)

    def get_session(self, user_id: int) -> CountSession | None:
        return self._sessions.get(user_id)

    def create_session(self, user_id: int) -> CountSession:
        settings = get_settings()
        session = CountSession(
            self.backend.count,
            self.backend.inventory,
            page_size=settings.count_page_size,
            debounce_seconds=settings.search_debounce_seconds,
            adjustment_delay_seconds=settings.adjustment_delay_seconds,
        )
        self._sessions[user_id] = session
        logger.info("count_session_created", extra={"user_id": user_id})
        return session

    def get_or_create(self, user_id: int) -> CountSession:
        return self._sessions.get(user_id) or self.create_session(user_id)

    def clear_session(self, user_id: int) -> None:
        session = self._sessions.pop(user_id, None)
        if session:
            session.reset()


count_service = CountService()
