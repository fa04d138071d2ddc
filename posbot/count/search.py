"""Debounced, paginated search over system count rows."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from posbot import messages
from posbot.api.errors import ApiError
from posbot.api.schemas import SystemCountPage
from posbot.models import CountableItem

logger = logging.getLogger(__name__)

PAGE_SIZE = 50
DEBOUNCE_SECONDS = 0.5

# (store_id, search, limit, offset) -> page
FetchPage = Callable[[str, str | None, int, int], Awaitable[SystemCountPage]]


class SearchController:
    """Keeps the loaded rows for one store and query.

    Every fresh request (query change, store change, refresh) bumps a
    generation counter; a response whose generation is no longer current is
    dropped, so a slow answer to an old query cannot overwrite a newer one.
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: int = PAGE_SIZE,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ):
        self._fetch_page = fetch_page
        self.page_size = page_size
        self.debounce_seconds = debounce_seconds

        self.store_id: str | None = None
        self.query = ""
        self.items: list[CountableItem] = []
        self.total_count = 0
        self.page = 0
        self.error: str | None = None
        self.loading = False

        self._generation = 0
        self._debounce_ticket = 0

    @property
    def has_more(self) -> bool:
        return len(self.items) < self.total_count

    async def set_store(self, store_id: str) -> bool:
        """Switch store and load its first page immediately."""
        self.store_id = store_id
        return await self.refresh()

    async def set_query(self, query: str) -> bool:
        """Debounced query change.

        Returns True when this call issued the fetch and its result was
        applied, False when a later call superseded it or the fetch failed.
        """
        self._debounce_ticket += 1
        ticket = self._debounce_ticket

        await asyncio.sleep(self.debounce_seconds)
        if ticket != self._debounce_ticket:
            return False

        self.query = query.strip()
        return await self.refresh()

    async def refresh(self) -> bool:
        """Fetch page 0 for the current store and query."""
        if not self.store_id:
            self.error = messages.NO_STORE
            return False

        self._generation += 1
        generation = self._generation
        page = await self._fetch(generation, offset=0, failure=messages.SEARCH_FAILED)
        if page is None:
            return False

        self.items = [CountableItem.from_system(row) for row in page.items]
        self.total_count = page.count
        self.page = 0
        return True

    async def load_more(self) -> list[CountableItem]:
        """Fetch the next page and append it. Returns the appended rows."""
        if not self.store_id or not self.has_more:
            return []

        next_page = self.page + 1
        generation = self._generation
        page = await self._fetch(
            generation, offset=next_page * self.page_size, failure=messages.LOAD_FAILED
        )
        if page is None:
            return []

        added = [CountableItem.from_system(row) for row in page.items]
        self.items = self.items + added
        self.total_count = page.count
        self.page = next_page
        return added

    def clear(self) -> None:
        """Forget rows and pending work; keeps store and query."""
        self._generation += 1
        self._debounce_ticket += 1
        self.items = []
        self.total_count = 0
        self.page = 0
        self.error = None
        self.loading = False

    async def _fetch(self, generation: int, offset: int, failure: str) -> SystemCountPage | None:
        self.loading = True
        self.error = None
        try:
            page = await self._fetch_page(self.store_id, self.query or None, self.page_size, offset)
        except ApiError as e:
            if generation == self._generation:
                self.loading = False
                self.error = messages.describe_error(failure, e)
            logger.warning(
                "count_page_failed",
                extra={"store_id": self.store_id, "query": self.query, "offset": offset, "error": str(e)},
            )
            return None

        if generation != self._generation:
            logger.debug("stale_page_dropped", extra={"generation": generation, "offset": offset})
            return None

        self.loading = False
        return page
