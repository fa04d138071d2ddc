"""Count session: search, count, compare, apply."""

from __future__ import annotations

import logging

from posbot import messages
from posbot.api.count import CountApi
from posbot.api.errors import ApiError
from posbot.api.inventory import InventoryApi
from posbot.models import AdjustmentReport, CountableItem, CountSummary, SessionState

from .adjust import AdjustmentRunner, ProgressCallback, validate_adjustments
from .compare import Comparator, CountComparison, EmptyCountError, InvalidCountError
from .entries import CountEntryStore
from .search import SearchController

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Operation not allowed in the current session state."""


class CountSession:
    """One user's count, from search to applied adjustments.

    IDLE -search-> LOADED -edit-> COUNTED -compare-> COMPARED -apply-> APPLYING
    -done-> IDLE, then the first page is fetched again. reset() returns to IDLE
    from anywhere. Remote failures land in `error` as a localized string.
    """

    def __init__(
        self,
        count_api: CountApi,
        inventory_api: InventoryApi,
        page_size: int = 50,
        debounce_seconds: float = 0.5,
        adjustment_delay_seconds: float = 0.1,
    ):
        self._count_api = count_api
        self.search = SearchController(
            self._fetch_page, page_size=page_size, debounce_seconds=debounce_seconds
        )
        self.entries = CountEntryStore()
        self.comparator = Comparator(count_api)
        self.runner = AdjustmentRunner(inventory_api, delay_seconds=adjustment_delay_seconds)

        self.state = SessionState.IDLE
        self.comparison: CountComparison | None = None
        self.report: AdjustmentReport | None = None
        self.error: str | None = None

    async def _fetch_page(self, store_id: str, search: str | None, limit: int, offset: int):
        return await self._count_api.get_system_count(
            store_id, search=search, limit=limit, offset=offset
        )

    @property
    def store_id(self) -> str | None:
        return self.search.store_id

    @property
    def items(self) -> tuple[CountableItem, ...]:
        return self.entries.items

    def summary(self) -> CountSummary:
        return self.entries.summary()

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidTransitionError(
                f"Not allowed in state {self.state.value}; expected {', '.join(s.value for s in states)}"
            )

    def _after_fetch(self, ok: bool) -> bool:
        if ok:
            self.entries.load(self.search.items)
            self.comparison = None
            self.state = SessionState.LOADED if self.entries else SessionState.IDLE
        self.error = self.search.error
        return ok

    async def start(self, store_id: str) -> bool:
        """Load the first page of a store."""
        self._require(SessionState.IDLE, SessionState.LOADED, SessionState.COUNTED)
        return self._after_fetch(await self.search.set_store(store_id))

    async def search_items(self, query: str) -> bool:
        """Debounced search; False when superseded or failed."""
        self._require(SessionState.IDLE, SessionState.LOADED, SessionState.COUNTED)
        return self._after_fetch(await self.search.set_query(query))

    async def refresh(self) -> bool:
        self._require(SessionState.IDLE, SessionState.LOADED, SessionState.COUNTED)
        return self._after_fetch(await self.search.refresh())

    async def load_more(self) -> int:
        """Append the next page. Returns the number of new rows."""
        self._require(SessionState.LOADED, SessionState.COUNTED)
        added = await self.search.load_more()
        self.error = self.search.error
        if added:
            self.entries.append(added)
        return len(added)

    def update_quantity(self, item_id: str, qty: int) -> CountableItem | None:
        self._require(SessionState.LOADED, SessionState.COUNTED)
        self.entries.update_quantity(item_id, qty)
        self.state = SessionState.COUNTED
        return self.entries.get(item_id)

    async def compare(self) -> CountComparison | None:
        self._require(SessionState.LOADED, SessionState.COUNTED, SessionState.COMPARED)
        self.error = None
        try:
            comparison = await self.comparator.compare(self.store_id, self.entries.count_pairs())
        except EmptyCountError:
            self.error = messages.EMPTY_COUNT
            return None
        except InvalidCountError:
            self.error = messages.INVALID_COUNT
            return None
        except ApiError as e:
            self.error = messages.describe_error(messages.COMPARE_FAILED, e)
            logger.warning("count_compare_failed", extra={"store_id": self.store_id, "error": str(e)})
            return None

        self.comparison = comparison
        self.state = SessionState.COMPARED
        return comparison

    def resume_counting(self) -> None:
        """Leave the comparison and go back to editing counts."""
        self._require(SessionState.COMPARED)
        self.comparison = None
        self.state = SessionState.COUNTED

    async def apply_adjustments(
        self, on_progress: ProgressCallback | None = None
    ) -> AdjustmentReport | None:
        """Apply every discrepancy, then reset and reload the first page."""
        self._require(SessionState.COMPARED)
        validation = validate_adjustments(self.comparison.items)
        if not validation.valid:
            self.error = "\n".join([messages.ADJUST_ISSUES, *validation.issues])
            return None

        self.state = SessionState.APPLYING
        self.error = None
        store_id = self.store_id
        try:
            report = await self.runner.apply_with_progress(
                store_id, self.comparison.items, on_progress
            )
        except Exception:
            # Some items may already be committed; the old comparison must not be re-applied
            logger.error("count_apply_interrupted", extra={"store_id": store_id}, exc_info=True)
            self.reset()
            self.error = messages.ADJUST_FAILED
            raise

        self.reset()
        self.report = report
        await self.refresh()
        return report

    def reset(self) -> None:
        """Back to IDLE: drop rows, counts, comparison and results."""
        self.search.clear()
        self.entries.clear()
        self.comparison = None
        self.report = None
        self.error = None
        self.state = SessionState.IDLE
