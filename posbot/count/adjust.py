"""Applies count discrepancies to the inventory ledger, one item at a time."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass

from posbot.api.errors import ApiError
from posbot.api.inventory import InventoryApi
from posbot.api.schemas import ComparisonResult
from posbot.models import (
    AdjustmentReport,
    AdjustmentResult,
    AdjustmentStatus,
    CountStatus,
    InventoryReason,
)

logger = logging.getLogger(__name__)

# Pause between two adjustment calls
ADJUSTMENT_DELAY_SECONDS = 0.1

# Deltas above this are flagged as suspicious before applying
EXTREME_DELTA = 1000

# Called after every item; may be a coroutine function
ProgressCallback = Callable[[int, int], Awaitable[None] | None]


def items_to_adjust(results: Sequence[ComparisonResult]) -> list[ComparisonResult]:
    return [r for r in results if r.status is not CountStatus.MATCH]


def adjustment_note(item: ComparisonResult) -> str:
    return f"Count adjustment: {item.status.value} (Delta: {item.delta})"


@dataclass(frozen=True)
class AdjustmentValidation:
    valid: bool
    issues: list[str]


def validate_adjustments(results: Sequence[ComparisonResult]) -> AdjustmentValidation:
    issues = []

    missing_ids = [r for r in results if not r.variant_id]
    if missing_ids:
        issues.append(f"{len(missing_ids)} items missing variant IDs")

    extreme = [r for r in results if abs(r.delta) > EXTREME_DELTA]
    if extreme:
        issues.append(f"{len(extreme)} items with extreme differences (>{EXTREME_DELTA})")

    negative = [r for r in results if r.physical_qty < 0]
    if negative:
        issues.append(f"{len(negative)} items with negative physical quantities")

    return AdjustmentValidation(valid=not issues, issues=issues)


@dataclass(frozen=True)
class AdjustmentSummary:
    total_items: int
    additions_count: int
    additions_total: int
    subtractions_count: int
    subtractions_total: int

    @property
    def net_change(self) -> int:
        return self.additions_total - self.subtractions_total


def adjustment_summary(results: Sequence[ComparisonResult]) -> AdjustmentSummary:
    targets = items_to_adjust(results)
    additions = [r.delta for r in targets if r.delta > 0]
    subtractions = [r.delta for r in targets if r.delta < 0]
    return AdjustmentSummary(
        total_items=len(targets),
        additions_count=len(additions),
        additions_total=sum(additions),
        subtractions_count=len(subtractions),
        subtractions_total=abs(sum(subtractions)),
    )


class AdjustmentRunner:
    """Best-effort batch: every item is attempted, failures are recorded."""

    def __init__(self, api: InventoryApi, delay_seconds: float = ADJUSTMENT_DELAY_SECONDS):
        self._api = api
        self.delay_seconds = delay_seconds

    async def iter_adjustments(
        self, store_id: str, results: Sequence[ComparisonResult]
    ) -> AsyncIterator[AdjustmentResult]:
        """Yield one result per non-matching item, in order.

        Item i+1 is not sent before item i has resolved.
        """
        targets = items_to_adjust(results)
        for index, item in enumerate(targets):
            try:
                await self._api.adjust(
                    store_id=store_id,
                    variant_id=item.variant_id,
                    delta=item.delta,
                    reason=InventoryReason.COUNT,
                    note=adjustment_note(item),
                )
            except ApiError as e:
                logger.warning(
                    "count_adjustment_failed",
                    extra={"store_id": store_id, "variant_id": item.variant_id, "error": str(e)},
                )
                yield AdjustmentResult.for_item(item, AdjustmentStatus.ERROR, e.message)
            except Exception as e:
                logger.error(
                    "count_adjustment_crashed",
                    extra={"store_id": store_id, "variant_id": item.variant_id, "error": str(e)},
                    exc_info=True,
                )
                yield AdjustmentResult.for_item(
                    item, AdjustmentStatus.ERROR, str(e) or type(e).__name__
                )
            else:
                yield AdjustmentResult.for_item(item, AdjustmentStatus.SUCCESS)

            if index < len(targets) - 1 and self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)

    async def apply_with_progress(
        self,
        store_id: str,
        results: Sequence[ComparisonResult],
        on_progress: ProgressCallback | None = None,
    ) -> AdjustmentReport:
        total = len(items_to_adjust(results))
        report = AdjustmentReport()

        async for outcome in self.iter_adjustments(store_id, results):
            report.results.append(outcome)
            if on_progress:
                pending = on_progress(len(report.results), total)
                if inspect.isawaitable(pending):
                    await pending

        logger.info(
            "count_adjustments_applied",
            extra={"store_id": store_id, "succeeded": report.succeeded, "failed": report.failed},
        )
        return report
