"""Sends entered counts to the remote comparator."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from posbot.api.count import CountApi
from posbot.api.schemas import ComparisonResult, ComparisonSummary
from posbot.models import CountStatus

logger = logging.getLogger(__name__)


class EmptyCountError(ValueError):
    """Nothing to compare."""


class InvalidCountError(ValueError):
    """Count pairs with a missing id or a negative quantity."""


@dataclass(frozen=True)
class CountComparison:
    """Comparator answer; classification comes from the server as-is."""

    items: tuple[ComparisonResult, ...]
    summary: ComparisonSummary

    @property
    def discrepancies(self) -> list[ComparisonResult]:
        return [i for i in self.items if i.status is not CountStatus.MATCH]

    def by_status(self, status: CountStatus) -> list[ComparisonResult]:
        return [i for i in self.items if i.status is status]


def validate_count_data(pairs: Sequence[tuple[str, int]]) -> bool:
    if not pairs:
        return False
    return all(
        isinstance(variant_id, str) and variant_id and isinstance(qty, int) and qty >= 0
        for variant_id, qty in pairs
    )


class Comparator:
    def __init__(self, api: CountApi):
        self._api = api

    async def compare(self, store_id: str, pairs: Sequence[tuple[str, int]]) -> CountComparison:
        """Compare every loaded row, zero counts included.

        Raises EmptyCountError or InvalidCountError before any remote call.
        """
        if not pairs:
            raise EmptyCountError("No counted items")
        if not validate_count_data(pairs):
            raise InvalidCountError("Invalid count data")

        response = await self._api.compare_count(store_id, pairs)
        return CountComparison(items=tuple(response.items), summary=response.summary)
