"""Physical quantities entered during a count."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from posbot.models import CountableItem, CountSummary, clamp_quantity


class CountEntryStore:
    """Ordered, immutable snapshots of the rows being counted.

    Updates never mutate a snapshot; they build a new tuple in which only the
    edited row is a new object.
    """

    def __init__(self, items: Iterable[CountableItem] = ()):
        self._items: tuple[CountableItem, ...] = tuple(items)

    @property
    def items(self) -> tuple[CountableItem, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def get(self, item_id: str) -> CountableItem | None:
        return next((i for i in self._items if i.variant_id == item_id), None)

    def load(self, items: Iterable[CountableItem]) -> tuple[CountableItem, ...]:
        self._items = tuple(items)
        return self._items

    def append(self, items: Iterable[CountableItem]) -> tuple[CountableItem, ...]:
        """Add rows of a further page; rows already present keep their count."""
        known = {i.variant_id for i in self._items}
        self._items = self._items + tuple(i for i in items if i.variant_id not in known)
        return self._items

    def update_quantity(
        self, item_id: str, qty: int, ceiling: int | None = None
    ) -> tuple[CountableItem, ...]:
        """Set the physical quantity of one row, clamped to [0, ceiling]."""
        value = clamp_quantity(qty, ceiling)
        self._items = tuple(
            replace(i, physical_qty=value) if i.variant_id == item_id else i
            for i in self._items
        )
        return self._items

    def reset_counts(self) -> tuple[CountableItem, ...]:
        self._items = tuple(replace(i, physical_qty=0) for i in self._items)
        return self._items

    def clear(self) -> None:
        self._items = ()

    def count_pairs(self) -> list[tuple[str, int]]:
        """All (variant_id, physical_qty) pairs, zero counts included."""
        return [(i.variant_id, i.physical_qty) for i in self._items]

    def summary(self) -> CountSummary:
        counted = [i for i in self._items if i.physical_qty > 0]
        return CountSummary(
            items_counted=len(counted),
            total_quantity=sum(i.physical_qty for i in counted),
        )
