"""Client-side view models for the count workflow and the POS cart."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from posbot.api.schemas import ComparisonResult, SystemCountItem


class CountStatus(str, Enum):
    """Server-side classification of a counted variant."""

    MATCH = "MATCH"
    SHORT = "SHORT"
    OVER = "OVER"


class AdjustmentStatus(str, Enum):
    """Outcome of a single adjustment call."""

    SUCCESS = "success"
    ERROR = "error"


class SessionState(str, Enum):
    """Count session lifecycle."""

    IDLE = "idle"
    LOADED = "loaded"
    COUNTED = "counted"
    COMPARED = "compared"
    APPLYING = "applying"


class InventoryReason(str, Enum):
    """Reason codes accepted by the inventory ledger."""

    INITIAL = "INITIAL"
    ADJUST = "ADJUST"
    SALE = "SALE"
    RETURN = "RETURN"
    TRANSFER = "TRANSFER"
    COUNT = "COUNT"


def clamp_quantity(qty: int | float, ceiling: int | None = None) -> int:
    """Clamp a user-entered quantity to [0, ceiling]."""
    value = max(0, int(qty))
    if ceiling is not None:
        value = min(value, max(0, ceiling))
    return value


@dataclass(frozen=True)
class CountableItem:
    """A variant row on the count screen."""

    variant_id: str
    product_name: str
    system_qty: int
    sku: str | None = None
    variant_name: str | None = None
    physical_qty: int = 0

    @classmethod
    def from_system(cls, item: SystemCountItem) -> CountableItem:
        return cls(
            variant_id=item.variant_id,
            product_name=item.product_name or "Тодорхойгүй бараа",
            system_qty=item.system_qty,
            sku=item.sku,
            variant_name=item.variant_name,
        )

    def display_name(self) -> str:
        if self.variant_name:
            return f"{self.product_name} ({self.variant_name})"
        return self.product_name


@dataclass(frozen=True)
class AdjustmentResult:
    """Per-item outcome of a count adjustment."""

    variant_id: str
    delta: int
    status: AdjustmentStatus
    sku: str | None = None
    product_name: str | None = None
    variant_name: str | None = None
    message: str | None = None

    @classmethod
    def for_item(
        cls,
        item: ComparisonResult,
        status: AdjustmentStatus,
        message: str | None = None,
    ) -> AdjustmentResult:
        return cls(
            variant_id=item.variant_id,
            delta=item.delta,
            status=status,
            sku=item.sku,
            product_name=item.product_name,
            variant_name=item.variant_name,
            message=message,
        )

    @property
    def ok(self) -> bool:
        return self.status is AdjustmentStatus.SUCCESS


@dataclass
class AdjustmentReport:
    """Aggregate of a finished adjustment batch."""

    results: list[AdjustmentResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def total(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class CountSummary:
    """Counted kinds and total counted quantity."""

    items_counted: int
    total_quantity: int
