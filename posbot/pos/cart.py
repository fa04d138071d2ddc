"""In-memory checkout cart."""

from __future__ import annotations

from dataclasses import dataclass, replace

from posbot.api.checkout import OrderLine
from posbot.api.schemas import DraftItem
from posbot.models import clamp_quantity


@dataclass(frozen=True)
class CartLine:
    variant_id: str
    name: str
    price: float
    qty: int = 1
    stock: int | None = None  # known stock ceiling; None means unlimited
    variant_name: str | None = None

    @property
    def line_total(self) -> float:
        return self.qty * self.price


class Cart:
    """Cart rows keyed by variant.

    Quantities are clamped to [0, stock]; a row whose quantity reaches zero is
    removed.
    """

    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_quantity(self) -> int:
        return sum(line.qty for line in self._lines.values())

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self._lines.values())

    def total(self, discount: float = 0, tax: float = 0) -> float:
        return max(0.0, self.subtotal - discount + tax)

    def add(self, line: CartLine, qty: int = 1) -> CartLine | None:
        """Add `qty` units; an existing row keeps its price and name."""
        current = self._lines.get(line.variant_id)
        base = current or replace(line, qty=0)
        if line.stock is not None:
            base = replace(base, stock=line.stock)
        return self._store(base, base.qty + qty)

    def set_qty(self, variant_id: str, qty: int) -> CartLine | None:
        current = self._lines.get(variant_id)
        if current is None:
            return None
        return self._store(current, qty)

    def remove(self, variant_id: str) -> None:
        self._lines.pop(variant_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def _store(self, line: CartLine, qty: int) -> CartLine | None:
        value = clamp_quantity(qty, line.stock)
        if value == 0:
            self._lines.pop(line.variant_id, None)
            return None
        updated = replace(line, qty=value)
        self._lines[line.variant_id] = updated
        return updated

    def order_lines(self) -> list[OrderLine]:
        return [OrderLine(variant_id=l.variant_id, qty=l.qty, price=l.price) for l in self._lines.values()]

    def to_draft_items(self) -> list[DraftItem]:
        return [
            DraftItem(
                variant_id=l.variant_id,
                quantity=l.qty,
                unit_price=l.price,
                product_name=l.name,
                variant_name=l.variant_name,
            )
            for l in self._lines.values()
        ]

    @classmethod
    def from_draft_items(cls, items: list[DraftItem]) -> Cart:
        cart = cls()
        for item in items:
            cart.add(
                CartLine(
                    variant_id=item.variant_id,
                    name=item.product_name,
                    price=item.unit_price,
                    variant_name=item.variant_name,
                ),
                item.quantity,
            )
        return cart
