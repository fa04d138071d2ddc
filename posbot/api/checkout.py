"""Checkout edge function: order creation and order history."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from .auth import EdgeService
from .schemas import CheckoutOrderDetail, CheckoutOrderList

logger = logging.getLogger(__name__)

FUNCTION = "checkout"

METHOD_ALIASES = {
    "cash": "CASH",
    "card": "CARD",
    "bank": "BANK",
    "bank_transfer": "BANK",
    "qpay": "QPAY",
    "pos": "POS",
    "wallet": "WALLET",
}


def normalize_method(method: str | None) -> str:
    key = re.sub(r"\s+", "_", (method or "").strip().lower())
    if not key:
        return "CASH"
    return METHOD_ALIASES.get(key, key.upper())


@dataclass(frozen=True)
class Payment:
    method: str
    amount: float
    ref: str | None = None


@dataclass(frozen=True)
class OrderLine:
    variant_id: str
    qty: int
    price: float


class CheckoutApi(EdgeService):
    """Wrapper for `/functions/v1/checkout`."""

    async def create_order(
        self,
        store_id: str,
        lines: Sequence[OrderLine],
        payments: Sequence[Payment],
        discount: float = 0,
        tax: float = 0,
    ) -> CheckoutOrderDetail:
        if not store_id:
            raise ValueError("store_id is required")
        if not lines:
            raise ValueError("Cart is empty")
        if not payments:
            raise ValueError("payments is empty")
        if any(not line.variant_id for line in lines):
            raise ValueError("Some cart rows have no variantId")

        tenant_id = await self._tenant_id()
        payload = {
            "tenant_id": tenant_id,
            "store_id": store_id,
            "items": [
                {
                    "variant_id": line.variant_id,
                    "quantity": max(1, round(line.qty)),
                    "unit_price": round(line.price),
                }
                for line in lines
            ],
            "payments": [
                {"method": normalize_method(p.method), "amount": round(p.amount), "ref": p.ref}
                for p in payments
            ],
            "discount": round(discount),
            "tax": round(tax),
        }
        order = await self._client.call("POST", FUNCTION, CheckoutOrderDetail, json_data=payload)
        logger.info(
            "order_created",
            extra={"order_id": order.order.id, "store_id": store_id, "total": order.order.total},
        )
        return order

    async def list_orders(
        self, store_id: str | None = None, limit: int = 20, offset: int = 0
    ) -> CheckoutOrderList:
        tenant_id = await self._tenant_id()
        params = {"tenant_id": tenant_id, "limit": limit, "offset": offset, "store_id": store_id}
        return await self._client.call("GET", FUNCTION, CheckoutOrderList, params=params)

    async def get_order(self, order_id: str) -> CheckoutOrderDetail:
        tenant_id = await self._tenant_id()
        return await self._client.call(
            "GET", FUNCTION, CheckoutOrderDetail, params={"tenant_id": tenant_id, "id": order_id}
        )
