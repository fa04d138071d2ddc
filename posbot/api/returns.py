"""Return edge function: product returns and refunds."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .auth import EdgeService
from .schemas import ReturnDetail, ReturnList

logger = logging.getLogger(__name__)

FUNCTION = "return"


class RefundMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    ORIGINAL = "ORIGINAL"


RETURN_REASONS = {
    "size": "Хэмжээ таараагүй",
    "damaged": "Эвдэрсэн",
    "wrong": "Буруу бараа",
    "unsatisfied": "Сэтгэл ханамжгүй",
}


def map_payment_method(method: str) -> RefundMethod:
    """Map a UI payment choice to a refund method; unknown means ORIGINAL."""
    key = (method or "").strip().lower()
    if key == "cash":
        return RefundMethod.CASH
    if key == "card":
        return RefundMethod.CARD
    return RefundMethod.ORIGINAL


def map_return_reason(reason: str, custom_reason: str | None = None) -> str:
    """Turn a reason code into the note stored with the return."""
    if reason == "other":
        return custom_reason or "Бусад"
    return RETURN_REASONS.get(reason, reason)


@dataclass(frozen=True)
class ReturnLineInput:
    quantity: int
    order_item_id: str | None = None
    variant_id: str | None = None
    unit_refund: float | None = None

    def to_payload(self) -> dict:
        payload: dict = {"quantity": self.quantity}
        if self.order_item_id:
            payload["order_item_id"] = self.order_item_id
        if self.variant_id:
            payload["variant_id"] = self.variant_id
        if self.unit_refund is not None:
            payload["unit_refund"] = self.unit_refund
        return payload


@dataclass(frozen=True)
class Refund:
    method: RefundMethod
    amount: float


class ReturnApi(EdgeService):
    """Wrapper for `/functions/v1/return`."""

    async def create_return(
        self,
        order_id: str,
        items: Sequence[ReturnLineInput],
        refunds: Sequence[Refund],
        note: str | None = None,
        return_id: str | None = None,
    ) -> ReturnDetail:
        if not items:
            raise ValueError("Return has no items")
        for line in items:
            if line.quantity <= 0:
                raise ValueError("Return quantity must be positive")
            if not (line.order_item_id or line.variant_id):
                raise ValueError("Return line needs order_item_id or variant_id")

        tenant_id = await self._tenant_id()
        payload: dict = {
            "tenant_id": tenant_id,
            "order_id": order_id,
            "items": [line.to_payload() for line in items],
            "refunds": [{"method": r.method.value, "amount": r.amount} for r in refunds],
        }
        if note:
            payload["note"] = note
        if return_id:
            payload["return_id"] = return_id

        result = await self._client.call("POST", FUNCTION, ReturnDetail, json_data=payload)
        logger.info(
            "return_created",
            extra={"return_id": result.return_.id, "order_id": order_id, "lines": len(items)},
        )
        return result

    async def list_returns(
        self,
        store_id: str | None = None,
        order_id: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ReturnList:
        tenant_id = await self._tenant_id()
        params = {
            "tenant_id": tenant_id,
            "store_id": store_id,
            "order_id": order_id,
            "from": date_from,
            "to": date_to,
            "limit": limit,
            "offset": offset,
        }
        return await self._client.call("GET", FUNCTION, ReturnList, params=params)

    async def get_return(self, return_id: str) -> ReturnDetail:
        tenant_id = await self._tenant_id()
        return await self._client.call(
            "GET", FUNCTION, ReturnDetail, params={"tenant_id": tenant_id, "id": return_id}
        )
