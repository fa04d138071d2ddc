"""Inventory edge function: ledger adjustments."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from posbot.models import InventoryReason

from .auth import EdgeService
from .schemas import AdjustResponse, InventoryMovement

logger = logging.getLogger(__name__)

FUNCTION = "inventory"


class InventoryApi(EdgeService):
    """Wrapper for `POST /functions/v1/inventory`."""

    async def adjust(
        self,
        store_id: str,
        variant_id: str,
        delta: int = 1,
        reason: InventoryReason = InventoryReason.INITIAL,
        note: str = "SEEDING",
    ) -> InventoryMovement | None:
        """Post one stock movement; `delta` may be negative.

        Any 2xx reply means the ledger took the movement. The echoed movement
        is returned when the body carries one, otherwise None.
        """
        tenant_id = await self._tenant_id()
        payload = {
            "action": "adjust",
            "tenant_id": tenant_id,
            "store_id": store_id,
            "variant_id": variant_id,
            "delta": delta,
            "reason": reason.value,
            "note": note,
        }
        body = await self._client.request("POST", FUNCTION, json_data=payload)
        logger.info(
            "inventory_adjusted",
            extra={"store_id": store_id, "variant_id": variant_id, "delta": delta, "reason": reason.value},
        )
        try:
            return AdjustResponse.model_validate(body).movement
        except ValidationError as e:
            logger.warning(
                "inventory_movement_unreadable",
                extra={"variant_id": variant_id, "errors": e.error_count()},
            )
            return None
