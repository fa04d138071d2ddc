"""Transfer edge function and the client view of its status machine."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .auth import EdgeService
from .schemas import (
    TransferAction,
    TransferCreated,
    TransferDeleted,
    TransferDetail,
    TransferItem,
    TransferList,
    TransferStatus,
    TransferStatusUpdate,
)

logger = logging.getLogger(__name__)

FUNCTION = "transfer"

# Actions the server accepts from each status
AVAILABLE_ACTIONS: dict[TransferStatus, tuple[TransferAction, ...]] = {
    TransferStatus.REQUESTED: (TransferAction.APPROVE, TransferAction.CANCEL),
    TransferStatus.APPROVED: (TransferAction.SHIP, TransferAction.CANCEL),
    TransferStatus.SHIPPED: (TransferAction.RECEIVE,),
    TransferStatus.RECEIVED: (),
    TransferStatus.CANCELLED: (),
}

STATUS_LABELS = {
    TransferStatus.REQUESTED: "Хүсэлт",
    TransferStatus.APPROVED: "Батлагдсан",
    TransferStatus.SHIPPED: "Илгээгдсэн",
    TransferStatus.RECEIVED: "Хүлээн авсан",
    TransferStatus.CANCELLED: "Цуцлагдсан",
}

ACTION_LABELS = {
    TransferAction.APPROVE: "Баталгаажуулах",
    TransferAction.SHIP: "Илгээх",
    TransferAction.RECEIVE: "Хүлээн авах",
    TransferAction.CANCEL: "Цуцлах",
}


def available_actions(status: TransferStatus) -> tuple[TransferAction, ...]:
    return AVAILABLE_ACTIONS.get(status, ())


def status_label(status: TransferStatus) -> str:
    return STATUS_LABELS.get(status, status.value)


def action_label(action: TransferAction) -> str:
    return ACTION_LABELS.get(action, action.value)


class TransferApi(EdgeService):
    """Wrapper for `/functions/v1/transfer`."""

    async def list_transfers(
        self,
        status: TransferStatus | None = None,
        src_store_id: str | None = None,
        dst_store_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> TransferList:
        tenant_id = await self._tenant_id()
        params = {
            "tenant_id": tenant_id,
            "status": status.value if status else None,
            "src_store_id": src_store_id,
            "dst_store_id": dst_store_id,
            "limit": limit,
            "offset": offset,
        }
        return await self._client.call("GET", FUNCTION, TransferList, params=params)

    async def get_transfer(self, transfer_id: str) -> TransferDetail:
        tenant_id = await self._tenant_id()
        return await self._client.call(
            "GET", FUNCTION, TransferDetail, params={"tenant_id": tenant_id, "id": transfer_id}
        )

    async def create_transfer(
        self,
        src_store_id: str,
        dst_store_id: str,
        items: Iterable[tuple[str, int]],
        note: str | None = None,
        allow_negative: bool = False,
    ) -> TransferDetail:
        """Request stock movement between two stores of the tenant."""
        if src_store_id == dst_store_id:
            raise ValueError("Source and destination stores must differ")
        lines = [{"variant_id": variant_id, "qty": qty} for variant_id, qty in items if qty > 0]
        if not lines:
            raise ValueError("Transfer has no items")

        tenant_id = await self._tenant_id()
        payload = {
            "tenant_id": tenant_id,
            "src_store_id": src_store_id,
            "dst_store_id": dst_store_id,
            "items": lines,
            "note": note,
            "allow_negative": allow_negative,
        }
        created = await self._client.call("POST", FUNCTION, TransferCreated, json_data=payload)
        logger.info("transfer_created", extra={"transfer_id": created.transfer.id, "lines": len(lines)})
        return TransferDetail(
            transfer=created.transfer,
            items=[TransferItem(variant_id=line["variant_id"], qty=line["qty"]) for line in lines],
        )

    async def update_status(self, transfer_id: str, action: TransferAction) -> TransferStatus:
        """Run approve/ship/receive/cancel; the server enforces the rules."""
        tenant_id = await self._tenant_id()
        result = await self._client.call(
            "PATCH",
            FUNCTION,
            TransferStatusUpdate,
            json_data={"tenant_id": tenant_id, "id": transfer_id, "action": action.value},
        )
        logger.info(
            "transfer_status_changed",
            extra={"transfer_id": transfer_id, "action": action.value, "status": result.status.value},
        )
        return result.status

    async def delete_transfer(self, transfer_id: str) -> bool:
        """Hard delete (OWNER only)."""
        tenant_id = await self._tenant_id()
        result = await self._client.call(
            "DELETE",
            FUNCTION,
            TransferDeleted,
            json_data={"tenant_id": tenant_id, "id": transfer_id, "confirm": "DELETE"},
        )
        return result.removed
