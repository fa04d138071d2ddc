"""Draft edge function with a local SQLite fallback."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from posbot.storage.drafts import LocalDraftStore, is_local_draft_id

from .auth import EdgeService, TenantResolver
from .client import EdgeClient
from .errors import NetworkError, NotFoundError
from .schemas import Draft, DraftItem, DraftList

logger = logging.getLogger(__name__)

FUNCTION = "draft"

# Draft calls give up sooner than other calls
DRAFT_TIMEOUT_SECONDS = 10.0

# Failures that mean "server side drafts unavailable", not "bad request"
FALLBACK_ERRORS = (NotFoundError, NetworkError)


class DraftApi(EdgeService):
    """Save, list and delete cart drafts."""

    def __init__(
        self,
        client: EdgeClient,
        tenants: TenantResolver,
        local_store: LocalDraftStore,
        timeout: float = DRAFT_TIMEOUT_SECONDS,
    ):
        super().__init__(client, tenants)
        self._local = local_store
        self._timeout = timeout

    async def save(
        self,
        name: str,
        store_id: str,
        items: Sequence[DraftItem],
        notes: str | None = None,
    ) -> Draft:
        name = (name or "").strip()
        if not name:
            raise ValueError("Draft name is required")
        if not items:
            raise ValueError("Draft has no items")

        items = list(items)
        payload = {
            "name": name,
            "notes": notes,
            "items": [i.model_dump(exclude_none=True) for i in items],
            "total_amount": sum(i.quantity * i.unit_price for i in items),
            "total_quantity": sum(i.quantity for i in items),
            "store_id": store_id,
        }
        try:
            payload["tenant_id"] = await self._tenant_id()
            draft = await self._client.call(
                "POST", FUNCTION, Draft, json_data=payload, timeout=self._timeout
            )
        except FALLBACK_ERRORS as e:
            logger.warning("draft_backend_unavailable", extra={"error": str(e)})
            return await self._local.save(name, store_id, items, notes)

        logger.info("draft_saved", extra={"draft_id": draft.id, "store_id": store_id})
        return draft

    async def load(self, store_id: str | None = None) -> list[Draft]:
        """Server drafts followed by locally saved ones."""
        remote: list[Draft] = []
        try:
            tenant_id = await self._tenant_id()
            result = await self._client.call(
                "GET", FUNCTION, DraftList, params={"tenant_id": tenant_id}, timeout=self._timeout
            )
            remote = [d for d in result.drafts if not store_id or d.store_id == store_id]
        except FALLBACK_ERRORS as e:
            logger.warning("draft_backend_unavailable", extra={"error": str(e)})

        local = await self._local.list_drafts(store_id)
        return remote + local

    async def delete(self, draft_id: str) -> bool:
        if is_local_draft_id(draft_id):
            return await self._local.delete(draft_id)

        tenant_id = await self._tenant_id()
        await self._client.request(
            "DELETE",
            f"{FUNCTION}/{draft_id}",
            params={"tenant_id": tenant_id},
            timeout=self._timeout,
        )
        logger.info("draft_deleted", extra={"draft_id": draft_id})
        return True
