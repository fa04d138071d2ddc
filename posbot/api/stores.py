"""Store edge function."""

from __future__ import annotations

import logging

from posbot.monitoring import lookup_retry

from .auth import EdgeService
from .schemas import Store, StoreCreated, StoreList

logger = logging.getLogger(__name__)

FUNCTION = "store"


class StoreApi(EdgeService):

    @lookup_retry
    async def list_stores(self) -> list[Store]:
        tenant_id = await self._tenant_id()
        stores = await self._client.call("GET", FUNCTION, StoreList, params={"tenant_id": tenant_id})
        return stores.items

    async def create_store(self, name: str) -> Store:
        name = (name or "").strip()
        if not name:
            raise ValueError("STORE_NAME_REQUIRED")
        tenant_id = await self._tenant_id()
        created = await self._client.call(
            "POST", FUNCTION, StoreCreated, json_data={"name": name, "tenant_id": tenant_id}
        )
        logger.info("store_created", extra={"store_id": created.store.id})
        return created.store
