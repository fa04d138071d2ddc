"""Count edge function: system quantities and physical count comparison."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .auth import EdgeService
from .errors import ApiError
from .schemas import ComparisonResponse, SystemCountItem, SystemCountPage

logger = logging.getLogger(__name__)

FUNCTION = "count"


class CountApi(EdgeService):
    """Wrapper for `GET/POST /functions/v1/count`."""

    async def get_system_count(
        self,
        store_id: str,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        product_id: str | None = None,
        variant_ids: Sequence[str] | None = None,
    ) -> SystemCountPage:
        """Get system quantities for variants in a store."""
        tenant_id = await self._tenant_id()
        params = {
            "tenant_id": tenant_id,
            "store_id": store_id,
            "product_id": product_id or None,
            "variant_ids": ",".join(variant_ids) if variant_ids else None,
            "search": search or None,
            "limit": limit or None,
            "offset": offset or None,
        }
        page = await self._client.call("GET", FUNCTION, SystemCountPage, params=params)
        logger.debug(
            "system_count_fetched",
            extra={"store_id": store_id, "rows": len(page.items), "count": page.count, "offset": offset},
        )
        return page

    async def compare_count(
        self,
        store_id: str,
        items: Iterable[tuple[str, int]],
    ) -> ComparisonResponse:
        """Compare physical counts against system quantities."""
        tenant_id = await self._tenant_id()
        payload = {
            "tenant_id": tenant_id,
            "store_id": store_id,
            "items": [
                {"variant_id": variant_id, "physical_qty": physical_qty}
                for variant_id, physical_qty in items
            ],
        }
        result = await self._client.call("POST", FUNCTION, ComparisonResponse, json_data=payload)
        logger.info(
            "count_compared",
            extra={
                "store_id": store_id,
                "items": len(payload["items"]),
                "short": result.summary.short,
                "over": result.summary.over,
            },
        )
        return result

    async def items_by_search(
        self, store_id: str, search: str, limit: int = 50
    ) -> list[SystemCountItem]:
        """Quick lookup; failures yield an empty list."""
        try:
            page = await self.get_system_count(store_id, search=search, limit=limit)
        except ApiError as e:
            logger.warning("count_search_failed", extra={"search": search, "error": str(e)})
            return []
        return page.items

    async def items_by_product(self, store_id: str, product_id: str) -> list[SystemCountItem]:
        """All variants of one product; failures yield an empty list."""
        try:
            page = await self.get_system_count(store_id, product_id=product_id)
        except ApiError as e:
            logger.warning("count_by_product_failed", extra={"product_id": product_id, "error": str(e)})
            return []
        return page.items
