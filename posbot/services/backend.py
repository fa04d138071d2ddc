"""Backend container built from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from posbot.api.auth import Role, SessionAuth, TenantResolver, decode_claims, user_role
from posbot.api.checkout import CheckoutApi
from posbot.api.client import EdgeClient
from posbot.api.count import CountApi
from posbot.api.drafts import DraftApi
from posbot.api.images import ImageUrlResolver
from posbot.api.inventory import InventoryApi
from posbot.api.returns import ReturnApi
from posbot.api.stores import StoreApi
from posbot.api.transfers import TransferApi
from posbot.config import Settings, get_settings
from posbot.storage.drafts import LocalDraftStore

logger = logging.getLogger(__name__)


@dataclass
class Backend:
    """Every edge function wrapper sharing one session and tenant cache."""

    auth: SessionAuth
    client: EdgeClient
    tenants: TenantResolver
    count: CountApi
    inventory: InventoryApi
    stores: StoreApi
    transfers: TransferApi
    returns: ReturnApi
    checkout: CheckoutApi
    drafts: DraftApi
    images: ImageUrlResolver

    async def current_role(self) -> Role | None:
        token = await self.auth.get_access_token()
        return user_role(decode_claims(token))

    def sign_out(self) -> None:
        """Drop the session and everything cached for it."""
        self.auth.invalidate()
        self.tenants.clear()
        self.images.clear()


def build_backend(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Backend:
    auth = SessionAuth(
        settings.api_base_url,
        anon_key=settings.api_anon_key,
        email=settings.api_email,
        password=settings.api_password,
        access_token=settings.api_access_token,
        transport=transport,
    )
    client = EdgeClient(
        settings.api_base_url,
        auth,
        anon_key=settings.api_anon_key,
        timeout=httpx.Timeout(settings.request_timeout_seconds, connect=10.0),
        transport=transport,
    )
    tenants = TenantResolver(client, ttl_seconds=settings.tenant_cache_ttl_seconds)
    return Backend(
        auth=auth,
        client=client,
        tenants=tenants,
        count=CountApi(client, tenants),
        inventory=InventoryApi(client, tenants),
        stores=StoreApi(client, tenants),
        transfers=TransferApi(client, tenants),
        returns=ReturnApi(client, tenants),
        checkout=CheckoutApi(client, tenants),
        drafts=DraftApi(
            client,
            tenants,
            LocalDraftStore(str(settings.db_path)),
            timeout=settings.draft_timeout_seconds,
        ),
        images=ImageUrlResolver(client, ttl_seconds=settings.image_url_ttl_seconds),
    )


# Singleton instance (initialized on first use)
_backend: Backend | None = None


def get_backend() -> Backend:
    """Get or create the backend singleton."""
    global _backend
    if _backend is None:
        settings = get_settings()
        _backend = build_backend(settings)
        logger.info("backend_initialized", extra={"base_url": settings.api_base_url})
    return _backend
