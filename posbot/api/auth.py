"""Session tokens, tenant resolution and role gating."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any

import httpx
import jwt

from posbot.cache import TTLCache
from posbot.monitoring import lookup_retry

from .client import DEFAULT_TIMEOUT, EdgeClient, parse_response
from .errors import ApiError, AuthenticationError, NetworkError, TenantNotFoundError
from .schemas import AuthToken, TenantList, error_message

logger = logging.getLogger(__name__)

# Refresh tokens this long before they expire
TOKEN_EXPIRY_BUFFER = 60


class SessionAuth:
    """Access token provider backed by the password grant.

    A static token (service integrations, tests) short-circuits sign-in.
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str = "",
        email: str = "",
        password: str = "",
        access_token: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._auth_url = f"{base_url.rstrip('/')}/auth/v1/token"
        self._anon_key = anon_key
        self._email = email
        self._password = password
        self._static_token = access_token
        self._transport = transport

        # Token cache
        self._token: str | None = None
        self._refresh_token: str | None = None
        self._token_expires_at: float = 0
        self._lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        return bool(self._static_token or (self._email and self._password))

    async def get_access_token(self) -> str:
        """Get access token, using cache if valid."""
        if self._static_token:
            return self._static_token

        async with self._lock:
            if self._token and time.time() < self._token_expires_at - TOKEN_EXPIRY_BUFFER:
                return self._token

            if self._refresh_token:
                try:
                    return await self._grant("refresh_token", {"refresh_token": self._refresh_token})
                except AuthenticationError:
                    logger.info("refresh_token_rejected")
                    self._refresh_token = None

            if not (self._email and self._password):
                raise AuthenticationError("NOT_AUTHENTICATED")

            return await self._grant("password", {"email": self._email, "password": self._password})

    async def _grant(self, grant_type: str, payload: dict[str, str]) -> str:
        logger.debug("Fetching new access token", extra={"grant_type": grant_type})
        headers = {"Accept": "application/json"}
        if self._anon_key:
            headers["apikey"] = self._anon_key

        try:
            async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, transport=self._transport) as client:
                response = await client.post(
                    self._auth_url,
                    params={"grant_type": grant_type},
                    json=payload,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            raise NetworkError(f"Network request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code in (400, 401, 403):
            raise AuthenticationError(
                error_message(body) or "NOT_AUTHENTICATED", response.status_code
            )
        if not response.is_success:
            raise ApiError(
                error_message(body) or f"HTTP {response.status_code}: {response.reason_phrase}",
                response.status_code,
            )

        token = parse_response(AuthToken, body, "auth")
        self._token = token.access_token
        self._refresh_token = token.refresh_token
        self._token_expires_at = time.time() + token.expires_in

        logger.debug("Access token obtained, expires in %d seconds", token.expires_in)
        return self._token

    def invalidate(self) -> None:
        """Forget the cached session (sign-out, rejected token)."""
        self._token = None
        self._refresh_token = None
        self._token_expires_at = 0


def decode_claims(token: str) -> dict[str, Any]:
    """Read JWT claims without verifying the signature (the server verifies)."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return {}


def tenant_from_claims(claims: dict[str, Any]) -> str | None:
    tenants = (claims.get("app_metadata") or {}).get("tenants") or []
    if isinstance(tenants, list) and tenants and isinstance(tenants[0], str):
        return tenants[0]
    return None


class TenantResolver:
    """Resolves the tenant of the current session.

    Results are cached per access token, so a new session never sees the
    previous session's tenant. Concurrent lookups share a single request.
    """

    def __init__(self, client: EdgeClient, ttl_seconds: float = 3600):
        self._client = client
        self._cache: TTLCache[str, str] = TTLCache(ttl_seconds)
        self._lock = asyncio.Lock()

    async def get_tenant_id(self, force_refresh: bool = False) -> str:
        token = await self._client.auth.get_access_token()
        if force_refresh:
            self._cache.invalidate()

        cached = self._cache.get(token)
        if cached:
            return cached

        async with self._lock:
            cached = self._cache.get(token)
            if cached:
                return cached

            tenant_id = tenant_from_claims(decode_claims(token))
            if not tenant_id:
                tenant_id = await self._fetch_tenant_id()
            if not tenant_id:
                raise TenantNotFoundError("Tenant ID not found")

            # Entries of older tokens are dead weight
            self._cache.invalidate()
            self._cache.set(token, tenant_id)
            logger.info("tenant_resolved", extra={"tenant_id": tenant_id})
            return tenant_id

    @lookup_retry
    async def _fetch_tenant_id(self) -> str | None:
        tenants = await self._client.call("GET", "tenant", TenantList)
        return tenants.items[0].id if tenants.items else None

    def clear(self) -> None:
        self._cache.invalidate()


class Role(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    CASHIER = "Cashier"
    OWNER = "OWNER"


# Features restricted to Admin and OWNER
PRIVILEGED_FEATURES = frozenset({"checkout", "inventory", "report"})


def user_role(claims: dict[str, Any]) -> Role | None:
    """Role from `app_metadata.role`; Cashier when unset or unknown."""
    if not claims:
        return None
    roles = (claims.get("app_metadata") or {}).get("role")
    if not isinstance(roles, list) or not roles:
        return Role.CASHIER
    try:
        return Role(roles[0])
    except ValueError:
        return Role.CASHIER


def can_access_feature(role: Role | None, feature: str) -> bool:
    if role is None:
        return False
    if feature in PRIVILEGED_FEATURES:
        return role in (Role.ADMIN, Role.OWNER)
    return True


class EdgeService:
    """Base for tenant-scoped edge function wrappers."""

    def __init__(self, client: EdgeClient, tenants: TenantResolver):
        self._client = client
        self._tenants = tenants

    async def _tenant_id(self) -> str:
        return await self._tenants.get_tenant_id()
