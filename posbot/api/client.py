"""Async client for the POS edge functions."""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .errors import (
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    ResponseFormatError,
)
from .schemas import error_message

logger = logging.getLogger(__name__)

# Default timeout for API requests
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

M = TypeVar("M", bound=BaseModel)


class TokenSource(Protocol):
    async def get_access_token(self) -> str: ...


class EdgeClient:
    """Authenticated JSON client for `/functions/v1/*` and related endpoints."""

    def __init__(
        self,
        base_url: str,
        auth: TokenSource,
        anon_key: str = "",
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self._auth = auth
        self._timeout = timeout
        self._transport = transport

    @property
    def auth(self) -> TokenSource:
        return self._auth

    def functions_url(self, function: str) -> str:
        return f"{self.base_url}/functions/v1/{function.strip('/')}"

    async def _headers(self) -> dict[str, str]:
        token = await self._auth.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if self.anon_key:
            headers["apikey"] = self.anon_key
        return headers

    async def request_url(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        timeout: httpx.Timeout | float | None = None,
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body."""
        headers = await self._headers()
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            async with httpx.AsyncClient(
                timeout=timeout if timeout is not None else self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=clean_params or None,
                    json=json_data,
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            logger.warning("api_timeout", extra={"url": url, "method": method})
            raise NetworkError("Request timeout - server taking too long to respond") from e
        except httpx.TransportError as e:
            logger.warning("api_transport_error", extra={"url": url, "error": str(e)})
            raise NetworkError(f"Network request failed: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("api_http_error", extra={"url": url, "error": str(e)})
            raise NetworkError(f"Request failed: {e}") from e

        return self._decode(response)

    async def request(
        self,
        method: str,
        function: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        timeout: httpx.Timeout | float | None = None,
    ) -> Any:
        """Call an edge function by name."""
        return await self.request_url(
            method,
            self.functions_url(function),
            params=params,
            json_data=json_data,
            timeout=timeout,
        )

    async def call(
        self,
        method: str,
        function: str,
        schema: type[M],
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        timeout: httpx.Timeout | float | None = None,
    ) -> M:
        """Call an edge function and validate the body against `schema`."""
        body = await self.request(
            method, function, params=params, json_data=json_data, timeout=timeout
        )
        return parse_response(schema, body, function)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = None

        if response.is_success:
            if body is None:
                raise ResponseFormatError(
                    f"Failed to parse response: {response.text[:200]}",
                    response.status_code,
                )
            return body

        message = error_message(body) or f"HTTP {response.status_code}: {response.reason_phrase}"
        logger.warning(
            "api_error",
            extra={"status": response.status_code, "url": str(response.request.url), "error": message},
        )
        if response.status_code in (401, 403):
            raise AuthenticationError(message, response.status_code)
        if response.status_code == 404:
            raise NotFoundError(message, response.status_code)
        raise ApiError(message, response.status_code)


def parse_response(schema: type[M], body: Any, source: str = "") -> M:
    """Validate a decoded body, turning schema mismatches into ApiError."""
    try:
        return schema.model_validate(body)
    except ValidationError as e:
        logger.error(
            "api_response_invalid",
            extra={"source": source, "schema": schema.__name__, "errors": e.error_count()},
        )
        raise ResponseFormatError(f"Unexpected response from {source or schema.__name__}") from e
