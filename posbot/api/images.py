"""Signed URLs for product images in object storage."""

from __future__ import annotations

import logging
import re
from urllib.parse import quote

from posbot.cache import TTLCache

from .client import EdgeClient, parse_response
from .errors import ApiError
from .schemas import SignedUrl

logger = logging.getLogger(__name__)

BUCKET = "product-images"
DEFAULT_PREFIX = "product_img"
SIGNED_URL_SECONDS = 60 * 60 * 24 * 7

_ABSOLUTE = re.compile(r"^(https?://|data:)", re.IGNORECASE)


def storage_path(raw: str) -> str:
    """Normalize a stored image reference to an object path in the bucket."""
    path = raw.strip().lstrip("/")
    if path.startswith(f"{DEFAULT_PREFIX}/"):
        path = path[len(DEFAULT_PREFIX) + 1:]
    return path if "/" in path else f"{DEFAULT_PREFIX}/{path}"


class ImageUrlResolver:
    """Turns stored image paths into displayable URLs.

    Signed URLs are cached for less than their validity, keyed by object path.
    """

    def __init__(self, client: EdgeClient, ttl_seconds: float = 6 * 24 * 3600):
        self._client = client
        self._cache: TTLCache[str, str] = TTLCache(ttl_seconds)

    async def resolve(self, raw: str | None) -> str | None:
        if not raw:
            return None
        if _ABSOLUTE.match(raw) or raw.startswith("/"):
            return raw

        path = storage_path(raw)
        cached = self._cache.get(path)
        if cached:
            return cached

        try:
            url = await self.sign(path)
        except ApiError as e:
            logger.warning("image_sign_failed", extra={"path": path, "error": str(e)})
            return None

        self._cache.set(path, url)
        return url

    async def sign(self, path: str, expires_in: int = SIGNED_URL_SECONDS) -> str:
        url = f"{self._client.base_url}/storage/v1/object/sign/{BUCKET}/{quote(path)}"
        body = await self._client.request_url("POST", url, json_data={"expiresIn": expires_in})
        signed = parse_response(SignedUrl, body, "storage")
        if signed.signed_url.startswith("http"):
            return signed.signed_url
        return f"{self._client.base_url}/storage/v1{signed.signed_url}"

    def clear(self) -> None:
        self._cache.invalidate()
