"""Tests for product image URL signing."""

import pytest

from conftest import BASE_URL

from posbot.api.images import ImageUrlResolver, storage_path


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("abc.jpg", "product_img/abc.jpg"),
        ("/abc.jpg", "product_img/abc.jpg"),
        ("product_img/abc.jpg", "product_img/abc.jpg"),
        ("tenant-1/abc.jpg", "tenant-1/abc.jpg"),
    ],
)
def test_storage_path(raw, expected):
    assert storage_path(raw) == expected


class TestResolver:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw", ["https://cdn.test/a.jpg", "data:image/png;base64,AAAA", "/static/a.png"]
    )
    async def test_displayable_urls_pass_through(self, edge_client, fake_backend, raw):
        assert await ImageUrlResolver(edge_client).resolve(raw) == raw
        assert fake_backend.requests == []

    @pytest.mark.asyncio
    async def test_empty(self, edge_client):
        assert await ImageUrlResolver(edge_client).resolve(None) is None

    @pytest.mark.asyncio
    async def test_signed_once_then_cached(self, edge_client, fake_backend):
        fake_backend.add(
            "POST",
            "/storage/v1/object/sign/product-images/product_img/abc.jpg",
            {"signedURL": "/object/sign/product-images/product_img/abc.jpg?token=t"},
        )
        resolver = ImageUrlResolver(edge_client)

        first = await resolver.resolve("abc.jpg")
        second = await resolver.resolve("abc.jpg")

        assert first == second
        assert first == f"{BASE_URL}/storage/v1/object/sign/product-images/product_img/abc.jpg?token=t"
        assert len(fake_backend.requests) == 1
        assert fake_backend.json_body(fake_backend.requests[0]) == {"expiresIn": 604800}

    @pytest.mark.asyncio
    async def test_sign_failure_gives_none(self, edge_client, fake_backend):
        fake_backend.add(
            "POST",
            "/storage/v1/object/sign/product-images/product_img/abc.jpg",
            {"error": "Object not found"},
            status=400,
        )

        assert await ImageUrlResolver(edge_client).resolve("abc.jpg") is None
