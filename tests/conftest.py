"""Pytest configuration and fixtures."""

import json
import os
import sys
from pathlib import Path

import httpx
import jwt
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

BASE_URL = "https://pos.test"
TENANT_ID = "tenant-1"
STORE_ID = "store-1"


def make_token(tenants=(TENANT_ID,), role=("Admin",), **claims) -> str:
    """Unsigned-looking JWT carrying the claims the backend would issue."""
    app_metadata = {}
    if tenants is not None:
        app_metadata["tenants"] = list(tenants)
    if role is not None:
        app_metadata["role"] = list(role)
    payload = {"sub": "user-1", "app_metadata": app_metadata, **claims}
    return jwt.encode(payload, "test-secret-key-with-enough-length", algorithm="HS256")


ADMIN_TOKEN = make_token()

# Set test environment variables before importing posbot modules
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "test_token")
os.environ.setdefault("STAFF_TELEGRAM_IDS", "123456789")
os.environ.setdefault("API_BASE_URL", BASE_URL)
os.environ.setdefault("API_ACCESS_TOKEN", ADMIN_TOKEN)


class FakeBackend:
    """Routes httpx requests by (method, path) to canned or computed responses."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body=None, status: int = 200, handler=None) -> None:
        self.routes[(method, path)] = handler or (status, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Function not found"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def json_body(request: httpx.Request) -> dict:
        return json.loads(request.content)


class StaticToken:
    """Token source whose token can be swapped mid-test."""

    def __init__(self, token: str = ADMIN_TOKEN):
        self.token = token

    async def get_access_token(self) -> str:
        return self.token


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def token_source():
    return StaticToken()


@pytest.fixture
def edge_client(fake_backend, token_source):
    from posbot.api.client import EdgeClient

    return EdgeClient(BASE_URL, token_source, anon_key="anon-key", transport=fake_backend.transport)


@pytest.fixture
def tenants(edge_client):
    from posbot.api.auth import TenantResolver

    return TenantResolver(edge_client)


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    """Mock settings for tests."""
    from posbot.config import Settings

    settings = Settings(
        telegram_bot_token="test_token",
        staff_telegram_ids=[123456789, 987654321],
        api_base_url=BASE_URL,
        api_access_token=ADMIN_TOKEN,
        default_store_id=STORE_ID,
        search_debounce_seconds=0,
        adjustment_delay_seconds=0,
        db_path=tmp_path / "posbot.db",
    )

    monkeypatch.setattr("posbot.config.get_settings", lambda: settings)
    monkeypatch.setattr("posbot.security.get_settings", lambda: settings)
    monkeypatch.setattr("posbot.monitoring.get_settings", lambda: settings)
    monkeypatch.setattr("posbot.services.sessions.get_settings", lambda: settings)
    return settings


def system_row(variant_id: str, system_qty: int, **fields) -> dict:
    row = {
        "variant_id": variant_id,
        "sku": fields.pop("sku", f"SKU-{variant_id}"),
        "product_name": fields.pop("product_name", f"Product {variant_id}"),
        "system_qty": system_qty,
    }
    row.update(fields)
    return row


def comparison_row(variant_id: str, system_qty: int, physical_qty: int) -> dict:
    delta = physical_qty - system_qty
    status = "MATCH" if delta == 0 else ("SHORT" if delta < 0 else "OVER")
    return {
        "variant_id": variant_id,
        "sku": f"SKU-{variant_id}",
        "product_name": f"Product {variant_id}",
        "system_qty": system_qty,
        "physical_qty": physical_qty,
        "delta": delta,
        "status": status,
    }


class CountServer:
    """Minimal count/inventory backend holding real quantities."""

    def __init__(self, stock: dict[str, int]):
        self.stock = dict(stock)
        self.fail_variants: set[str] = set()
        self.garbled_variants: set[str] = set()
        self.compare_fails = False

    def install(self, backend: FakeBackend) -> None:
        backend.add("GET", "/functions/v1/count", handler=self.system_count)
        backend.add("POST", "/functions/v1/count", handler=self.compare)
        backend.add("POST", "/functions/v1/inventory", handler=self.adjust)

    def system_count(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        offset = int(params.get("offset", 0))
        limit = int(params.get("limit", 50))
        search = params.get("search")
        rows = [
            system_row(variant_id, qty)
            for variant_id, qty in self.stock.items()
            if not search or search in variant_id
        ]
        return httpx.Response(
            200, json={"items": rows[offset : offset + limit], "count": len(rows)}
        )

    def compare(self, request: httpx.Request) -> httpx.Response:
        if self.compare_fails:
            return httpx.Response(500, json={"error": "compare exploded"})
        body = FakeBackend.json_body(request)
        items = [
            comparison_row(i["variant_id"], self.stock[i["variant_id"]], i["physical_qty"])
            for i in body["items"]
        ]
        summary = {
            "matched": sum(1 for i in items if i["status"] == "MATCH"),
            "short": sum(1 for i in items if i["status"] == "SHORT"),
            "over": sum(1 for i in items if i["status"] == "OVER"),
            "delta_total": sum(i["delta"] for i in items),
        }
        return httpx.Response(200, json={"summary": summary, "items": items})

    def adjust(self, request: httpx.Request) -> httpx.Response:
        body = FakeBackend.json_body(request)
        variant_id = body["variant_id"]
        if variant_id in self.fail_variants:
            return httpx.Response(409, json={"error": "ledger locked"})
        self.stock[variant_id] += body["delta"]
        if variant_id in self.garbled_variants:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")
        movement = {
            "id": f"m-{variant_id}",
            "store_id": body["store_id"],
            "variant_id": variant_id,
            "delta": body["delta"],
            "reason": body["reason"],
        }
        return httpx.Response(200, json={"movement": movement})


@pytest.fixture
def server(fake_backend):
    server = CountServer({"v1": 10, "v2": 4, "v3": 0})
    server.install(fake_backend)
    return server
