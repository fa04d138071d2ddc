"""Tests for backend wiring, per-user sessions and error texts."""

from unittest.mock import MagicMock

import pytest

from conftest import STORE_ID, make_token

from posbot import messages
from posbot.api.auth import Role
from posbot.api.errors import ApiError, AuthenticationError, NetworkError, TenantNotFoundError
from posbot.models import SessionState
from posbot.services import CountService, build_backend


class TestBackend:
    def test_build_backend_shares_client_and_tenants(self, mock_settings, fake_backend):
        backend = build_backend(mock_settings, transport=fake_backend.transport)

        assert backend.count._client is backend.client
        assert backend.transfers._tenants is backend.tenants
        assert backend.client.base_url == mock_settings.api_base_url

    @pytest.mark.asyncio
    async def test_current_role_from_token(self, mock_settings, fake_backend):
        mock_settings.api_access_token = make_token(role=["OWNER"])
        backend = build_backend(mock_settings, transport=fake_backend.transport)

        assert await backend.current_role() is Role.OWNER

    @pytest.mark.asyncio
    async def test_sign_out_clears_tenant_cache(self, mock_settings, fake_backend):
        backend = build_backend(mock_settings, transport=fake_backend.transport)
        await backend.tenants.get_tenant_id()

        backend.sign_out()

        assert len(backend.tenants._cache) == 0


class TestCountService:
    def test_default_store_from_settings(self, mock_settings):
        service = CountService(backend=MagicMock())

        assert service.selected_store(1) == STORE_ID

    def test_selecting_store_drops_session(self, mock_settings):
        service = CountService(backend=MagicMock())
        service.create_session(1)

        service.select_store(1, "store-2")

        assert service.selected_store(1) == "store-2"
        assert service.get_session(1) is None

    def test_sessions_are_per_user(self, mock_settings):
        service = CountService(backend=MagicMock())

        first = service.get_or_create(1)

        assert service.get_or_create(1) is first
        assert service.get_or_create(2) is not first
        assert first.state is SessionState.IDLE
        assert first.search.debounce_seconds == mock_settings.search_debounce_seconds

    def test_clear_session(self, mock_settings):
        service = CountService(backend=MagicMock())
        service.create_session(1)

        service.clear_session(1)
        service.clear_session(1)

        assert service.get_session(1) is None


@pytest.mark.parametrize(
    "error, expected",
    [
        (AuthenticationError("expired", 401), f"X: {messages.NOT_AUTHENTICATED}"),
        (NetworkError("offline"), f"X: {messages.NETWORK_PROBLEM}"),
        (TenantNotFoundError("none"), f"X: {messages.TENANT_MISSING}"),
        (ApiError("store not found", 400), "X: store not found"),
        (ApiError(""), "X"),
    ],
)
def test_describe_error(error, expected):
    assert messages.describe_error("X", error) == expected


class TestErrorCapture:
    @pytest.mark.asyncio
    async def test_unexpected_error_is_captured_and_raised(self, monkeypatch, mock_settings):
        from posbot import monitoring

        captured = []
        monkeypatch.setattr(monitoring, "capture_exception", lambda e, ctx: captured.append((e, ctx)))

        @monitoring.with_error_capture
        async def broken():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await broken()

        assert captured[0][1] == {"function": "broken"}

    @pytest.mark.asyncio
    async def test_check_backend_reports_api_errors(self, monkeypatch, mock_settings, fake_backend):
        from posbot.handlers import health

        service = CountService(backend=build_backend(mock_settings, transport=fake_backend.transport))
        monkeypatch.setattr(health, "count_service", service)

        status = await health.check_backend()

        assert status["ok"] is False
        assert status["role"] == "Admin"
        assert "error" in status
