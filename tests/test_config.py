"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from posbot.config import Settings


def settings(**overrides):
    values = {
        "telegram_bot_token": "t",
        "api_base_url": "https://pos.test",
        "api_access_token": "token",
    }
    values.update(overrides)
    return Settings(**values)


def test_staff_ids_from_comma_separated_string():
    assert settings(staff_telegram_ids="1, 2,3").staff_telegram_ids == [1, 2, 3]


def test_staff_ids_from_env(monkeypatch):
    monkeypatch.setenv("STAFF_TELEGRAM_IDS", "11,22")

    assert settings().staff_telegram_ids == [11, 22]


def test_base_url_trailing_slash():
    config = settings(api_base_url="https://pos.test/")

    assert config.api_base_url == "https://pos.test"


def test_count_defaults():
    config = settings()

    assert config.count_page_size == 50
    assert config.search_debounce_seconds == 0.5
    assert config.adjustment_delay_seconds == 0.1


def test_password_credentials():
    config = settings(api_access_token="", api_email="a@b.mn", api_password="pw")

    assert config.password_auth_enabled


def test_missing_credentials(monkeypatch):
    monkeypatch.delenv("API_ACCESS_TOKEN", raising=False)

    with pytest.raises(ValidationError):
        settings(api_access_token="")


def test_partial_password_credentials():
    with pytest.raises(ValidationError, match="API_PASSWORD"):
        settings(api_email="a@b.mn")
