"""Unit tests for core/config.py -- SECRET_KEY policy and env parsing."""

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_production_requires_secret_key(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(debug=False, _env_file=None)


def test_debug_generates_secret_key(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    settings = Settings(debug=True, _env_file=None)
    assert len(settings.secret_key) >= 32


def test_short_secret_key_rejected():
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(secret_key="too-short", _env_file=None)


def test_list_settings_parse_from_json_env(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.com"]')
    settings = Settings(secret_key="k" * 32, _env_file=None)
    assert settings.cors_origins == ["https://app.example.com"]


def test_mail_enabled_needs_host_and_sender():
    assert not Settings(secret_key="k" * 32, _env_file=None).mail_enabled
    assert not Settings(secret_key="k" * 32, smtp_host="smtp.example.com", _env_file=None).mail_enabled
    assert Settings(
        secret_key="k" * 32, smtp_host="smtp.example.com", mail_sender="a@example.com", _env_file=None
    ).mail_enabled
