"""Tests for settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from interview_ai.config import Environment, Settings, get_settings


class TestSettings:
    def test_log_level_is_upper_cased(self):
        assert get_settings(log_level="debug").log_level == "DEBUG"

    def test_rejects_unknown_database(self):
        with pytest.raises(ValidationError):
            get_settings(database_url="mysql://localhost/db")

    def test_production_refuses_sqlite(self):
        with pytest.raises(ValidationError):
            get_settings(app_env=Environment.PRODUCTION, database_url="sqlite+aiosqlite:///x.db")

    def test_production_refuses_auto_create(self):
        with pytest.raises(ValidationError):
            get_settings(app_env=Environment.PRODUCTION, database_auto_create=True)

    def test_cas_attempts_must_be_positive(self):
        with pytest.raises(ValidationError):
            get_settings(credit_check_cas_attempts=0)

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("QUESTION_FALLBACK_ON_UNAVAILABLE", raising=False)
        monkeypatch.delenv("PROVIDER_TIMEOUT_SECONDS", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = get_settings()
        assert settings.question_fallback_on_unavailable is True
        assert settings.provider_timeout_seconds == 30.0
        assert settings.uses_sqlite is False

    def test_no_server_binding_settings(self):
        # The ASGI server owns host/port; the app only reads what it uses.
        assert {"app_name", "app_host", "app_port"}.isdisjoint(Settings.model_fields)
