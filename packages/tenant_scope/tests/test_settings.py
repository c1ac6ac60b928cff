"""
Tests for basecore settings and logging.
"""

import json
import logging

import pytest

from basecore.logging import JsonLineFormatter, setup_logging
from basecore.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        monkeypatch.delenv("SITE_STORE_PROVIDER", raising=False)
        monkeypatch.delenv("SITE_CACHE_TTL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.SITE_STORE_PROVIDER == "http"
        assert settings.SITE_CACHE_TTL == 0
        assert settings.SITE_CACHE_PREFIX == "tenant_scope:sites:"

    def test_env_override(self, monkeypatch):
        """Test environment variables win over defaults."""
        monkeypatch.setenv("SITE_STORE_PROVIDER", "stub")
        monkeypatch.setenv("SITE_CACHE_TTL", "300")

        settings = get_settings()

        assert settings.SITE_STORE_PROVIDER == "stub"
        assert settings.SITE_CACHE_TTL == 300


class TestLogging:
    """Tests for logging setup."""

    def test_json_formatter_includes_extras(self):
        """Test structured fields are emitted alongside the message."""
        record = logging.LogRecord("tenant_scope.test", logging.INFO, __file__, 1, "Hydrated %s", ("acme",), None)
        record.company_id = "acme"

        data = json.loads(JsonLineFormatter().format(record))

        assert data["message"] == "Hydrated acme"
        assert data["level"] == "INFO"
        assert data["company_id"] == "acme"
        assert "lineno" not in data

    def test_setup_logging(self, restore_root_logger):
        """Test the root logger gets one handler at the requested level."""
        setup_logging(level="debug", json_output=True)

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonLineFormatter)
