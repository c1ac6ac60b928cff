"""
Tests for the tenant-scope CLI.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from tenant_scope.cache.memory import MemorySiteCache
from tenant_scope.cli.main import app
from tenant_scope.providers.stub import StubSiteStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI callback reconfigures the root logger on every invoke."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def table_file(tmp_path):
    """Permission table wrapped the way company documents store it."""
    path = tmp_path / "table.json"
    path.write_text(json.dumps({
        "permissions": {
            "roles": {"staff": {"modules": {"pos": {"sales": {"view": True}}}}},
            "departments": {},
            "defaultRole": "staff",
            "defaultDepartment": "front-of-house",
        }
    }))
    return path


class TestPathCommand:
    """Tests for `path`."""

    def test_site_path(self):
        """Test resolving a site-level path."""
        result = runner.invoke(app, ["path", "acme", "--site", "s1"])
        assert result.exit_code == 0
        assert "tenant/acme/sites/s1" in result.output

    def test_subsite_requires_site(self):
        """Test --subsite without --site is rejected."""
        result = runner.invoke(app, ["path", "acme", "--subsite", "x"])
        assert result.exit_code == 1

    def test_all_levels(self):
        """Test listing every read path."""
        result = runner.invoke(app, ["path", "acme", "--site", "s1", "--subsite", "x", "--all"])
        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line]
        assert lines[0] == "tenant/acme/sites/s1/subsites/x"
        assert lines[-1] == "tenant/acme"


class TestCheckCommand:
    """Tests for `check`."""

    def test_default_table_allows(self):
        """Test staff can edit POS orders under the built-in table."""
        result = runner.invoke(app, ["check", "default", "pos", "orders", "edit", "--role", "staff"])
        assert result.exit_code == 0
        assert "ALLOW" in result.output

    def test_default_table_denies(self):
        """Test staff in front-of-house cannot see banking."""
        result = runner.invoke(
            app,
            ["check", "default", "finance", "banking", "view",
             "--role", "staff", "--department", "front-of-house"],
        )
        assert result.exit_code == 1
        assert "DENY" in result.output

    def test_owner_allowed(self):
        """Test owners pass every check."""
        result = runner.invoke(app, ["check", "default", "finance", "banking", "delete", "--role", "Owner"])
        assert result.exit_code == 0

    def test_table_from_file(self, table_file):
        """Test a wrapped JSON table is loaded."""
        allowed = runner.invoke(app, ["check", str(table_file), "pos", "sales", "view", "--role", "staff"])
        denied = runner.invoke(app, ["check", str(table_file), "pos", "sales", "edit", "--role", "staff"])
        assert allowed.exit_code == 0
        assert denied.exit_code == 1

    def test_missing_table(self, tmp_path):
        """Test a missing table file exits 2."""
        result = runner.invoke(app, ["check", str(tmp_path / "nope.json"), "pos", "sales", "view"])
        assert result.exit_code == 2

    def test_invalid_table(self, tmp_path):
        """Test malformed JSON exits 2."""
        path = tmp_path / "bad.json"
        path.write_text("{oops")
        result = runner.invoke(app, ["check", str(path), "pos", "sales", "view"])
        assert result.exit_code == 2


class TestGrantsCommand:
    """Tests for `grants`."""

    def test_lists_grants(self, table_file):
        """Test merged grants are tabulated."""
        result = runner.invoke(app, ["grants", str(table_file), "--role", "staff"])
        assert result.exit_code == 0
        assert "sales" in result.output


class TestSitesCommand:
    """Tests for `sites`."""

    def test_lists_sites(self, monkeypatch, acme_sites):
        """Test sites are hydrated from the configured store."""
        store = StubSiteStore({"acme": acme_sites})
        monkeypatch.setattr("tenant_scope.service.factory.get_site_store", lambda: store)
        monkeypatch.setattr("tenant_scope.service.factory.get_site_cache", lambda: MemorySiteCache())

        result = runner.invoke(app, ["sites", "acme"])

        assert result.exit_code == 0
        assert "Downtown" in result.output
        assert "Harbour" in result.output
        assert store.fetch_counts["acme"] == 1

    def test_fetch_failure(self, monkeypatch):
        """Test a failing store exits 1."""
        store = StubSiteStore(fail_fetches=True)
        monkeypatch.setattr("tenant_scope.service.factory.get_site_store", lambda: store)
        monkeypatch.setattr("tenant_scope.service.factory.get_site_cache", lambda: MemorySiteCache())

        result = runner.invoke(app, ["sites", "acme"])

        assert result.exit_code == 1

    def test_no_sites(self, monkeypatch):
        """Test an unknown tenant reports no sites."""
        monkeypatch.setattr("tenant_scope.service.factory.get_site_store", lambda: StubSiteStore())
        monkeypatch.setattr("tenant_scope.service.factory.get_site_cache", lambda: MemorySiteCache())

        result = runner.invoke(app, ["sites", "ghost"])

        assert result.exit_code == 0
        assert "No sites found" in result.output


class TestInvalidateCommand:
    """Tests for `invalidate`."""

    def test_invalidates(self, monkeypatch):
        """Test the tenant's cache entry is dropped."""
        cache = MagicMock()
        monkeypatch.setattr("tenant_scope.service.factory.get_site_cache", lambda: cache)

        result = runner.invoke(app, ["invalidate", "acme"])

        assert result.exit_code == 0
        cache.invalidate.assert_called_once_with("acme")
