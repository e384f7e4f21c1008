"""Tests for logging setup and context helpers."""

import pytest

from skilldex.config.settings import SkilldexSettings
from skilldex.utils.logging import (
    MAX_QUERY_CHARS,
    add_context,
    query_context,
    resolve_log_level,
    scan_context,
    truncate_query,
)


class TestContext:
    def test_scan_context_binds_and_resets(self):
        with scan_context("scan-1") as scan_id:
            assert scan_id == "scan-1"
            assert add_context(None, "info", {})["scan_id"] == "scan-1"
        assert "scan_id" not in add_context(None, "info", {})

    def test_nested_query_context(self):
        with query_context("outer"):
            with query_context("inner"):
                assert add_context(None, "info", {})["query_id"] == "inner"
            assert add_context(None, "info", {})["query_id"] == "outer"
        assert add_context(None, "info", {}) == {}

    def test_generated_id(self):
        with query_context() as query_id:
            assert len(query_id) == 12

    def test_explicit_field_not_overwritten(self):
        with scan_context("scan-1"):
            assert add_context(None, "info", {"scan_id": "mine"})["scan_id"] == "mine"


def test_truncate_query():
    long_query = "x" * (MAX_QUERY_CHARS + 50)
    event = truncate_query(None, "info", {"query": long_query})
    assert event["query"] == "x" * MAX_QUERY_CHARS + "..."
    assert truncate_query(None, "info", {"query": "short"})["query"] == "short"


class TestResolveLogLevel:
    @pytest.fixture(autouse=True)
    def _no_env_level(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

    def test_configured_level(self):
        assert resolve_log_level(SkilldexSettings(log_level="WARNING")) == "WARNING"

    def test_debug_forces_debug(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert resolve_log_level(SkilldexSettings(debug=True, log_level="ERROR")) == "DEBUG"

    def test_env_overrides_configured_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert resolve_log_level(SkilldexSettings(log_level="INFO")) == "ERROR"

    def test_settings_read_from_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SKILLDEX_LOG_LEVEL", raising=False)
        monkeypatch.delenv("SKILLDEX_DEBUG", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("SKILLDEX_LOG_LEVEL=ERROR\n", encoding="utf-8")
        assert resolve_log_level(SkilldexSettings()) == "ERROR"
