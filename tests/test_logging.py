"""Tests for structured logging and settings."""

import json
import logging

from multisites.config import Settings
from multisites.core.logging import JSONFormatter, get_logger


class TestJSONFormatter:
    def test_extra_fields_included(self):
        record = logging.LogRecord("multisites.test", logging.INFO, __file__, 1, "built", None, None)
        record.period = "day"
        record.duration_ms = 12.5
        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "built"
        assert entry["level"] == "INFO"
        assert entry["period"] == "day"
        assert entry["duration_ms"] == 12.5
        assert "idsite" not in entry

    def test_get_logger_namespaced_and_single_handler(self):
        logger = get_logger("tests")
        assert logger.name == "multisites.tests"
        assert len(get_logger("tests").handlers) == 1


class TestSettings:
    def test_sqlite_fallback(self, monkeypatch):
        monkeypatch.delenv("VERCEL", raising=False)
        assert Settings(database_url="").effective_database_url == "sqlite:///./multisites.db"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GOALS_ENABLED", "false")
        monkeypatch.setenv("SITE_SEARCH_LIMIT", "5")
        s = Settings()
        assert s.goals_enabled is False
        assert s.site_search_limit == 5
