"""Unit tests for project_tracker.core.config"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from project_tracker.core.config import TrackerConfig


class TestDefaults:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TRACKER_DATABASE_URL", raising=False)
        cfg = TrackerConfig(_env_file=None)
        assert cfg.database_url == "sqlite+aiosqlite:///./project_tracker.db"
        assert cfg.server_name == "mcp-project-tracker"
        assert cfg.server_version == "1.0.0"
        assert cfg.protocol_version == "2024-11-05"
        assert cfg.request_timeout == 8.0
        assert cfg.enable_wal is True


class TestEnvironment:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TRACKER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setenv("TRACKER_REQUEST_TIMEOUT", "2.5")
        cfg = TrackerConfig(_env_file=None)
        assert cfg.database_url == "sqlite+aiosqlite:///:memory:"
        assert cfg.request_timeout == 2.5

    def test_log_level_normalised(self, monkeypatch):
        monkeypatch.setenv("TRACKER_LOG_LEVEL", "debug")
        assert TrackerConfig(_env_file=None).log_level == "DEBUG"


class TestValidation:
    def test_rejects_non_sqlite(self):
        with pytest.raises(ValidationError):
            TrackerConfig(database_url="postgresql+asyncpg://u:p@localhost/db", _env_file=None)

    def test_sync_sqlite_switched_to_aiosqlite(self):
        with pytest.warns(UserWarning, match="aiosqlite"):
            cfg = TrackerConfig(database_url="sqlite:///./tracker.db", _env_file=None)
        assert cfg.database_url == "sqlite+aiosqlite:///./tracker.db"

    @pytest.mark.parametrize(
        "url", ["aiosqlite:///./tracker.db", "sqlite+pysqlite:///./tracker.db"]
    )
    def test_rejects_other_sqlite_drivers(self, url):
        with pytest.raises(ValidationError):
            TrackerConfig(database_url=url, _env_file=None)

    def test_rejects_bad_log_level(self):
        with pytest.raises(ValidationError):
            TrackerConfig(log_level="verbose", _env_file=None)

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            TrackerConfig(request_timeout=0, _env_file=None)

    def test_str_is_printable(self):
        cfg = TrackerConfig(database_url="sqlite+aiosqlite:///:memory:", _env_file=None)
        assert "sqlite+aiosqlite" in str(cfg)
