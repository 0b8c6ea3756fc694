"""Unit tests for project_tracker.utils.db_compat"""

from __future__ import annotations

import pytest

from project_tracker.utils.db_compat import (
    DbDialect,
    detect_dialect,
    is_memory_database,
    requires_static_pool,
    to_async_sqlite_url,
    url_scheme,
)


class TestDetectDialect:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite+aiosqlite:///./tracker.db", DbDialect.SQLITE),
            ("sqlite:///:memory:", DbDialect.SQLITE),
            ("postgresql+asyncpg://u:p@h/db", DbDialect.POSTGRESQL),
            ("mysql+aiomysql://u:p@h/db", DbDialect.MYSQL),
            ("oracle://h/db", DbDialect.UNKNOWN),
            ("aiosqlite:///./tracker.db", DbDialect.UNKNOWN),
            ("not a url", DbDialect.UNKNOWN),
        ],
    )
    def test_detect(self, url, expected):
        assert detect_dialect(url) == expected


class TestMemoryDatabase:
    @pytest.mark.parametrize(
        "url",
        [
            "sqlite+aiosqlite:///:memory:",
            "sqlite+aiosqlite://",
            "sqlite+aiosqlite:///file:db?mode=memory&cache=shared&uri=true",
        ],
    )
    def test_memory(self, url):
        assert is_memory_database(url)
        assert requires_static_pool(url)

    @pytest.mark.parametrize(
        "url", ["sqlite+aiosqlite:///./tracker.db", "postgresql+asyncpg://u:p@h/db"]
    )
    def test_not_memory(self, url):
        assert not is_memory_database(url)
        assert not requires_static_pool(url)


class TestAsyncSqliteUrl:
    def test_scheme(self):
        assert url_scheme("SQLite+AIOSQLite:///./tracker.db") == "sqlite+aiosqlite"
        assert url_scheme("no scheme here") == ""

    def test_rewrites_sync_sqlite(self):
        assert to_async_sqlite_url("sqlite:///./tracker.db") == "sqlite+aiosqlite:///./tracker.db"
        assert to_async_sqlite_url("sqlite://") == "sqlite+aiosqlite://"

    def test_leaves_other_urls(self):
        for url in ("sqlite+aiosqlite:///:memory:", "postgresql+asyncpg://u:p@h/db"):
            assert to_async_sqlite_url(url) == url
