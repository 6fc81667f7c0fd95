"""Unit tests for taskboard.utils.db_compat"""

from __future__ import annotations

import pytest

from taskboard.utils.db_compat import (
    DbDialect,
    detect_dialect,
    requires_static_pool,
    serializes_writes,
)


class TestDetectDialect:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql+asyncpg://u:p@h/db", DbDialect.POSTGRESQL),
            ("postgresql://u:p@h/db", DbDialect.POSTGRESQL),
            ("sqlite+aiosqlite:///:memory:", DbDialect.SQLITE),
            ("sqlite+aiosqlite:///./taskboard.db", DbDialect.SQLITE),
            ("mysql+aiomysql://u:p@h/db", DbDialect.MYSQL),
            ("mariadb+aiomysql://u:p@h/db", DbDialect.MYSQL),
        ],
    )
    def test_known(self, url, expected):
        assert detect_dialect(url) == expected

    def test_unlisted_driver_uses_family(self):
        assert detect_dialect("postgresql+customdriver://u:p@h/db") == DbDialect.POSTGRESQL

    def test_case_insensitive(self):
        assert detect_dialect("SQLITE+AIOSQLITE:///x.db") == DbDialect.SQLITE

    @pytest.mark.parametrize("url", ["", "not a url", "oracle://u:p@h/db"])
    def test_unknown(self, url):
        assert detect_dialect(url) == DbDialect.UNKNOWN


class TestRequiresStaticPool:
    @pytest.mark.parametrize(
        "url",
        [
            "sqlite+aiosqlite:///:memory:",
            "sqlite://",
            "sqlite+aiosqlite:///file:tb?mode=memory&cache=shared&uri=true",
        ],
    )
    def test_in_memory_sqlite(self, url):
        assert requires_static_pool(url)

    @pytest.mark.parametrize(
        "url",
        [
            "sqlite+aiosqlite:///./taskboard.db",
            "sqlite+aiosqlite:////var/lib/taskboard/tb.db",
            "postgresql+asyncpg://u:p@h/db",
            "mysql+aiomysql://u:p@h/db",
            "not a url",
        ],
    )
    def test_file_sqlite_and_servers_are_pooled(self, url):
        assert not requires_static_pool(url)


class TestSerializesWrites:
    def test_sqlite(self):
        assert serializes_writes(DbDialect.SQLITE)

    @pytest.mark.parametrize(
        "dialect", [DbDialect.POSTGRESQL, DbDialect.MYSQL, DbDialect.UNKNOWN]
    )
    def test_others(self, dialect):
        assert not serializes_writes(dialect)
