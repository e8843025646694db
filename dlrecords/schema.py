"""Table definitions and query text for the record store.

Every statement is keyed by SQL dialect. Parameters are bound by position,
so the ``*_ORDER`` tuples below are the binding contract for each statement.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from .exceptions import UnsupportedDialectError


class Dialect(str, Enum):
    SQLITE3 = "sqlite3"


DEFAULT_DIALECT = Dialect.SQLITE3

USER_ID_INSERT_ORDER: tuple[str, ...] = ("id", "create_time", "expire_time")
DOWNLOAD_INSERT_ORDER: tuple[str, ...] = (
    "user",
    "downloaded",
    "filter_set",
    "operating_system",
    "architecture",
    "version",
    "binary",
    "url",
)
RECENT_DOWNLOADS_PARAM_ORDER: tuple[str, ...] = ("limit", "user")
RECENT_DOWNLOADS_COLUMNS: tuple[str, ...] = (
    "operating_system",
    "architecture",
    "version",
    "binary",
)


_DOWNLOADS_DDL: Mapping[Dialect, str] = {
    Dialect.SQLITE3: """
        CREATE TABLE IF NOT EXISTS downloads (
            user_id TEXT NOT NULL,
            downloaded_at TEXT,
            filter_set TEXT,
            operating_system TEXT,
            architecture TEXT,
            version TEXT,
            binary TEXT,
            url TEXT
        )
    """,
}

_USER_IDS_DDL: Mapping[Dialect, str] = {
    Dialect.SQLITE3: """
        CREATE TABLE IF NOT EXISTS user_ids (
            id TEXT PRIMARY KEY,
            create_time TEXT NOT NULL,
            expire_time TEXT NOT NULL
        )
    """,
}

_DOWNLOADS_INSERT: Mapping[Dialect, str] = {
    Dialect.SQLITE3: """
        INSERT INTO downloads (
            user_id, downloaded_at, filter_set, operating_system,
            architecture, version, binary, url
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    """,
}

_USER_IDS_INSERT: Mapping[Dialect, str] = {
    Dialect.SQLITE3: "INSERT INTO user_ids (id, create_time, expire_time) VALUES (?, ?, ?)",
}

# ?1 — limit, ?2 — user_id (см. RECENT_DOWNLOADS_PARAM_ORDER)
_RECENT_DOWNLOADS_SELECT: Mapping[Dialect, str] = {
    Dialect.SQLITE3: """
        SELECT operating_system, architecture, version, binary
        FROM downloads
        WHERE user_id = ?2
        ORDER BY downloaded_at DESC, rowid DESC
        LIMIT ?1
    """,
}


def resolve_dialect(value: Dialect | str) -> Dialect:
    """Привести строковый тег диалекта к `Dialect`."""
    if isinstance(value, Dialect):
        return value
    try:
        return Dialect(str(value).strip().lower())
    except ValueError as err:
        raise UnsupportedDialectError(f"unsupported SQL dialect: {value!r}", original=err) from err


def _lookup(table: Mapping[Dialect, str], dialect: Dialect | str, what: str) -> str:
    resolved = resolve_dialect(dialect)
    try:
        return table[resolved]
    except KeyError as err:
        raise UnsupportedDialectError(
            f"no {what} statement for dialect {resolved.value!r}", original=err
        ) from err


class DownloadSchema:
    """Запросы для таблицы загрузок."""

    @staticmethod
    def create_table_if_not_exists(dialect: Dialect | str) -> str:
        return _lookup(_DOWNLOADS_DDL, dialect, "downloads create-table")

    @staticmethod
    def insert_statement(dialect: Dialect | str) -> str:
        return _lookup(_DOWNLOADS_INSERT, dialect, "downloads insert")

    @staticmethod
    def select_recent_downloads(dialect: Dialect | str) -> str:
        return _lookup(_RECENT_DOWNLOADS_SELECT, dialect, "recent downloads select")


class UserIDSchema:
    """Запросы для таблицы идентификаторов пользователей."""

    @staticmethod
    def create_table_if_not_exists(dialect: Dialect | str) -> str:
        return _lookup(_USER_IDS_DDL, dialect, "user_ids create-table")

    @staticmethod
    def insert_statement(dialect: Dialect | str) -> str:
        return _lookup(_USER_IDS_INSERT, dialect, "user_ids insert")


__all__ = [
    "Dialect",
    "DEFAULT_DIALECT",
    "USER_ID_INSERT_ORDER",
    "DOWNLOAD_INSERT_ORDER",
    "RECENT_DOWNLOADS_PARAM_ORDER",
    "RECENT_DOWNLOADS_COLUMNS",
    "DownloadSchema",
    "UserIDSchema",
    "resolve_dialect",
]
