from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional

from ..exceptions import (
    CardinalityError,
    ConnectionOpenError,
    CursorError,
    ExecutionError,
    SchemaError,
    StatementPrepareError,
    StoreClosedError,
)
from ..schema import (
    DEFAULT_DIALECT,
    DOWNLOAD_INSERT_ORDER,
    RECENT_DOWNLOADS_COLUMNS,
    RECENT_DOWNLOADS_PARAM_ORDER,
    USER_ID_INSERT_ORDER,
    Dialect,
    DownloadSchema,
    UserIDSchema,
    resolve_dialect,
)
from ..types import AppConfig, Download, UserID
from ..utils import format_timestamp, is_uri_target

logger = logging.getLogger("dlrecords.store")

_SAVE_USER_ID = "save_user_id"
_SAVE_DOWNLOAD = "save_download"
_RECENT_DOWNLOADS = "recent_downloads"


class _PreparedStatement:
    """SQL-текст, скомпилированный против текущей схемы.

    sqlite3 кэширует скомпилированные запросы по тексту, поэтому повторные
    вызовы с тем же `sql` переиспользуют подготовленный stmt.
    """

    __slots__ = ("name", "sql", "arity")

    def __init__(self, name: str, sql: str, arity: int) -> None:
        self.name = name
        self.sql = sql
        self.arity = arity

    def compile(self, conn: sqlite3.Connection) -> None:
        # EXPLAIN компилирует запрос без выполнения
        with closing(conn.execute(f"EXPLAIN {self.sql}", (None,) * self.arity)) as cur:
            cur.fetchall()


def _column_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def _bind(record: Any, order: Iterable[str]) -> tuple[Any, ...]:
    return tuple(_column_value(getattr(record, name)) for name in order)


def _row_to_download(row: sqlite3.Row) -> Download:
    values = {name: row[name] if row[name] is not None else "" for name in RECENT_DOWNLOADS_COLUMNS}
    return Download(**values)


def _connect(target: str) -> sqlite3.Connection:
    try:
        conn = sqlite3.connect(target, uri=is_uri_target(target), check_same_thread=False)
    except sqlite3.Error as err:
        raise ConnectionOpenError(f"cannot open database {target!r}: {err}", original=err) from err
    conn.row_factory = sqlite3.Row
    return conn


class RecordStore:
    """Хранилище идентификаторов пользователей и истории загрузок.

    При создании открывает соединение, создаёт таблицы (если их нет) и
    готовит три запроса. Любая ошибка на этих шагах закрывает соединение и
    пробрасывается наружу — частично собранное хранилище не возвращается.
    """

    def __init__(
        self,
        target: Path | str,
        dialect: Dialect | str = DEFAULT_DIALECT,
        *,
        default_limit: int = 10,
    ) -> None:
        self.dialect = resolve_dialect(dialect)
        self.target = str(target)
        self.default_limit = default_limit
        self._statements: dict[str, _PreparedStatement] = {}
        self._conn: Optional[sqlite3.Connection] = _connect(self.target)
        try:
            self._ensure_schema(self._conn)
            self._prepare_statements(self._conn)
        except Exception:
            self._statements.clear()
            self._conn.close()
            self._conn = None
            raise
        logger.debug("хранилище открыто: %s (%s)", self.target, self.dialect.value)

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        # Порядок важен: сначала загрузки, затем идентификаторы
        for name, ddl in (
            ("downloads", DownloadSchema.create_table_if_not_exists(self.dialect)),
            ("user_ids", UserIDSchema.create_table_if_not_exists(self.dialect)),
        ):
            try:
                with conn:
                    conn.execute(ddl)
            except sqlite3.Error as err:
                raise SchemaError(f"cannot create table {name}: {err}", original=err) from err

    def _prepare_statements(self, conn: sqlite3.Connection) -> None:
        statements = (
            _PreparedStatement(
                _SAVE_USER_ID,
                UserIDSchema.insert_statement(self.dialect),
                len(USER_ID_INSERT_ORDER),
            ),
            _PreparedStatement(
                _RECENT_DOWNLOADS,
                DownloadSchema.select_recent_downloads(self.dialect),
                len(RECENT_DOWNLOADS_PARAM_ORDER),
            ),
            _PreparedStatement(
                _SAVE_DOWNLOAD,
                DownloadSchema.insert_statement(self.dialect),
                len(DOWNLOAD_INSERT_ORDER),
            ),
        )
        for stmt in statements:
            try:
                stmt.compile(conn)
            except sqlite3.Error as err:
                raise StatementPrepareError(
                    f"cannot prepare statement {stmt.name}: {err}", original=err
                ) from err
            self._statements[stmt.name] = stmt

    def _statement(self, name: str) -> tuple[sqlite3.Connection, _PreparedStatement]:
        if self._conn is None:
            raise StoreClosedError(f"store {self.target!r} is closed")
        return self._conn, self._statements[name]

    @property
    def closed(self) -> bool:
        return self._conn is None

    def save_download(self, download: Download) -> None:
        """Записать событие загрузки. Содержимое полей не проверяется."""
        conn, stmt = self._statement(_SAVE_DOWNLOAD)
        params = _bind(download, DOWNLOAD_INSERT_ORDER)
        try:
            with conn:
                conn.execute(stmt.sql, params).close()
        except (sqlite3.Error, OverflowError) as err:
            raise ExecutionError(
                f"cannot save download for user {download.user!r}: {err}", original=err
            ) from err

    def save_user_id(self, user_id: UserID) -> None:
        """Записать новый идентификатор пользователя.

        Вставка должна затронуть ровно одну строку, иначе — CardinalityError
        (транзакция при этом откатывается).
        """
        conn, stmt = self._statement(_SAVE_USER_ID)
        params = _bind(user_id, USER_ID_INSERT_ORDER)
        try:
            with conn, closing(conn.execute(stmt.sql, params)) as cur:
                affected = cur.rowcount
                if affected != 1:
                    logger.warning("вставка user id %s затронула строк: %d", user_id.id, affected)
                    raise CardinalityError(affected)
        except (sqlite3.Error, OverflowError) as err:
            raise ExecutionError(f"cannot save user id {user_id.id!r}: {err}", original=err) from err

    def get_recent_downloads(self, user_id: UserID, limit: Optional[int] = None) -> list[Download]:
        """Последние загрузки пользователя, не более `limit` штук.

        Без `limit` берётся `default_limit` хранилища.

        Читаются только ОС, архитектура, версия и бинарник; остальные поля
        Download остаются пустыми.
        """
        if limit is None:
            limit = self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        conn, stmt = self._statement(_RECENT_DOWNLOADS)
        values = {"limit": limit, "user": user_id.id}
        params = tuple(values[name] for name in RECENT_DOWNLOADS_PARAM_ORDER)
        try:
            cursor = conn.execute(stmt.sql, params)
        except (sqlite3.Error, OverflowError) as err:
            raise ExecutionError(
                f"cannot query recent downloads for user {user_id.id!r}: {err}", original=err
            ) from err

        with closing(cursor):
            try:
                return [_row_to_download(row) for row in cursor]
            except sqlite3.Error as err:
                raise CursorError(
                    f"cannot read recent downloads for user {user_id.id!r}: {err}", original=err
                ) from err

    def close(self) -> None:
        """Освободить подготовленные запросы, затем закрыть соединение."""
        if self._conn is None:
            return
        self._statements.clear()
        conn, self._conn = self._conn, None
        conn.close()
        logger.debug("хранилище закрыто: %s", self.target)

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"RecordStore({self.target!r}, dialect={self.dialect.value!r}, {state})"


def open_store(config: AppConfig) -> RecordStore:
    """Открыть хранилище по настройкам приложения."""
    return RecordStore(config.database, dialect=config.dialect, default_limit=config.recent_limit)
