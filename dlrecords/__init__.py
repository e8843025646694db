"""Persistence layer for download tracking: user IDs and per-user download history."""

from .exceptions import (
    CardinalityError,
    ConnectionOpenError,
    CursorError,
    ExecutionError,
    SchemaError,
    StatementPrepareError,
    StoreClosedError,
    StoreError,
    UnsupportedDialectError,
)
from .schema import DEFAULT_DIALECT, Dialect
from .store import RecordStore, open_store
from .types import AppConfig, Download, UserID

__all__ = [
    "AppConfig",
    "CardinalityError",
    "ConnectionOpenError",
    "CursorError",
    "DEFAULT_DIALECT",
    "Dialect",
    "Download",
    "ExecutionError",
    "RecordStore",
    "SchemaError",
    "StatementPrepareError",
    "StoreClosedError",
    "StoreError",
    "UnsupportedDialectError",
    "UserID",
    "open_store",
]
