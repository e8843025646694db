"""Custom exceptions used by the dlrecords store."""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base class for every failure surfaced by the record store."""

    def __init__(self, message: str, *, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class ConnectionOpenError(StoreError):
    """Raised when a connection to the database target cannot be established."""


class SchemaError(StoreError):
    """Raised when a create-table statement is rejected."""


class StatementPrepareError(StoreError):
    """Raised when a statement cannot be compiled against the schema."""


class ExecutionError(StoreError):
    """Raised when an insert or select is rejected at call time."""


class CardinalityError(StoreError):
    """Raised when an insert affects a number of rows other than one."""

    def __init__(self, affected: int) -> None:
        super().__init__(f"more or less than 1 row affected: {affected}")
        self.affected = affected


class CursorError(StoreError):
    """Raised when reading rows from a result cursor fails."""


class StoreClosedError(StoreError):
    """Raised when an operation is attempted on a closed store."""


class UnsupportedDialectError(StoreError):
    """Raised when no schema text exists for the requested SQL dialect."""


__all__ = [
    "StoreError",
    "ConnectionOpenError",
    "SchemaError",
    "StatementPrepareError",
    "ExecutionError",
    "CardinalityError",
    "CursorError",
    "StoreClosedError",
    "UnsupportedDialectError",
]
