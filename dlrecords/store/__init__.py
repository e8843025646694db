"""SQLite-backed storage for user IDs and download history."""

from .sqlite import RecordStore, open_store

__all__ = ["RecordStore", "open_store"]
