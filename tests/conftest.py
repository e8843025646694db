from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from dlrecords.store import RecordStore
from dlrecords.types import UserID

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DLR_CONFIG",
        "DLR_DATABASE",
        "DLR_DIALECT",
        "DLR_RECENT_LIMIT",
        "DLR_LOG_LEVEL",
        "DLR_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "downloads.db"


@pytest.fixture
def store(db_path: Path):
    s = RecordStore(db_path)
    yield s
    s.close()


@pytest.fixture
def user() -> UserID:
    return UserID(id="u1", create_time=T0, expire_time=T1)
