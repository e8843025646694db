from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from .utils import to_utc, utc_now


@dataclass(slots=True, frozen=True)
class UserID:
    """Анонимный идентификатор клиента с окном действия.

    Создаётся один раз на клиентскую сессию и больше не меняется;
    «истекает» только логически, по `expire_time`.
    """

    id: str
    create_time: datetime
    expire_time: datetime

    @classmethod
    def new(cls, ttl: timedelta, *, now: Optional[datetime] = None) -> "UserID":
        created = to_utc(now) if now is not None else utc_now()
        return cls(id=uuid.uuid4().hex, create_time=created, expire_time=created + ttl)

    def is_expired(self, at: Optional[datetime] = None) -> bool:
        moment = to_utc(at) if at is not None else utc_now()
        return to_utc(self.expire_time) <= moment


@dataclass(slots=True, frozen=True)
class Download:
    """Одно событие скачивания артефакта сборки."""

    user: str = ""
    downloaded: Optional[datetime] = None
    # Критерии выбора, которые привели к этому артефакту
    filter_set: str = ""
    operating_system: str = ""
    architecture: str = ""
    version: str = ""
    binary: str = ""
    url: str = ""


@dataclass(slots=True)
class AppConfig:
    """Конфигурация хранилища и значения по умолчанию."""

    database: Path | str = Path("data/downloads.db")
    dialect: str = "sqlite3"
    recent_limit: int = 10
    log_level: str = "INFO"
    log_file: Optional[Path] = Path("logs/dlrecords.log")
