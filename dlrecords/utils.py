from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


def ensure_dir(path: Path) -> None:
    """Гарантировать существование каталога (idempotent)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def utc_now() -> datetime:
    """Текущее время в UTC без микросекунд."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def to_utc(value: datetime) -> datetime:
    # Наивные datetime считаем уже заданными в UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Преобразовать datetime в ISO-8601 строку (UTC) для записи в БД."""
    if value is None:
        return None
    return to_utc(value).isoformat()


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Разобрать значение времени из БД/конфига.

    Поддерживаются ISO-8601 строки, unix-время (int/float) и готовые datetime.
    Результат всегда timezone-aware (UTC). Нераспознанные значения дают ValueError.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return to_utc(raw)
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(float(raw), tz=timezone.utc)
    if isinstance(raw, str):
        return to_utc(datetime.fromisoformat(raw.strip()))
    raise ValueError(f"unsupported timestamp value: {raw!r}")


def is_uri_target(target: str) -> bool:
    return target.startswith("file:")


def is_memory_target(target: str) -> bool:
    return target == ":memory:" or (is_uri_target(target) and "mode=memory" in target)
