from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from .types import AppConfig
from .utils import ensure_dir

LOGGER_NAME = "dlrecords"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[str, int]) -> int:
    """Имя или число уровня -> числовой уровень; неизвестное имя даёт INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    # getLevelName возвращает строку "Level X" для неизвестных имён
    return resolved if isinstance(resolved, int) else logging.INFO


def _file_handler(log_file: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    ensure_dir(log_file.parent)
    handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: Union[str, int] = "INFO", log_file: Optional[Path] = Path("logs/dlrecords.log")
) -> logging.Logger:
    """Настроить логгер пакета: консоль (INFO+) и, опционально, файл с ротацией.

    Повторный вызов заменяет ранее установленные хендлеры. Логгер
    хранилища `dlrecords.store` пишет через эти же хендлеры.
    """
    numeric = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)
    logger.propagate = False

    while logger.handlers:
        stale = logger.handlers[0]
        logger.removeHandler(stale)
        stale.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(max(numeric, logging.INFO))
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        logger.addHandler(_file_handler(Path(log_file), numeric, formatter))

    return logger


def setup_logging_from_config(cfg: AppConfig) -> logging.Logger:
    return setup_logging(level=cfg.log_level, log_file=cfg.log_file)
