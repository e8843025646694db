from __future__ import annotations

import logging
from pathlib import Path

import pytest

from dlrecords.config import load_config
from dlrecords.logging import resolve_level, setup_logging, setup_logging_from_config
from dlrecords.store import RecordStore


def test_setup_logging_creates_file_and_logs(tmp_path: Path):
    log_file = tmp_path / "logs" / "dlrecords.log"

    logger = setup_logging(level="DEBUG", log_file=log_file)
    logger.info("test message")

    assert log_file.exists()
    content = log_file.read_text(encoding="utf-8")
    assert "test message" in content
    assert "INFO" in content


def test_setup_logging_idempotent(tmp_path: Path):
    log_file = tmp_path / "logs" / "dlrecords.log"

    logger1 = setup_logging(level="INFO", log_file=log_file)
    handlers_count_1 = len(logger1.handlers)

    logger2 = setup_logging(level="INFO", log_file=log_file)
    handlers_count_2 = len(logger2.handlers)

    assert handlers_count_1 == handlers_count_2 == 2  # console + file

    logger2.info("once")
    text = log_file.read_text(encoding="utf-8")
    assert text.count("once") == 1


def test_setup_logging_without_file():
    logger = setup_logging(level="WARNING", log_file=None)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_store_events_reach_package_log(tmp_path: Path):
    log_file = tmp_path / "logs" / "dlrecords.log"
    setup_logging(level="DEBUG", log_file=log_file)

    with RecordStore(tmp_path / "downloads.db"):
        pass

    text = log_file.read_text(encoding="utf-8")
    assert "хранилище открыто" in text
    assert "хранилище закрыто" in text


def test_resolve_level_names_and_fallback():
    assert resolve_level("warning") == logging.WARNING
    assert resolve_level(" DEBUG ") == logging.DEBUG
    assert resolve_level(15) == 15
    # Атрибуты модуля logging, не являющиеся уровнями, не принимаются
    assert resolve_level("BASIC_FORMAT") == logging.INFO
    assert resolve_level("nonsense") == logging.INFO


def test_setup_logging_with_non_level_name(tmp_path: Path):
    logger = setup_logging(level="BASIC_FORMAT", log_file=tmp_path / "x.log")
    assert logger.level == logging.INFO


def test_setup_logging_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DLR_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("DLR_LOG_FILE", str(tmp_path / "var" / "store.log"))

    logger = setup_logging_from_config(load_config())
    logger.debug("from config")

    assert logger.level == logging.DEBUG
    assert "from config" in (tmp_path / "var" / "store.log").read_text(encoding="utf-8")
