from __future__ import annotations

import os
from dataclasses import replace, asdict
from pathlib import Path
from typing import Optional, Any

import yaml

from .types import AppConfig
from .utils import ensure_dir, is_memory_target, is_uri_target


_ENV_MAP: dict[str, str] = {
    "database": "DLR_DATABASE",
    "dialect": "DLR_DIALECT",
    "recent_limit": "DLR_RECENT_LIMIT",
    "log_level": "DLR_LOG_LEVEL",
    "log_file": "DLR_LOG_FILE",
}

_INT_FIELDS = {"recent_limit"}


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path or not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        return {}
    return data


def _apply_file_overrides(base: AppConfig, cfg_dict: dict[str, Any]) -> AppConfig:
    if not cfg_dict:
        return base
    updates: dict[str, Any] = {}
    for key in asdict(base).keys():
        if key in cfg_dict and cfg_dict[key] is not None:
            updates[key] = cfg_dict[key]
    return replace(base, **_normalize_types(updates))


def _apply_env_overrides(base: AppConfig) -> AppConfig:
    updates: dict[str, Any] = {}
    for field, env_name in _ENV_MAP.items():
        if env_name in os.environ:
            raw = os.environ[env_name]
            if field in _INT_FIELDS:
                try:
                    updates[field] = int(raw)
                except ValueError:
                    continue
            elif field == "log_file":
                # Пустая строка отключает файловый лог
                updates[field] = raw if raw.strip() else None
            else:
                updates[field] = raw
    if not updates:
        return base
    return replace(base, **_normalize_types(updates))


def _normalize_types(updates: dict[str, Any]) -> dict[str, Any]:
    # Приведение строк -> Path для путей (кроме :memory: и file: URI)
    out: dict[str, Any] = dict(updates)
    database = out.get("database")
    if isinstance(database, str) and not is_uri_target(database) and not is_memory_target(database):
        out["database"] = Path(database).expanduser()
    if "log_file" in out and isinstance(out["log_file"], str):
        out["log_file"] = Path(out["log_file"]).expanduser()
    for key in out.keys() & _INT_FIELDS:
        out[key] = int(out[key])
    return out


def _normalize_and_prepare(cfg: AppConfig) -> AppConfig:
    # Нормализация путей и подготовка директорий
    database = cfg.database
    if isinstance(database, Path):
        database = database.expanduser()
        if not database.is_absolute():
            database = Path.cwd() / database
        ensure_dir(database.parent)
    log_file = cfg.log_file
    if log_file is not None:
        log_file = Path(log_file).expanduser()
        if not log_file.is_absolute():
            log_file = Path.cwd() / log_file
        ensure_dir(log_file.parent)
    return replace(cfg, database=database, log_file=log_file)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Загрузить конфигурацию из файла/ENV и вернуть объект AppConfig.

    Приоритет источников: явные overrides (накладываются отдельно) > ENV > файл > дефолты.
    Поиск файла: указанная `config_path` -> переменная DLR_CONFIG -> `./dlrecords.config.yaml`.
    """
    base = AppConfig()

    if config_path is None:
        env_cfg = os.environ.get("DLR_CONFIG")
        if env_cfg:
            config_path = Path(env_cfg)
        else:
            config_path = Path.cwd() / "dlrecords.config.yaml"

    file_data = _load_yaml(config_path)
    cfg = _apply_file_overrides(base, file_data)
    cfg = _apply_env_overrides(cfg)
    cfg = _normalize_and_prepare(cfg)
    return cfg


def merge_overrides(cfg: AppConfig, overrides: dict) -> AppConfig:
    """Наложить явные значения (overrides) поверх конфига и вернуть копию.

    Пример overrides: {"database": Path("other.db"), "recent_limit": 5}
    """
    if not overrides:
        return cfg
    norm = _normalize_types({k: v for k, v in overrides.items() if v is not None})
    merged = replace(cfg, **norm)
    return _normalize_and_prepare(merged)
