# autonote_video/persistence.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Dict, Optional

from .config import AppConfig, ConfigError, default_config_path

logger = logging.getLogger(__name__)


# -----------------------------
# Atomic file helpers
# -----------------------------

def _atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    d = os.path.dirname(os.path.abspath(path))
    os.makedirs(d, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=d)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _atomic_write_json(path: str, payload: Dict) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    _atomic_write_text(path, text + "\n")


def _read_json(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


# -----------------------------
# App config (config.json)
# -----------------------------

def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Loads config.json.

    With no explicit path, a missing or unreadable default file means "use
    defaults". An explicit path that cannot be read raises ConfigError.
    """
    explicit = path is not None
    path = path or default_config_path()

    if not os.path.exists(path):
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return AppConfig()

    try:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a JSON object")
        cfg = AppConfig.from_dict(data)
    except (OSError, json.JSONDecodeError, ConfigError) as e:
        if explicit:
            raise ConfigError(f"Could not load config {path}: {e}") from e
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return AppConfig()

    logger.info("Loaded config from %s", path)
    return cfg


def save_config(cfg: AppConfig, path: Optional[str] = None) -> str:
    path = path or default_config_path()
    _atomic_write_json(path, cfg.to_dict())
    return path


# -----------------------------
# Sheet export
# -----------------------------

def save_sheet_csv(path: str, csv_text: str) -> str:
    """Write an exported sheet atomically. Returns the written path."""
    if not path:
        raise ValueError("Export path is required")
    _atomic_write_text(path, csv_text)
    logger.info("Exported sheet to %s", path)
    return path
