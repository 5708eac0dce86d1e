# autonote_video/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from dotenv import load_dotenv

from .ai_service import DEFAULT_API_KEY_ENV, DEFAULT_MODEL
from .annotations import DEFAULT_SEGMENT_LENGTH

logger = logging.getLogger(__name__)


CONFIG_FILENAME = "config.json"
DEFAULT_EXPORT_FILENAME = "project_tracking_sheet.csv"


class ConfigError(ValueError):
    pass


@dataclass
class AppConfig:
    """
    Stored in ./config.json (or the path given with --config).
    Secrets never live here: the API key comes from the environment / .env.
    """
    model: str = DEFAULT_MODEL
    segment_length: float = DEFAULT_SEGMENT_LENGTH
    export_filename: str = DEFAULT_EXPORT_FILENAME
    strict_transitions: bool = False
    log_level: str = "INFO"
    api_key_env: str = DEFAULT_API_KEY_ENV

    def to_dict(self) -> Dict:
        return {
            "model": self.model,
            "segment_length": float(self.segment_length),
            "export_filename": self.export_filename,
            "strict_transitions": bool(self.strict_transitions),
            "log_level": self.log_level,
            "api_key_env": self.api_key_env,
            "config_version": 1,
        }

    @staticmethod
    def from_dict(d: Dict) -> "AppConfig":
        try:
            cfg = AppConfig(
                model=str(d.get("model") or DEFAULT_MODEL),
                segment_length=float(d.get("segment_length", DEFAULT_SEGMENT_LENGTH)),
                export_filename=str(d.get("export_filename") or DEFAULT_EXPORT_FILENAME),
                strict_transitions=bool(d.get("strict_transitions", False)),
                log_level=str(d.get("log_level") or "INFO").upper(),
                api_key_env=str(d.get("api_key_env") or DEFAULT_API_KEY_ENV),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config value: {e}") from e
        if cfg.segment_length <= 0:
            raise ConfigError("segment_length must be positive")
        return cfg

    def api_key(self) -> Optional[str]:
        return os.environ.get(self.api_key_env) or None


def default_config_path(base_dir: Optional[str] = None) -> str:
    return os.path.join(base_dir or os.getcwd(), CONFIG_FILENAME)


def load_environment(dotenv_path: Optional[str] = None) -> bool:
    """Load a .env file (if present) into os.environ without overriding real env vars."""
    loaded = load_dotenv(dotenv_path) if dotenv_path else load_dotenv()
    if loaded:
        logger.debug("Loaded environment from .env")
    return bool(loaded)
