# autonote_video/logging_setup.py
from __future__ import annotations

import logging

LOG_FORMAT = "[%(asctime)s] %(levelname)s:%(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    lvl = getattr(logging, str(level or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    # google-genai / httpx are chatty at INFO
    logging.getLogger("httpx").setLevel(max(lvl, logging.WARNING))
