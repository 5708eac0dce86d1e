# autonote_video/app.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from PyQt5.QtWidgets import QApplication, QMessageBox

from .ai_service import GeminiService
from .config import AppConfig, ConfigError, load_environment
from .logging_setup import configure_logging
from .main_window import MainWindow
from .persistence import load_config
from .seed import seed_state

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="autonote-video", description="Video annotation and project tracking")
    p.add_argument("--config", help="Path to config.json (default: ./config.json if present)")
    p.add_argument("--env-file", help="Path to a .env file holding the API key")
    p.add_argument("--user", default="u1", help="User id to start as (default: u1, the manager)")
    p.add_argument("--log-level", help="Override the configured log level")
    return p


def build_service(cfg: AppConfig) -> GeminiService:
    return GeminiService(model=cfg.model, api_key_env=cfg.api_key_env)


def run_app(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    args = build_arg_parser().parse_args(argv[1:])

    load_environment(args.env_file)
    config_error: Optional[str] = None
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        config_error = str(e)
        cfg = AppConfig()

    configure_logging(args.log_level or cfg.log_level)
    logger.info("Starting AutoNote Video (model=%s)", cfg.model)

    app = QApplication(argv)

    state = seed_state(current_user_id=args.user)
    if state.get_user(args.user) is None:
        logger.warning("Unknown user %s; starting as %s", args.user, state.users[0].id)
        state.current_user_id = state.users[0].id

    win = MainWindow(state=state, service=build_service(cfg), cfg=cfg)
    win.show()

    if config_error:
        logger.error(config_error)
        QMessageBox.warning(win, "Config error", f"{config_error}\n\nUsing default settings.")
    if not cfg.api_key():
        QMessageBox.information(
            win,
            "No API key",
            f"{cfg.api_key_env} is not set. AI reports and text polish will fall back "
            "until a key is provided (environment or .env file).",
        )

    return app.exec_()
