"""Logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from config.settings import AppConfig

LOGGER_NAME = "ai_tryon"
LOG_FILE_NAME = "tryon.log"
QUIET_LOGGERS = ("httpx", "httpcore", "google_genai")


def setup_logging(config: AppConfig, level: int = logging.INFO) -> logging.Logger:
    """Send application logs to ``<log_dir>/tryon.log`` and the console.

    Calling it again replaces the handlers installed by the previous call.
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"),
            logging.StreamHandler(),
        ],
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return logging.getLogger(LOGGER_NAME)
