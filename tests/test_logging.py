"""setup_logging tests."""

from __future__ import annotations

import logging

import pytest

from config.settings import AppConfig
from modules.utils.logging import LOG_FILE_NAME, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_writes_into_log_dir(tmp_path, restore_root_logger):
    log_dir = tmp_path / "logs"

    logger = setup_logging(AppConfig(log_dir=log_dir))
    logger.info("try-on session started")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logger.name == "ai_tryon"
    assert "try-on session started" in (log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_logging_twice_keeps_one_file_handler(tmp_path, restore_root_logger):
    config = AppConfig(log_dir=tmp_path)

    setup_logging(config)
    setup_logging(config, logging.DEBUG)

    root = logging.getLogger()
    file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert root.level == logging.DEBUG
