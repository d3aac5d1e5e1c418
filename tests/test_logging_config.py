"""Tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

from kora.logging_config import setup_logging


def _console_handler(root: logging.Logger) -> logging.Handler:
    return next(h for h in root.handlers if not isinstance(h, logging.FileHandler))


def test_default_console_level_is_warning():
    root = setup_logging()
    assert _console_handler(root).level == logging.WARNING


def test_verbose_and_quiet_levels():
    assert _console_handler(setup_logging(verbose=True)).level == logging.DEBUG
    assert _console_handler(setup_logging(quiet=True)).level == logging.ERROR


def test_setup_replaces_handlers():
    setup_logging()
    root = setup_logging()
    assert len(root.handlers) == 1


def test_log_file_receives_debug(tmp_path: Path):
    log_file = tmp_path / "logs" / "kora.log"
    root = setup_logging(log_file=log_file)
    logging.getLogger("kora.test").debug("session started")
    for handler in root.handlers:
        handler.flush()
    assert "session started" in log_file.read_text(encoding="utf-8")
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
