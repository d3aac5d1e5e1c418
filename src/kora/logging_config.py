"""Logging configuration for kora.

The console is the interactive UI, so log records go to stderr and only
warnings are shown there unless ``--verbose`` is given. An optional log file
always receives DEBUG records.

Usage:
    >>> setup_logging(verbose=True)
    >>> logger = logging.getLogger(__name__)
    >>> logger.debug("Session started")
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    quiet: bool = False,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        verbose: If True, show DEBUG records on the console
        log_file: Optional path to a log file (always DEBUG)
        quiet: If True, show only errors on the console

    Returns:
        The configured root logger
    """
    if quiet:
        console_level = logging.ERROR
    elif verbose:
        console_level = logging.DEBUG
    else:
        console_level = logging.WARNING

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    handlers.append(console_handler)

    root_level = console_level
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        handlers.append(file_handler)
        root_level = logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    return root_logger
