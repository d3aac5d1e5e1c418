"""Output control for kora.

Provides verbosity control for console messages (quiet, normal, verbose) and
JSON formatting for the non-interactive ``kora search`` command.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

VERBOSITY_LEVELS = ("quiet", "normal", "verbose")
OUTPUT_FORMATS = ("text", "json")

# -------------------------
# Dataclasses
# -------------------------


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        verbosity: Output level - "quiet", "normal", or "verbose"
        format: Output format - "text" or "json"
    """

    verbosity: str = "normal"  # quiet|normal|verbose
    format: str = "text"  # text|json


# -------------------------
# Global state
# -------------------------

# Set by the CLI before dispatching a command
_output_config: Optional[OutputConfig] = None


# -------------------------
# Core functions
# -------------------------


def get_output_config() -> OutputConfig:
    """Return the configured output settings.

    Falls back to ``KORA_VERBOSITY`` / ``KORA_FORMAT`` from the environment
    when the CLI has not set a configuration.
    """
    if _output_config is not None:
        return _output_config

    verbosity = os.environ.get("KORA_VERBOSITY", "normal")
    format_type = os.environ.get("KORA_FORMAT", "text")

    if verbosity not in VERBOSITY_LEVELS:
        verbosity = "normal"
    if format_type not in OUTPUT_FORMATS:
        format_type = "text"

    return OutputConfig(verbosity=verbosity, format=format_type)


def set_output_config(config: OutputConfig) -> None:
    global _output_config
    _output_config = config


def print_output(message: str, level: str = "normal", file: Any = None, end: str = "\n") -> None:
    """Print ``message`` if the current verbosity allows it.

    - "error" messages: always printed, to stderr by default
    - "quiet" messages: printed in every mode
    - "normal" messages: suppressed in quiet mode
    - "verbose" messages: only printed in verbose mode

    Interactive prompts and menus use "quiet" so they stay visible even with
    ``--quiet``.

    Args:
        message: The message to print
        level: Message level - "error", "quiet", "normal", or "verbose"
        file: File object to write to (default: stdout, stderr for errors)
        end: String appended after the message
    """
    config = get_output_config()

    if level == "error":
        should_print = True
        if file is None:
            file = sys.stderr
    elif level == "quiet":
        should_print = True
    elif level == "verbose":
        should_print = config.verbosity == "verbose"
    else:
        should_print = config.verbosity in ("normal", "verbose")

    if should_print:
        if file is None:
            file = sys.stdout
        print(message, file=file, end=end)


def format_json_output(data: Dict[str, Any]) -> str:
    """Pretty-print ``data`` as JSON, keeping non-ASCII characters."""
    return json.dumps(data, indent=2, sort_keys=False, ensure_ascii=False)


def print_json_output(data: Dict[str, Any]) -> None:
    """Print ``data`` as JSON when the output format is "json"."""
    config = get_output_config()
    if config.format == "json":
        print(format_json_output(data))
