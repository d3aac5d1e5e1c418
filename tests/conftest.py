from __future__ import annotations

import logging

import pytest

import kora.output as output_module


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Restore output config and root log handlers changed by the CLI."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    original = output_module._output_config
    output_module._output_config = None
    yield
    output_module._output_config = original
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
