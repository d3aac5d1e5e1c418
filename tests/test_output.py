"""Unit tests for output control."""

from __future__ import annotations

import json

import pytest

from kora.output import (
    OutputConfig,
    format_json_output,
    get_output_config,
    print_json_output,
    print_output,
    set_output_config,
)


def test_output_config_defaults():
    config = OutputConfig()
    assert config.verbosity == "normal"
    assert config.format == "text"


def test_get_output_config_from_env(monkeypatch):
    monkeypatch.setenv("KORA_VERBOSITY", "verbose")
    monkeypatch.setenv("KORA_FORMAT", "json")
    config = get_output_config()
    assert config.verbosity == "verbose"
    assert config.format == "json"


def test_get_output_config_invalid_env_falls_back(monkeypatch):
    monkeypatch.setenv("KORA_VERBOSITY", "loud")
    monkeypatch.setenv("KORA_FORMAT", "xml")
    config = get_output_config()
    assert config.verbosity == "normal"
    assert config.format == "text"


def test_set_output_config_wins_over_env(monkeypatch):
    monkeypatch.setenv("KORA_VERBOSITY", "verbose")
    set_output_config(OutputConfig(verbosity="quiet"))
    assert get_output_config().verbosity == "quiet"


@pytest.mark.parametrize(
    "verbosity,level,shown",
    [
        ("quiet", "quiet", True),
        ("quiet", "normal", False),
        ("quiet", "verbose", False),
        ("normal", "normal", True),
        ("normal", "verbose", False),
        ("verbose", "verbose", True),
    ],
)
def test_print_output_levels(capsys, verbosity, level, shown):
    set_output_config(OutputConfig(verbosity=verbosity))
    print_output("hello", level=level)
    assert ("hello" in capsys.readouterr().out) is shown


def test_errors_always_go_to_stderr(capsys):
    set_output_config(OutputConfig(verbosity="quiet"))
    print_output("boom", level="error")
    captured = capsys.readouterr()
    assert "boom" in captured.err
    assert captured.out == ""


def test_print_output_custom_end(capsys):
    print_output("prompt", end="")
    assert capsys.readouterr().out == "prompt"


def test_format_json_output_keeps_unicode():
    text = format_json_output({"name": "Žiadosť"})
    assert "Žiadosť" in text
    assert json.loads(text) == {"name": "Žiadosť"}


def test_print_json_output_only_in_json_mode(capsys):
    set_output_config(OutputConfig(format="text"))
    print_json_output({"a": 1})
    assert capsys.readouterr().out == ""

    set_output_config(OutputConfig(format="json"))
    print_json_output({"a": 1})
    assert json.loads(capsys.readouterr().out) == {"a": 1}
