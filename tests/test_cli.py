"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from kora.cli import build_parser, main
from kora.store import Item, Store


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch):
    monkeypatch.delenv("KORA_CONFIG", raising=False)


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    with Store.open(tmp_path / "kora.db") as store:
        for i in range(60):
            store.save_item(
                Item(
                    id=None,
                    name=f"Receipt {i:02d}",
                    created_at=f"2024-01-{(i % 28) + 1:02d}",
                    path=str(tmp_path / "storage" / f"r{i}"),
                )
            )
        med = store.save_item(
            Item(id=None, name="MEDOVKA", created_at="2023-06-01", path=str(tmp_path / "m"))
        )
        store.set_item_tags(med.id, [store.find_or_create_tag("bylinky").id])
    return tmp_path


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["--version"])
    assert exc.value.code == 0
    assert "kora" in capsys.readouterr().out


def test_unknown_command_exits_with_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["frobnicate"])
    assert exc.value.code == 2
    assert "Error:" in capsys.readouterr().err


def test_search_limit_is_capped():
    args = build_parser().parse_args(["search", "--limit", "500"])
    assert args.limit == 50


def test_search_limit_must_be_positive(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["search", "--limit", "0"])


def test_init_creates_archive(tmp_path: Path, capsys):
    assert main(["--root", str(tmp_path), "init"]) == 0
    assert (tmp_path / ".kora" / "kora.toml").exists()
    assert (tmp_path / "kora.db").exists()
    assert (tmp_path / "storage").is_dir()
    assert "Wrote" in capsys.readouterr().out


def test_init_keeps_existing_config(tmp_path: Path, capsys):
    main(["--root", str(tmp_path), "init"])
    capsys.readouterr()
    assert main(["--root", str(tmp_path), "init"]) == 0
    assert "already exists" in capsys.readouterr().out


def test_search_text(archive: Path, capsys):
    assert main(["--root", str(archive), "search", "mëd"]) == 0
    out = capsys.readouterr().out
    assert "Filtered Items (filter: 'mëd'):" in out
    assert "1. 2023-06-01 | MEDOVKA [BYLINKY]" in out
    assert "Receipt" not in out


def test_search_without_term_shows_recent_prefix(archive: Path, capsys):
    assert main(["--root", str(archive), "search"]) == 0
    lines = [l for l in capsys.readouterr().out.splitlines() if l[:1].isdigit()]
    assert len(lines) == 50


def test_search_json(archive: Path, capsys):
    assert main(["--root", str(archive), "search", "receipt", "--format", "json", "--limit", "5"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["filter"] == "receipt"
    assert data["total"] == 60
    assert len(data["items"]) == 5
    assert data["items"][0]["position"] == 1


def test_search_no_matches(archive: Path, capsys):
    assert main(["--root", str(archive), "search", "kiwi"]) == 0
    assert "No items match 'kiwi'." in capsys.readouterr().out


def test_search_quiet_hides_header(archive: Path, capsys):
    assert main(["--root", str(archive), "--quiet", "search", "medovka"]) == 0
    out = capsys.readouterr().out
    assert "Filtered Items" not in out
    assert "MEDOVKA" in out


def test_invalid_config_returns_error(tmp_path: Path):
    (tmp_path / "kora.toml").write_text('[output]\nverbosity = "loud"\n')
    assert main(["--root", str(tmp_path), "search"]) == 1


def test_menu_is_default_command(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "0")
    assert main(["--root", str(tmp_path)]) == 0
    assert "KORA - file archive" in capsys.readouterr().out


def test_keyboard_interrupt(tmp_path: Path, monkeypatch):
    def interrupt(prompt=""):
        raise KeyboardInterrupt

    monkeypatch.setattr("builtins.input", interrupt)
    assert main(["--root", str(tmp_path), "menu"]) == 130
