from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

try:
    import tomllib  # py>=3.11
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from .errors import ConfigError
from .output import OUTPUT_FORMATS, VERBOSITY_LEVELS

DEFAULT_CONFIG_TOML = """\
[storage]
db_path = "kora.db"
storage_dir = "storage"

# [opener]
# argv = ["open"]

[output]
verbosity = "normal"
format = "text"
"""


# -------------------------
# Dataclasses
# -------------------------


@dataclass(frozen=True)
class StorageConfig:
    db_path: Path
    storage_dir: Path


@dataclass(frozen=True)
class OpenerConfig:
    argv: Tuple[str, ...]


@dataclass(frozen=True)
class OutputSettings:
    verbosity: str = "normal"  # quiet|normal|verbose
    format: str = "text"  # text|json


@dataclass(frozen=True)
class KoraConfig:
    root: Path
    storage: StorageConfig
    opener: OpenerConfig
    output: OutputSettings


# -------------------------
# Parsing helpers
# -------------------------


def default_opener() -> Tuple[str, ...]:
    """Platform command that opens a folder in the file manager."""
    if sys.platform == "darwin":
        return ("open",)
    if sys.platform.startswith("win"):
        return ("explorer",)
    return ("xdg-open",)


def _load_toml(path: Path) -> Dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Merge b into a (recursively for dicts), return new dict."""

    out: Dict[str, Any] = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _table(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    raw = data.get(name, {}) or {}
    return raw if isinstance(raw, dict) else {}


def _resolve(root: Path, value: Any, default: str) -> Path:
    text = str(value).strip() if value is not None else ""
    p = Path(text or default).expanduser()
    if not p.is_absolute():
        p = root / p
    return p


def config_paths(root: Path) -> List[Path]:
    """Config files that exist for ``root``, lowest precedence first."""

    paths: List[Path] = []

    p1 = root / ".kora" / "kora.toml"
    if p1.exists():
        paths.append(p1)

    p2 = root / "kora.toml"
    if p2.exists():
        paths.append(p2)

    env = os.environ.get("KORA_CONFIG")
    if env:
        p3 = Path(env)
        if not p3.is_absolute():
            p3 = (root / p3).resolve()
        if p3.exists():
            paths.append(p3)

    return paths


# -------------------------
# Public API
# -------------------------


def load_config(root: Path) -> KoraConfig:
    """Load and normalize configuration for the archive rooted at ``root``.

    Reads .kora/kora.toml, then ./kora.toml, then $KORA_CONFIG; later files
    override earlier ones. Missing or unreadable files are skipped.

    Raises:
        ConfigError: If output.verbosity or output.format is not recognized
    """
    root = root.resolve()

    data: Dict[str, Any] = {}
    for p in config_paths(root):
        data = _deep_merge(data, _load_toml(p))

    storage_raw = _table(data, "storage")
    opener_raw = _table(data, "opener")
    output_raw = _table(data, "output")

    storage = StorageConfig(
        db_path=_resolve(root, storage_raw.get("db_path"), "kora.db"),
        storage_dir=_resolve(root, storage_raw.get("storage_dir"), "storage"),
    )

    argv = opener_raw.get("argv")
    if isinstance(argv, str):
        argv = argv.split()
    if isinstance(argv, list) and argv and all(isinstance(a, str) for a in argv):
        opener = OpenerConfig(argv=tuple(argv))
    else:
        opener = OpenerConfig(argv=default_opener())

    verbosity = str(output_raw.get("verbosity", "normal")).strip().lower()
    if verbosity not in VERBOSITY_LEVELS:
        raise ConfigError(
            f"Invalid output.verbosity: {verbosity!r}. "
            f"Must be one of: {', '.join(VERBOSITY_LEVELS)}."
        )
    format_type = str(output_raw.get("format", "text")).strip().lower()
    if format_type not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Invalid output.format: {format_type!r}. "
            f"Must be one of: {', '.join(OUTPUT_FORMATS)}."
        )

    return KoraConfig(
        root=root,
        storage=storage,
        opener=opener,
        output=OutputSettings(verbosity=verbosity, format=format_type),
    )


def write_default_config(root: Path, force: bool = False) -> Tuple[Path, bool]:
    """Write a starter .kora/kora.toml.

    Returns:
        The config path and whether it was written
    """
    path = root / ".kora" / "kora.toml"
    if path.exists() and not force:
        return path, False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    return path, True
