from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .app import KoraApp, record_for_item
from .config import KoraConfig, load_config, write_default_config
from .errors import KoraError
from .logging_config import setup_logging
from .matching import count_matches, filter_records
from .output import (
    OutputConfig,
    get_output_config,
    print_json_output,
    print_output,
    set_output_config,
)
from .session import MAX_RESULTS
from .store import Store

logger = logging.getLogger(__name__)


class _KoraArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        self.exit(2, f"Error: {message}\n")


def _root(args: argparse.Namespace) -> Path:
    return Path(args.root or ".").resolve()


def _positive_limit(value: str) -> int:
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid limit: {value!r}")
    if limit < 1:
        raise argparse.ArgumentTypeError("limit must be >= 1")
    return min(limit, MAX_RESULTS)


# -------------------------
# Commands
# -------------------------


def cmd_menu(args: argparse.Namespace, cfg: KoraConfig) -> int:
    with Store.open(cfg.storage.db_path) as store:
        KoraApp(store, cfg).run()
    return 0


def cmd_search(args: argparse.Namespace, cfg: KoraConfig) -> int:
    term = args.term or ""
    with Store.open(cfg.storage.db_path) as store:
        snapshot = [record_for_item(item) for item in store.list_items()]

    visible = filter_records(snapshot, term, args.limit)
    total = count_matches(snapshot, term)
    logger.debug("Search %r: %d of %d matches shown", term, len(visible), total)

    if get_output_config().format == "json":
        print_json_output(
            {
                "filter": term,
                "total": total,
                "items": [
                    {
                        "position": index,
                        "id": record.payload.id,
                        "name": record.payload.name,
                        "created_at": record.payload.created_at,
                        "tags": record.payload.tags,
                        "path": record.payload.path,
                    }
                    for index, record in enumerate(visible, 1)
                ],
            }
        )
        return 0

    if not visible:
        print_output(f"No items match '{term}'." if term else "No items yet.", level="quiet")
        return 0

    header = f"Filtered Items (filter: '{term}')" if term else "Recent Items"
    print_output(f"{header}:", level="normal")
    for index, record in enumerate(visible, 1):
        print_output(f"{index}. {record.label}", level="quiet")
    if total > len(visible):
        print_output(f"({total - len(visible)} more not shown)", level="verbose")
    return 0


def cmd_init(args: argparse.Namespace, cfg: KoraConfig) -> int:
    path, written = write_default_config(cfg.root, force=args.force)
    if written:
        print_output(f"Wrote {path}", level="normal")
    else:
        print_output(f"{path} already exists (use --force to overwrite)", level="normal")

    # Re-read so a freshly written config takes effect
    cfg = load_config(cfg.root)
    cfg.storage.storage_dir.mkdir(parents=True, exist_ok=True)
    with Store.open(cfg.storage.db_path):
        pass
    print_output(f"Database: {cfg.storage.db_path}", level="normal")
    print_output(f"Storage: {cfg.storage.storage_dir}", level="normal")
    return 0


# -------------------------
# Parser
# -------------------------


def build_parser() -> argparse.ArgumentParser:
    p = _KoraArgumentParser(
        prog="kora",
        description="kora: file archive with diacritic-insensitive search",
    )
    p.add_argument("--version", action="version", version=f"kora {__version__}")
    p.add_argument("--root", default=None, help="Archive root directory (default: cwd)")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show errors")
    p.add_argument("--log-file", type=Path, default=None, help="Write debug logs to a file")

    sub = p.add_subparsers(dest="cmd")

    p_menu = sub.add_parser("menu", help="Interactive menu (default)")
    p_menu.set_defaults(func=cmd_menu)

    p_search = sub.add_parser("search", help="Print items matching a search term")
    p_search.add_argument("term", nargs="?", default="", help="Search term (default: recent items)")
    p_search.add_argument(
        "--format",
        choices=["text", "json"],
        default=None,
        help="Output format (default: from config)",
    )
    p_search.add_argument(
        "--limit",
        type=_positive_limit,
        default=MAX_RESULTS,
        help=f"Maximum items to show (at most {MAX_RESULTS})",
    )
    p_search.set_defaults(func=cmd_search)

    p_init = sub.add_parser("init", help="Create the database, storage folder and config")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing config")
    p_init.set_defaults(func=cmd_init)

    p.set_defaults(func=cmd_menu)
    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(_root(args))

        verbosity = cfg.output.verbosity
        if args.verbose:
            verbosity = "verbose"
        elif args.quiet:
            verbosity = "quiet"
        set_output_config(
            OutputConfig(
                verbosity=verbosity,
                format=getattr(args, "format", None) or cfg.output.format,
            )
        )
        setup_logging(
            verbose=verbosity == "verbose",
            quiet=verbosity == "quiet",
            log_file=args.log_file,
        )

        logger.debug("kora v%s starting", __version__)
        logger.debug("Command: %s", args.cmd or "menu")

        return int(args.func(args, cfg))
    except KoraError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        print_output("\nInterrupted.", level="error")
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
