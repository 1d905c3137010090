"""Argument parsing helpers for the echolingo CLI."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence


def _add_shared_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument(
        "--config",
        default=None,
        help=(
            "Path to a configuration override JSON file (defaults to conf/config.local.json "
            "if present)."
        ),
    )
    parser.add_argument(
        "--storage-backend",
        choices=["auto", "sqlite", "remote", "memory"],
        help="Override the configured storage backend.",
    )
    parser.add_argument("--sqlite-path", help="Override the SQLite database file path.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output.")
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echolingo",
        description="Maintenance commands for the echolingo dictionary service.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser(
        "import",
        help="Look up every word in a list file and upsert the results.",
    )
    import_parser.add_argument("word_file", help="Text file with one word per line.")
    import_parser.add_argument(
        "--truncate",
        action="store_true",
        help="Delete all saved words before importing.",
    )
    _add_shared_arguments(import_parser)

    init_parser = subparsers.add_parser(
        "init-db",
        help="Create the database tables and add any missing columns.",
    )
    _add_shared_arguments(init_parser)
    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


__all__ = ["build_parser", "parse_cli_args"]
