"""CLI entry point for esmapper."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from esmapper.exceptions import EsMapperError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esmapper",
        description="esmapper — typed document access for Elasticsearch",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--host",
        action="append",
        default=None,
        help="Elasticsearch node URL (repeatable, overrides config)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"esmapper {_get_version()}",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("health", help="Ping the cluster")
    for name, help_text in (
        ("exists", "Check whether a document exists"),
        ("get", "Print a document's source as JSON"),
        ("delete", "Delete a document"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("index", help="Index name")
        sub.add_argument("id", help="Document ID")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = _build_parser().parse_args(argv)

    from esmapper.config.settings import Settings

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            return 1
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    # Apply CLI overrides
    if args.host:
        settings.elasticsearch.hosts = args.host
    if args.log_level:
        settings.observability.log_level = args.log_level

    from esmapper.observability.logging import setup_logging

    setup_logging(settings.observability)

    try:
        return _run(args, settings)
    except EsMapperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _run(args: argparse.Namespace, settings: object) -> int:
    from esmapper.client.connection import create_client
    from esmapper.health.checker import HealthChecker
    from esmapper.operations import documents

    client = create_client(settings.elasticsearch)  # type: ignore[attr-defined]
    try:
        if args.command == "health":
            checker = HealthChecker(client)
            print(json.dumps(checker.check()))
            return 0

        if args.command == "exists":
            found = documents.exists(client, args.index, args.id)
            print("true" if found else "false")
            return 0 if found else 1

        if args.command == "get":
            source: dict = {}
            if not documents.find_one_by_id_and_decode(client, args.index, args.id, source):
                print(f"Document '{args.id}' not found in '{args.index}'.", file=sys.stderr)
                return 1
            print(json.dumps(source, indent=2, ensure_ascii=False, default=str))
            return 0

        acknowledged = documents.delete_one(client, args.index, args.id, refresh=settings.write.refresh)  # type: ignore[attr-defined]
        print(f"Deleted '{args.id}' from '{args.index}' ({acknowledged} shard copies acknowledged).")
        return 0
    finally:
        client.close()


def _get_version() -> str:
    """Get the package version."""
    try:
        from esmapper import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    sys.exit(main())
