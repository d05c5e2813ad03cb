"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("triptrack")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./triptrack.json", help="Path to triptrack.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="triptrack")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Generate a triptrack.json config file")
    init_parser.add_argument(
        "--output",
        "-o",
        default="triptrack.json",
        help="Output file path (default: triptrack.json)",
    )
    init_parser.add_argument("--room-url", default=None, help="Base URL of the room service")
    init_parser.add_argument("--data-path", default="triptrack-state.json", help="Local state file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing config file")

    show_parser = subparsers.add_parser("show", help="Show cities and visit progress")
    _add_common(show_parser)

    export_parser = subparsers.add_parser("export", help="Export the travel data snapshot")
    _add_common(export_parser)
    export_parser.add_argument(
        "--output",
        "-o",
        default=".",
        help="Directory for trip-data-<date>.json, or '-' to print the snapshot",
    )

    import_parser = subparsers.add_parser("import", help="Import a snapshot file ('-' reads pasted text)")
    _add_common(import_parser)
    import_parser.add_argument("path", help="Snapshot file, or '-' for standard input")
    import_parser.add_argument("--yes", "-y", action="store_true", help="Replace local data without asking")

    link_parser = subparsers.add_parser("link", help="Print a share link carrying the snapshot")
    _add_common(link_parser)
    link_parser.add_argument("--base-url", default=None, help="Override share_base_url from config")

    open_link_parser = subparsers.add_parser("open-link", help="Import the snapshot carried by a share link")
    _add_common(open_link_parser)
    open_link_parser.add_argument("url", help="Share link or its query string")
    open_link_parser.add_argument("--yes", "-y", action="store_true", help="Replace local data without asking")

    sync_parser = subparsers.add_parser("sync", help="Room sync operations")
    sync_subparsers = sync_parser.add_subparsers(dest="sync_command", required=True)

    create_parser = sync_subparsers.add_parser("create", help="Create a new room and join it")
    _add_common(create_parser)

    connect_parser = sync_subparsers.add_parser("connect", help="Join an existing room")
    _add_common(connect_parser)
    connect_parser.add_argument("room", help="Room ID shared by the other participant")
    connect_parser.add_argument("--adopt", action="store_true", help="Adopt the room snapshot without asking")

    for name, help_text in (
        ("push", "Overwrite the room snapshot with local data"),
        ("request", "Propose local data to the other participant"),
        ("accept", "Accept the incoming proposal, replacing local data"),
        ("reject", "Reject (or withdraw) the pending proposal"),
        ("status", "Show room and request state"),
        ("disconnect", "Forget the room on this device"),
    ):
        _add_common(sync_subparsers.add_parser(name, help=help_text))

    return parser


__all__ = ["build_parser"]
