"""Local data commands: show, export, import and share links."""

from __future__ import annotations

import argparse
import sys

from rich.console import Console
from rich.table import Table

from triptrack import AppData, city_progress, decode, decode_from_link, encode, export_to_file, import_from_file
from triptrack import overall_progress, share_link, strip_share_param
from triptrack.cli.common import confirm, format_progress, open_workspace


def build_progress_table(data: AppData) -> Table:
    table = Table(title="triptrack - visit progress")
    table.add_column("City")
    table.add_column("ID", style="dim")
    table.add_column("Visited", justify="right")
    for city in data.cities:
        visited, total = city_progress(city)
        table.add_row(city.name, city.id, format_progress(visited, total))
    visited, total = overall_progress(data)
    table.add_section()
    table.add_row("All cities", "", format_progress(visited, total))
    return table


def run_show(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    workspace = open_workspace(cli.load_config(args.config))
    Console().print(build_progress_table(workspace.data))
    return 0


def run_export(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    workspace = open_workspace(cli.load_config(args.config))
    if args.output == "-":
        print(encode(workspace.data))
        return 0
    path = export_to_file(workspace.data, args.output)
    print(f"Exported snapshot to {path}")
    return 0


def _offer_import(workspace_data: AppData, incoming: AppData, *, assume_yes: bool) -> bool:
    cities = len(incoming.cities)
    attractions = sum(len(city.attractions) for city in incoming.cities)
    question = f"Replace local data ({len(workspace_data.cities)} cities) with {cities} cities / {attractions} attractions?"
    return confirm(question, assume_yes=assume_yes)


def run_import(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    workspace = open_workspace(cli.load_config(args.config))
    incoming = decode(sys.stdin.read()) if args.path == "-" else import_from_file(args.path)

    workspace.propose_import(incoming)
    if not _offer_import(workspace.data, incoming, assume_yes=args.yes):
        workspace.cancel_import()
        print("Import cancelled; local data unchanged")
        return 0
    workspace.confirm_import()
    print(f"Imported {len(incoming.cities)} cities")
    return 0


def run_link(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    config = cli.load_config(args.config)
    workspace = open_workspace(config)
    print(share_link(workspace.data, args.base_url or config.share_base_url))
    return 0


def run_open_link(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    workspace = open_workspace(cli.load_config(args.config))
    incoming = decode_from_link(args.url)
    if incoming is None:
        print("error: link carries no shared data", file=sys.stderr)
        return 2

    workspace.propose_import(incoming)
    if not _offer_import(workspace.data, incoming, assume_yes=args.yes):
        workspace.cancel_import()
        print("Import cancelled; local data unchanged")
        return 0
    workspace.confirm_import()
    print(f"Imported {len(incoming.cities)} cities")
    print(f"Link without share data: {strip_share_param(args.url)}")
    return 0


__all__ = ["build_progress_table", "run_export", "run_import", "run_link", "run_open_link", "run_show"]
