"""Shared CLI helpers."""

from __future__ import annotations

import questionary

from triptrack import JsonFileStore, TripTrackConfig, TripWorkspace


def open_workspace(config: TripTrackConfig) -> TripWorkspace:
    workspace = TripWorkspace(JsonFileStore(config.data_path))
    workspace.load()
    return workspace


def confirm(question: str, *, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    return bool(questionary.confirm(question, default=False).ask())


def format_progress(visited: int, total: int) -> str:
    percent = (visited / total * 100) if total else 0.0
    return f"{visited}/{total} ({percent:.0f}%)"
