"""Init command: write a starter config file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from triptrack import ConfigError, TripTrackConfig


def build_init_config(args: argparse.Namespace) -> TripTrackConfig:
    room_url = (args.room_url or "").strip() or None
    try:
        return TripTrackConfig(
            data_path=Path(args.data_path),
            room_store="http" if room_url else "memory",
            room_url=room_url,
        )
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc


def run_init(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    output = Path(args.output)
    if output.exists() and not args.force:
        print(f"error: {output} already exists (use --force to overwrite)", file=sys.stderr)
        return 2

    config = build_init_config(args)
    path = cli.write_config(config, output)
    print(f"Wrote {path}")
    if config.room_store == "memory":
        print("No --room-url given: room sync only works within a single process until one is configured")
    return 0


__all__ = ["build_init_config", "run_init"]
