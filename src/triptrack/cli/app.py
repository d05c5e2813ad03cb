"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from triptrack import ConfigError, FormatError, NotFoundError, RemoteError, SyncError, ValidationError


def main(argv: list[str] | None = None) -> int:
    import triptrack.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "init":
            return cli._run_init(args)
        if args.command == "show":
            return cli._run_show(args)
        if args.command == "export":
            return cli._run_export(args)
        if args.command == "import":
            return cli._run_import(args)
        if args.command == "link":
            return cli._run_link(args)
        if args.command == "open-link":
            return cli._run_open_link(args)
        if args.command == "sync":
            return cli.asyncio.run(cli._run_sync(args))
        print(f"error: unsupported command: {args.command}", file=sys.stderr)
        return 2
    except (ConfigError, FormatError, ValidationError, NotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except RemoteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except SyncError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
