"""Module entrypoint for ``python -m triptrack``."""

from triptrack.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
