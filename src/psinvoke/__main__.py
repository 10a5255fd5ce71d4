"""Entry point for ``python -m psinvoke``; same behavior as the console script."""

from __future__ import annotations

from psinvoke.cli.app import cli

if __name__ == "__main__":
    cli()
