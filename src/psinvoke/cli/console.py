"""CLI console helpers with optional Rich support.

Diagnostics go to stderr through Rich when it is installed; command
results (encoded invocations, remote stdout) go to stdout verbatim so
they can be piped.  Rich is never imported at module level, keeping
``--help`` and ``--version`` functional without it.
"""

from __future__ import annotations

import sys
from typing import Any

from psinvoke.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(*objects, file=sys.stderr)
            return
        rich_console.print(*objects)

    def out(self, text: str) -> None:
        """Write *text* plus a newline to stdout without any markup handling."""
        sys.stdout.write(text + "\n")


console = _ConsoleProxy()
