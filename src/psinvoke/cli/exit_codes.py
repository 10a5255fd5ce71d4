"""Process exit codes returned by :func:`psinvoke.cli.app.main`.

Scripts that wrap ``psinvoke run`` can tell a failed remote command
(``GENERAL_ERROR``) from a psinvoke bug (``UNEXPECTED_ERROR``).
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command encoded, decoded or executed cleanly."""

GENERAL_ERROR: int = 1
"""A PsInvokeError was reported: bad input, transport fault or non-zero remote exit."""

UNEXPECTED_ERROR: int = 2
"""Anything else reached the error boundary."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
