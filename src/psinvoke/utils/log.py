"""Logging helpers shared by every layer.

psinvoke never configures handlers itself except from the CLI; library
code only obtains module loggers and emits records.
"""

from __future__ import annotations

import logging

TRACE: int = 5
"""Below DEBUG; used for raw stdout/stderr payloads."""

logging.addLevelName(TRACE, "TRACE")


def verbosity_to_level(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level (0 → WARNING, 1 → DEBUG, 2+ → TRACE)."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.DEBUG
    return TRACE
