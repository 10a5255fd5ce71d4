"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends only on these protocols, never on concrete
transports.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from psinvoke.core.models import CommandResult


class RemoteShellTransport(Protocol):
    """Contract for command execution backends.

    Any object that implements :meth:`run` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def run(self, command: str, arguments: Sequence[str]) -> CommandResult:
        """Run *command* with the already-tokenized *arguments*.

        Implementations must not re-quote or re-tokenize the arguments,
        and should map backend-specific faults through
        :func:`~psinvoke.core.faults.classify_fault`.

        Raises
        ------
        SecurityError
            When the backend reports a security-policy failure.
        CommunicationError
            For any other transport-level failure.
        """
        ...  # pragma: no cover


ExecutionHook = Callable[[str, float], None]
"""Observer called as ``hook(command_line, elapsed_ms)`` after each run."""
