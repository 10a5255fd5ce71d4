"""Local process implementation of :class:`~psinvoke.core.protocols.RemoteShellTransport`.

Runs the token list on this machine with :func:`subprocess.run` — no
intermediate shell, so arguments are passed exactly as encoded.  Useful
on Windows hosts that run PowerShell locally, and for dry runs against
``pwsh`` elsewhere.

Rules
-----
* ``shell=True`` is never used.
* Process-level failures go through
  :func:`~psinvoke.core.faults.classify_fault`.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from psinvoke.core.faults import classify_fault
from psinvoke.core.models import CommandResult

logger = logging.getLogger(__name__)


class LocalTransport:
    """Concrete :class:`RemoteShellTransport` backed by local subprocesses.

    Parameters
    ----------
    timeout_sec:
        Optional wall-clock limit per command.  ``None`` waits forever.
    """

    def __init__(self, timeout_sec: float | None = None) -> None:
        self._timeout_sec: float | None = timeout_sec

    def run(self, command: str, arguments: Sequence[str]) -> CommandResult:
        """Run *command* locally with *arguments*.

        Raises
        ------
        CommunicationError
            When the process cannot be started or times out.
        """
        argv = [command, *arguments]
        logger.debug("Starting local process %s", command)
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout_sec,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            classify_fault(f"Error executing command {command}", exc)

        return CommandResult(
            status_code=completed.returncode,
            std_out=completed.stdout or "",
            std_err=completed.stderr or "",
        )
