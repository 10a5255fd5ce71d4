"""Core execution client — encodes a command and runs it on a transport.

The client owns a :class:`~psinvoke.core.encoder.CommandEncoder` and
depends on a :class:`~psinvoke.core.protocols.RemoteShellTransport`
injected at construction time, keeping the core free of any pywinrm or
subprocess imports.

Guarantees
----------
* Only :class:`~psinvoke.exceptions.PsInvokeError` subclasses escape.
* Raw transport faults are reclassified by
  :func:`~psinvoke.core.faults.classify_fault`.
* A non-zero exit code raises :class:`~psinvoke.exceptions.ExecutionError`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from psinvoke.core.encoder import Arguments, CommandEncoder
from psinvoke.core.faults import classify_fault
from psinvoke.core.models import ArgumentStyle, CommandResult
from psinvoke.core.protocols import ExecutionHook, RemoteShellTransport
from psinvoke.exceptions import ExecutionError, PsInvokeError
from psinvoke.utils.log import TRACE

logger = logging.getLogger(__name__)


class PowerShellClient:
    """Runs plain or PowerShell-encoded commands through a transport.

    Parameters
    ----------
    transport:
        Any object satisfying the :class:`RemoteShellTransport` protocol.
    argument_style:
        Initial argument style; ``None`` means flag style with ``-``.
    on_execution:
        Optional hook called as ``on_execution(command_line, elapsed_ms)``
        after every transport call, whether it succeeded or not.  Exceptions
        raised by the hook are logged and discarded.
    """

    def __init__(
        self,
        transport: RemoteShellTransport,
        *,
        argument_style: ArgumentStyle | None = None,
        on_execution: ExecutionHook | None = None,
    ) -> None:
        self._transport: RemoteShellTransport = transport
        self._encoder = CommandEncoder(argument_style)
        self._on_execution: ExecutionHook | None = on_execution

    @property
    def encoder(self) -> CommandEncoder:
        return self._encoder

    @property
    def argument_style(self) -> ArgumentStyle | None:
        return self._encoder.argument_style

    @argument_style.setter
    def argument_style(self, style: ArgumentStyle | None) -> None:
        self._encoder.argument_style = style

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run_command(self, command: str, arguments: Arguments | None = None) -> str:
        """Run *command* directly, passing *arguments* as flag tokens.

        Returns
        -------
        str
            The command's standard output.

        Raises
        ------
        ExecutionError
            When the command exits with a non-zero code.
        SecurityError, CommunicationError
            When the transport fails.
        """
        tokens = self._encoder.encode_to_list(command, arguments)
        return self._execute(tokens)

    def run_powershell_command(
        self,
        command: str,
        arguments: Arguments | None = None,
    ) -> str:
        """Run *command* as a ``powershell -EncodedCommand`` script.

        The script is composed according to the configured argument
        style.  Pass an empty mapping to send a script without
        arguments; ``None`` starts bare ``powershell``.
        """
        if arguments is not None:
            script = self._encoder.encode_to_string(command, arguments)
            self._log_data("PowerShell script:", script)
        tokens = self._encoder.to_encoded_command_list(command, arguments)
        return self._execute(tokens)

    # ------------------------------------------------------------------
    # Transport delegation (safe boundary)
    # ------------------------------------------------------------------

    def _execute(self, tokens: Sequence[str]) -> str:
        command_line = " ".join(tokens)
        started = time.perf_counter()
        try:
            result = self._transport.run(tokens[0], list(tokens[1:]))
        except PsInvokeError:
            # Already classified.
            raise
        except Exception as exc:
            classify_fault(f"Error executing command {tokens[0]}", exc)
        finally:
            self._log_execution(command_line, started)

        self._log_data("stdout:", result.std_out)
        self._log_data("stderr:", result.std_err)
        self._check_status(tokens[0], result)
        return result.std_out

    @staticmethod
    def _check_status(command: str, result: CommandResult) -> None:
        if result.ok:
            return
        first_err_line = next(
            (line.strip() for line in result.std_err.splitlines() if line.strip()),
            None,
        )
        raise ExecutionError(
            f"Command {command} exited with code {result.status_code}",
            exit_code=result.status_code,
            std_out=result.std_out,
            std_err=result.std_err,
            hint=first_err_line,
        )

    # ------------------------------------------------------------------
    # Execution logging
    # ------------------------------------------------------------------

    @staticmethod
    def _log_data(prefix: str, data: str | None) -> None:
        if logger.isEnabledFor(TRACE) and data:
            logger.log(TRACE, "%s %s", prefix, data)

    def _log_execution(self, command_line: str, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.debug("Command %s run time: %.0f ms", command_line, elapsed_ms)
        if self._on_execution is None:
            return
        try:
            self._on_execution(command_line, elapsed_ms)
        except Exception:
            # The hook must not replace the command's result or its error.
            logger.exception("Execution hook failed for %s", command_line)
