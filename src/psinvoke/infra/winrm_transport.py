"""pywinrm backed implementation of :class:`~psinvoke.core.protocols.RemoteShellTransport`.

This module is the **only** place in the codebase that imports
``winrm``.  All pywinrm and ``requests`` exceptions are caught here and
re-raised as typed :class:`~psinvoke.exceptions.PsInvokeError`
subclasses — nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from types import TracebackType
from typing import Any

from psinvoke.core.faults import classify_fault
from psinvoke.core.models import CommandResult, ConnectionSettings
from psinvoke.exceptions import EnvironmentError, PsInvokeError, SecurityError

logger = logging.getLogger(__name__)


def _load_winrm() -> Any:
    """Return the ``winrm`` package or raise ``EnvironmentError``."""
    try:
        import winrm
        import winrm.exceptions
        import winrm.protocol
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "pywinrm is not installed. Install with: pip install pywinrm",
        ) from exc
    return winrm


class WinRmTransport:
    """Concrete :class:`RemoteShellTransport` backed by a pywinrm shell.

    Usage::

        settings = ConnectionSettings("https://host:5986/wsman", "admin", "s3cret")
        with WinRmTransport(settings) as transport:
            result = transport.run("ipconfig", ["/all"])

    One remote shell is opened per :meth:`connect` and reused for every
    :meth:`run` until :meth:`disconnect`.  :meth:`run` connects lazily.
    """

    def __init__(self, settings: ConnectionSettings) -> None:
        self._settings: ConnectionSettings = settings
        self._protocol: Any = None
        self._shell_id: str | None = None

    @property
    def connected(self) -> bool:
        return self._shell_id is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open the remote shell.  No-op when already connected."""
        if self.connected:
            return
        winrm = _load_winrm()
        settings = self._settings
        logger.debug(
            "Connecting to %s as %s (transport=%s)",
            settings.endpoint,
            settings.username,
            settings.transport,
        )
        with _fault_boundary(winrm, f"Error connecting to {settings.endpoint}"):
            self._protocol = winrm.protocol.Protocol(
                endpoint=settings.endpoint,
                transport=settings.transport,
                username=settings.username,
                password=settings.password,
                server_cert_validation=settings.server_cert_validation,
                operation_timeout_sec=settings.operation_timeout_sec,
                read_timeout_sec=settings.read_timeout_sec,
            )
            self._shell_id = self._protocol.open_shell()

    def disconnect(self) -> None:
        """Close the remote shell.  No-op when not connected."""
        if not self.connected:
            return
        winrm = _load_winrm()
        shell_id, self._shell_id = self._shell_id, None
        message = f"Error disconnecting from {self._settings.endpoint}"
        with _fault_boundary(winrm, message):
            self._protocol.close_shell(shell_id)
        logger.debug("Disconnected from %s", self._settings.endpoint)

    def __enter__(self) -> WinRmTransport:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.disconnect()
            return
        # Keep the in-flight error; a close failure is only logged.
        try:
            self.disconnect()
        except PsInvokeError as close_exc:
            logger.warning("Ignoring shell close failure: %s", close_exc)

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def run(self, command: str, arguments: Sequence[str]) -> CommandResult:
        """Execute *command* with *arguments* in the remote shell.

        Raises
        ------
        SecurityError
            When credentials are rejected or authorization loops.
        CommunicationError
            For all other pywinrm / HTTP failures.
        """
        self.connect()
        winrm = _load_winrm()
        protocol = self._protocol
        with _fault_boundary(winrm, f"Error executing command {command}"):
            command_id = protocol.run_command(self._shell_id, command, list(arguments))
            try:
                std_out, std_err, status_code = protocol.get_command_output(
                    self._shell_id, command_id,
                )
            except Exception:
                self._cleanup_after_failure(command_id)
                raise
            protocol.cleanup_command(self._shell_id, command_id)

        return CommandResult(
            status_code=int(status_code),
            std_out=_decode(std_out),
            std_err=_decode(std_err),
        )

    def _cleanup_after_failure(self, command_id: str) -> None:
        """Release *command_id* while another error is propagating."""
        try:
            self._protocol.cleanup_command(self._shell_id, command_id)
        except Exception as exc:
            logger.warning("Ignoring cleanup failure for command %s: %s", command_id, exc)


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------

@contextmanager
def _fault_boundary(winrm: Any, message: str) -> Iterator[None]:
    """Translate pywinrm and HTTP faults raised in the block into domain errors."""
    try:
        yield
    except PsInvokeError:
        raise
    except winrm.exceptions.AuthenticationError as exc:
        raise SecurityError(
            f"{message}: {exc}",
            fault=exc,
            hint="Check the username, password and auth transport.",
        ) from exc
    except Exception as exc:
        classify_fault(message, exc)


def _decode(raw: bytes | str) -> str:
    if isinstance(raw, str):
        return raw
    return raw.decode("utf-8", errors="replace")
