"""Custom exception hierarchy for psinvoke.

All exceptions that cross layer boundaries must inherit from
:class:`PsInvokeError`.  Raw transport exceptions (e.g. from pywinrm or
``requests``) must NEVER propagate beyond the infrastructure layer or the
client boundary — they are reclassified by
:func:`~psinvoke.core.faults.classify_fault` and re-raised as one of the
types defined here.

Hierarchy
---------
PsInvokeError
├── SecurityError
├── CommunicationError
├── ExecutionError
├── ConfigurationError
├── PayloadDecodeError
└── EnvironmentError
"""

from __future__ import annotations


class PsInvokeError(Exception):
    """Base exception for all psinvoke errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Transport faults ------------------------------------------------------

class SecurityError(PsInvokeError):
    """Raised when a transport fault indicates a security-policy problem.

    Typically an authorization redirect loop or rejected credentials.
    Not a transient condition; callers should not retry automatically.
    """

    def __init__(
        self,
        message: str,
        *,
        fault: BaseException | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.fault: BaseException | None = fault
        """The originating transport fault, kept for diagnostics."""


class CommunicationError(PsInvokeError):
    """Raised for every other transport-level failure.

    Timeouts, connection resets, malformed responses.  Callers may retry
    at their discretion; psinvoke itself never does.
    """

    def __init__(
        self,
        message: str,
        *,
        fault: BaseException | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.fault: BaseException | None = fault
        """The originating transport fault, kept for diagnostics."""


# --- Remote execution ------------------------------------------------------

class ExecutionError(PsInvokeError):
    """Raised when a command ran but finished with a non-zero exit code."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int,
        std_out: str = "",
        std_err: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.exit_code: int = exit_code
        self.std_out: str = std_out
        self.std_err: str = std_err


# --- Configuration / environment -------------------------------------------

class ConfigurationError(PsInvokeError):
    """Raised when connection settings or an argument style are invalid."""


class PayloadDecodeError(PsInvokeError):
    """Raised when an encoded-command payload is not base64 UTF-16LE text."""


class EnvironmentError(PsInvokeError):
    """Raised when a required runtime dependency is not available."""
