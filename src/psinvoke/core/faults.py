"""Transport fault classification.

Remote shell libraries surface almost no structured error information,
so faults are sorted into :class:`~psinvoke.exceptions.SecurityError` or
:class:`~psinvoke.exceptions.CommunicationError` by looking at the
fault's nested cause.  Every transport adapter and the client boundary
route raw faults through :func:`classify_fault`; swapping the heuristic
for a structured check only touches this module.
"""

from __future__ import annotations

from typing import NoReturn

from psinvoke.exceptions import CommunicationError, SecurityError

AUTHORIZATION_LOOP_SIGNAL: str = "Authorization loop detected"


def nested_cause(fault: BaseException) -> BaseException | None:
    """Return the exception *fault* wraps, one level deep.

    An explicit ``raise ... from`` cause wins; otherwise the implicit
    context is used unless it was suppressed with ``from None``.
    """
    if fault.__cause__ is not None:
        return fault.__cause__
    if fault.__suppress_context__:
        return None
    return fault.__context__


def classify_fault(message: str, fault: BaseException) -> NoReturn:
    """Re-raise *fault* as a domain error.  Never returns.

    Raises
    ------
    SecurityError
        When the fault's nested cause is an I/O error whose message
        reports an authorization loop.
    CommunicationError
        In every other case, with *message* prefixed to the fault text.
    """
    cause = nested_cause(fault)
    if isinstance(cause, OSError):
        cause_message = str(cause)
        if AUTHORIZATION_LOOP_SIGNAL in cause_message:
            raise SecurityError(
                cause_message,
                fault=fault,
                hint="Check the account's WinRM permissions and auth transport.",
            ) from fault
    raise CommunicationError(f"{message}: {fault}", fault=fault) from fault
