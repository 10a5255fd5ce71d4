"""Infrastructure layer — external system integration.

This layer wraps all interaction with pywinrm and local processes.
Every raw third-party exception must be caught here and re-raised as a
:class:`~psinvoke.exceptions.PsInvokeError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from psinvoke.infra.local_transport import LocalTransport
from psinvoke.infra.winrm_transport import WinRmTransport

__all__: list[str] = [
    "LocalTransport",
    "WinRmTransport",
]
