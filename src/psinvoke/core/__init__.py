"""Core / service layer — pure encoding, classification and orchestration.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from psinvoke.core.client import PowerShellClient
from psinvoke.core.encoded_command import decode_utf16_base64, encode_utf16_base64
from psinvoke.core.encoder import CommandEncoder
from psinvoke.core.faults import classify_fault
from psinvoke.core.models import ArgumentStyle, CommandResult, ConnectionSettings
from psinvoke.core.protocols import RemoteShellTransport
from psinvoke.core.quoting import quote_single

__all__: list[str] = [
    "ArgumentStyle",
    "CommandEncoder",
    "CommandResult",
    "ConnectionSettings",
    "PowerShellClient",
    "RemoteShellTransport",
    "classify_fault",
    "decode_utf16_base64",
    "encode_utf16_base64",
    "quote_single",
]
