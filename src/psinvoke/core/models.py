"""Domain models for psinvoke.

Value objects only: the closed :class:`ArgumentStyle` enumeration, the
result of a remote command, and the connection settings consumed by the
WinRM transport.  They carry zero I/O and no dependency on external
packages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from psinvoke.exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Argument style
# ---------------------------------------------------------------------------

class ArgumentStyle(Enum):
    """Convention used to hand named arguments to the target command.

    The member value is the parameter prefix emitted in front of each
    argument name.
    """

    PARAMETERS_DASH = "-"
    """``Get-Thing -Name X`` — PowerShell flag style (the default)."""

    PARAMETERS_SLASH = "/"
    """``net.exe /Name X`` — cmd.exe switch style."""

    VARIABLES = "$"
    """``$Name = 'X'; Get-Thing`` — pre-assigned script variables."""

    @property
    def prefix(self) -> str:
        return self.value

    @property
    def assigns_variables(self) -> bool:
        """``True`` when arguments become variable assignments, not flags."""
        return self is ArgumentStyle.VARIABLES

    @classmethod
    def from_name(cls, name: str) -> ArgumentStyle:
        """Parse a style from its member name or a short alias.

        Accepted (case-insensitive): ``dash``, ``slash``, ``variables``
        and the full member names.

        Raises
        ------
        ConfigurationError
            For any other value.
        """
        normalized = name.strip().upper().replace("-", "_")
        aliases = {
            "DASH": cls.PARAMETERS_DASH,
            "SLASH": cls.PARAMETERS_SLASH,
            "VARS": cls.VARIABLES,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls[normalized]
        except KeyError:
            choices = ", ".join(("dash", "slash", "variables"))
            raise ConfigurationError(
                f"Unknown argument style: {name!r}",
                hint=f"Choose one of: {choices}",
            ) from None


DEFAULT_ARGUMENT_STYLE: ArgumentStyle = ArgumentStyle.PARAMETERS_DASH


# ---------------------------------------------------------------------------
# Command result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one command run by a transport."""

    status_code: int
    """Process exit code reported by the remote shell."""

    std_out: str
    """Decoded standard output."""

    std_err: str
    """Decoded standard error."""

    @property
    def ok(self) -> bool:
        return self.status_code == 0


# ---------------------------------------------------------------------------
# Connection settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    """Everything the WinRM transport needs to open a remote shell.

    Timeouts follow the WS-Management rule that the HTTP read timeout
    must exceed the operation timeout.
    """

    endpoint: str
    """WS-Management URL, e.g. ``https://host:5986/wsman``."""

    username: str
    password: str = ""
    transport: str = "ntlm"
    """pywinrm auth transport: ``ntlm``, ``kerberos``, ``basic``, ``credssp``…"""

    server_cert_validation: str = "validate"
    """``validate`` or ``ignore``."""

    operation_timeout_sec: int = 20
    read_timeout_sec: int = 30

    def __post_init__(self) -> None:
        if not self.endpoint.strip():
            raise ConfigurationError("WinRM endpoint must not be empty.")
        if self.server_cert_validation not in ("validate", "ignore"):
            raise ConfigurationError(
                f"Invalid server_cert_validation: {self.server_cert_validation!r}",
                hint="Use 'validate' or 'ignore'.",
            )
        if self.read_timeout_sec <= self.operation_timeout_sec:
            raise ConfigurationError(
                "read_timeout_sec must exceed operation_timeout_sec.",
                hint=(
                    f"Got read={self.read_timeout_sec}s, "
                    f"operation={self.operation_timeout_sec}s."
                ),
            )

    def __repr__(self) -> str:
        return (
            f"ConnectionSettings(endpoint={self.endpoint!r}, "
            f"username={self.username!r}, transport={self.transport!r})"
        )
