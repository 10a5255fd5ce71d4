"""Command encoder — turns a command plus named arguments into an invocation.

Three shapes are produced:

* a single command line (``Get-Thing -Name X -Verbose``),
* an argv-style token list (``["Get-Thing", "-Name", "X", "-Verbose"]``),
* a ``powershell -EncodedCommand <base64>`` invocation wrapping either
  of the script forms above.

With :attr:`ArgumentStyle.VARIABLES` the script form becomes a sequence
of variable assignments followed by the bare command
(``$Name = 'X'; Get-Thing``).

Guarantees
----------
* Pure and deterministic — no I/O, no logging.
* Arguments are emitted in the mapping's iteration order.
* ``arguments=None`` always means "emit the command verbatim", which is
  distinct from an empty mapping.
"""

from __future__ import annotations

from collections.abc import Mapping

from psinvoke.core.encoded_command import (
    ENCODED_COMMAND_PARAM,
    POWERSHELL_COMMAND,
    encode_utf16_base64,
)
from psinvoke.core.models import DEFAULT_ARGUMENT_STYLE, ArgumentStyle
from psinvoke.core.quoting import quote_single

Arguments = Mapping[str, object]


class CommandEncoder:
    """Encodes commands according to a configurable :class:`ArgumentStyle`.

    Parameters
    ----------
    argument_style:
        The style to apply.  ``None`` behaves like
        :attr:`ArgumentStyle.PARAMETERS_DASH`.  The attribute may be
        reassigned at any time; it is read afresh on every call.
    """

    def __init__(self, argument_style: ArgumentStyle | None = None) -> None:
        self.argument_style: ArgumentStyle | None = argument_style

    @property
    def param_prefix(self) -> str:
        """Prefix placed before each argument name for the current style."""
        if self.argument_style is None:
            return DEFAULT_ARGUMENT_STYLE.prefix
        return self.argument_style.prefix

    # ------------------------------------------------------------------
    # Plain command forms
    # ------------------------------------------------------------------

    def encode_to_string(self, command: str, arguments: Arguments | None) -> str:
        """Return the full command line for *command* and *arguments*.

        Flag-style values are appended raw, without quoting; callers must
        pass values that are already safe for the target shell.
        """
        if arguments is None:
            return command
        if self.argument_style is not None and self.argument_style.assigns_variables:
            return self.encode_variables_and_command(command, arguments)

        prefix = self.param_prefix
        parts = [command]
        for name, value in arguments.items():
            parts.append(" ")
            parts.append(prefix + name)
            if value is not None:
                parts.append(" ")
                parts.append(str(value))
        return "".join(parts)

    def encode_to_list(self, command: str, arguments: Arguments | None) -> list[str]:
        """Return *command* and *arguments* as an argv-style token list.

        Always emits flag-style tokens, whatever the configured style;
        only the prefix follows the style.
        """
        tokens = [command]
        if arguments is None:
            return tokens
        prefix = self.param_prefix
        for name, value in arguments.items():
            tokens.append(prefix + name)
            if value is not None:
                tokens.append(str(value))
        return tokens

    def encode_variables_and_command(
        self,
        command: str,
        arguments: Arguments | None,
    ) -> str:
        """Return a script assigning each argument to a variable, then *command*.

        Values are single-quoted; argument names are emitted as-is and
        must already be valid PowerShell identifiers.
        """
        if arguments is None:
            return command
        prefix = self.param_prefix
        statements = [
            f"{prefix}{name} = {quote_single(value)}; "
            for name, value in arguments.items()
        ]
        return "".join(statements) + command

    # ------------------------------------------------------------------
    # Encoded PowerShell forms
    # ------------------------------------------------------------------

    def to_encoded_command_string(
        self,
        command: str,
        arguments: Arguments | None,
    ) -> str:
        """Return ``powershell -EncodedCommand <base64>`` for the composed script."""
        script = self.encode_to_string(command, arguments)
        return " ".join(
            (POWERSHELL_COMMAND, ENCODED_COMMAND_PARAM, encode_utf16_base64(script)),
        )

    def to_encoded_command_list(
        self,
        command: str,
        arguments: Arguments | None,
    ) -> list[str]:
        """Token-list variant of :meth:`to_encoded_command_string`.

        With ``arguments=None`` only the interpreter name is returned and
        *command* is not sent at all.
        """
        tokens = [POWERSHELL_COMMAND]
        if arguments is None:
            return tokens
        script = self.encode_to_string(command, arguments)
        tokens.append(ENCODED_COMMAND_PARAM)
        tokens.append(encode_utf16_base64(script))
        return tokens
