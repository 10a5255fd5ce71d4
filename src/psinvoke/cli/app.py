"""Argument parsing and sub-command dispatch for the ``psinvoke`` script.

:func:`cli` is where every error ends up.  A
:class:`~psinvoke.exceptions.PsInvokeError` is printed with its hint and
exits 1; Ctrl+C exits 130; anything else is reported as a bug and exits 2.

Handlers only wire arguments to the core and infra layers.  Results go
to stdout untouched so they can be piped; diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import os
import sys

from psinvoke.cli import exit_codes
from psinvoke.cli.console import console
from psinvoke.core.client import PowerShellClient
from psinvoke.core.encoded_command import decode_utf16_base64
from psinvoke.core.encoder import Arguments, CommandEncoder
from psinvoke.core.models import ArgumentStyle, ConnectionSettings
from psinvoke.exceptions import ConfigurationError, PsInvokeError
from psinvoke.infra.local_transport import LocalTransport
from psinvoke.infra.winrm_transport import WinRmTransport
from psinvoke.version import __version__

PASSWORD_ENV_VAR = "PSINVOKE_PASSWORD"

_FORMS = ("string", "list", "encoded", "encoded-list")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _parse_assignment(raw: str) -> tuple[str, str]:
    """``NAME=VALUE`` → ``(NAME, VALUE)``; the value may contain ``=``."""
    name, sep, value = raw.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {raw!r}")
    return _parse_flag(name), value


def _parse_flag(raw: str) -> str:
    name = raw.strip()
    if not name or any(ch.isspace() for ch in name):
        raise argparse.ArgumentTypeError(f"invalid argument name: {raw!r}")
    return name


def _parse_bare_flag(raw: str) -> tuple[str, None]:
    return _parse_flag(raw), None


def _add_command_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by ``encode`` and ``run`` describing the command."""
    parser.add_argument("command", help="Command or cmdlet name, e.g. Get-Service.")
    parser.add_argument(
        "-a",
        "--arg",
        dest="arguments",
        action="append",
        type=_parse_assignment,
        metavar="NAME=VALUE",
        help="Named argument with a value (repeatable, order is kept).",
    )
    parser.add_argument(
        "-f",
        "--flag",
        dest="arguments",
        action="append",
        type=_parse_bare_flag,
        metavar="NAME",
        help="Named argument without a value, e.g. -f Verbose.",
    )
    parser.add_argument(
        "--empty-args",
        action="store_true",
        help="Treat the command as having an empty argument set rather than none.",
    )
    parser.add_argument(
        "-s",
        "--style",
        default=None,
        help="Argument style: dash (default), slash or variables.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``psinvoke encode COMMAND ...``  — print the encoded invocation
    * ``psinvoke decode PAYLOAD``      — decode an -EncodedCommand payload
    * ``psinvoke run COMMAND ...``     — execute over WinRM (or locally)
    * ``psinvoke doctor``              — environment diagnostics
    """
    parser = argparse.ArgumentParser(
        prog="psinvoke",
        description="Encode and run PowerShell commands over WinRM.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv also traces command output).",
    )
    subparsers = parser.add_subparsers(dest="subcommand", metavar="COMMAND")

    encode = subparsers.add_parser("encode", help="Print the encoded invocation.")
    _add_command_arguments(encode)
    encode.add_argument(
        "--form",
        choices=_FORMS,
        default="string",
        help="Output shape; list forms print one token per line.",
    )

    decode = subparsers.add_parser("decode", help="Decode an -EncodedCommand payload.")
    decode.add_argument("payload", help="Base64 UTF-16LE payload.")

    run = subparsers.add_parser("run", help="Execute a command and print its output.")
    _add_command_arguments(run)
    run.add_argument("--endpoint", help="WinRM URL, e.g. https://host:5986/wsman.")
    run.add_argument("-u", "--user", default="", help="Account name.")
    run.add_argument(
        "-p",
        "--password",
        default=None,
        help=f"Account password (default: ${PASSWORD_ENV_VAR}).",
    )
    run.add_argument(
        "--auth",
        default="ntlm",
        help="pywinrm transport: ntlm, kerberos, basic, credssp, ssl.",
    )
    run.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate validation.",
    )
    run.add_argument("--operation-timeout", type=int, default=20, metavar="SEC")
    run.add_argument("--read-timeout", type=int, default=30, metavar="SEC")
    run.add_argument(
        "--powershell",
        action="store_true",
        help="Send the command as a powershell -EncodedCommand script.",
    )
    run.add_argument(
        "--local",
        action="store_true",
        help="Run on this machine instead of over WinRM.",
    )

    subparsers.add_parser("doctor", help="Check the runtime environment.")
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _command_arguments(args: argparse.Namespace) -> dict[str, object] | None:
    if args.arguments:
        return dict(args.arguments)
    if args.empty_args:
        return {}
    return None


def _argument_style(args: argparse.Namespace) -> ArgumentStyle | None:
    if args.style is None:
        return None
    return ArgumentStyle.from_name(args.style)


def _handle_encode(args: argparse.Namespace) -> int:
    encoder = CommandEncoder(_argument_style(args))
    arguments = _command_arguments(args)

    if args.form == "string":
        console.out(encoder.encode_to_string(args.command, arguments))
    elif args.form == "list":
        console.out("\n".join(encoder.encode_to_list(args.command, arguments)))
    elif args.form == "encoded":
        console.out(encoder.to_encoded_command_string(args.command, arguments))
    else:
        console.out("\n".join(encoder.to_encoded_command_list(args.command, arguments)))
    return exit_codes.SUCCESS


def _handle_decode(args: argparse.Namespace) -> int:
    console.out(decode_utf16_base64(args.payload))
    return exit_codes.SUCCESS


def _handle_run(args: argparse.Namespace) -> int:
    """Execute a command through the client.

    Flow:
    1. Build the transport (local subprocess or a WinRM shell).
    2. Encode and run through :class:`PowerShellClient`.
    3. Echo the remote stdout.
    """
    arguments = _command_arguments(args)
    style = _argument_style(args)

    if args.local:
        client = PowerShellClient(LocalTransport(), argument_style=style)
        output = _run_with(client, args, arguments)
    else:
        if not args.endpoint:
            raise ConfigurationError(
                "--endpoint is required for remote execution.",
                hint="Pass --local to run on this machine instead.",
            )
        password = args.password
        if password is None:
            password = os.environ.get(PASSWORD_ENV_VAR, "")
        settings = ConnectionSettings(
            endpoint=args.endpoint,
            username=args.user,
            password=password,
            transport=args.auth,
            server_cert_validation="ignore" if args.insecure else "validate",
            operation_timeout_sec=args.operation_timeout,
            read_timeout_sec=args.read_timeout,
        )
        with WinRmTransport(settings) as transport:
            client = PowerShellClient(transport, argument_style=style)
            output = _run_with(client, args, arguments)

    if output:
        console.out(output.rstrip("\r\n"))
    return exit_codes.SUCCESS


def _run_with(
    client: PowerShellClient,
    args: argparse.Namespace,
    arguments: Arguments | None,
) -> str:
    if args.powershell:
        # None would start a bare interpreter and drop the command.
        script_arguments = {} if arguments is None else arguments
        return client.run_powershell_command(args.command, script_arguments)
    return client.run_command(args.command, arguments)


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from psinvoke.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the psinvoke CLI.

    Parameters
    ----------
    argv:
        Arguments to parse; ``None`` reads ``sys.argv[1:]``.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.subcommand is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.verbose:
        from psinvoke.cli.log_config import configure_logging

        configure_logging(args.verbose)

    if args.subcommand == "encode":
        return _handle_encode(args)
    if args.subcommand == "decode":
        return _handle_decode(args)
    if args.subcommand == "run":
        return _handle_run(args)
    return _handle_doctor()


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: run :func:`main` and turn errors into exit codes."""
    try:
        code = main()
        sys.exit(code)
    except PsInvokeError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
