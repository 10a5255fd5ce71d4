"""``psinvoke doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can encode and execute commands.

This module lives in the CLI layer; it purely collects and displays
diagnostic data.
"""

from __future__ import annotations

import platform
import shutil
import sys
from importlib.metadata import PackageNotFoundError, version

from psinvoke.cli import exit_codes
from psinvoke.cli.console import console
from psinvoke.version import __version__

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _psinvoke_version_check() -> Check:
    return "psinvoke", __version__, "[green]OK[/green]"


def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    py_version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", py_version, status


def _pywinrm_check() -> Check:
    """Return (label, value, status) for the pywinrm row.

    pywinrm is only needed for remote execution, so a missing install
    is a warning rather than a failure.
    """
    try:
        import winrm  # noqa: F401
    except ImportError:
        return "pywinrm", "NOT INSTALLED", "[yellow]WARN[/yellow]"

    try:
        return "pywinrm", version("pywinrm"), "[green]OK[/green]"
    except PackageNotFoundError:
        return "pywinrm", "unknown", "[green]OK[/green]"


def _rich_check() -> Check:
    try:
        import rich  # noqa: F401
    except ImportError:
        return "rich", "NOT INSTALLED", "[yellow]WARN[/yellow]"
    return "rich", "installed", "[green]OK[/green]"


def _local_powershell_check() -> Check:
    """Return (label, value, status) for a local PowerShell binary."""
    for name in ("powershell", "pwsh"):
        found = shutil.which(name)
        if found is not None:
            return "PowerShell", found, "[green]OK[/green]"
    return "PowerShell", "not found (local runs unavailable)", "[yellow]WARN[/yellow]"


def _os_check() -> Check:
    system_raw = platform.system()
    system_display = {"Darwin": "macOS"}.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\npsinvoke doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<40} {'Status':<8}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<40} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  Warnings do not fail.
    """
    checks = [
        _psinvoke_version_check(),
        _python_version_check(),
        _pywinrm_check(),
        _rich_check(),
        _local_powershell_check(),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
        print(
            "Some checks failed." if has_failure else "All checks passed.",
            file=sys.stderr,
        )
        return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS

    table = Table(
        title="psinvoke doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
