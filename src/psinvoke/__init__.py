"""psinvoke — encode commands for remote PowerShell over WinRM.

Turns a command plus named arguments into a shell-safe invocation and
maps transport failures onto a small, typed error taxonomy.
"""

from psinvoke.version import __version__

__all__: list[str] = ["__version__"]
