"""Single-quote literal quoting for PowerShell script text.

Only valid inside single-quoted string literals.  Double-quoted
PowerShell strings expand ``$`` and backticks, which this module does
not escape, so never reuse it there.
"""

from __future__ import annotations


def quote_single(value: object | None) -> str:
    """Return *value* as a PowerShell single-quoted literal.

    Embedded single quotes are doubled (``O'Brien`` → ``'O''Brien'``).
    ``None`` yields the empty string with no quote marks at all.

    >>> quote_single("O'Brien")
    "'O''Brien'"
    >>> quote_single(5)
    "'5'"
    >>> quote_single(None)
    ''
    """
    if value is None:
        return ""
    return "'" + str(value).replace("'", "''") + "'"
