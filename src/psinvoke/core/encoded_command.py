"""``powershell -EncodedCommand`` payload codec.

PowerShell accepts a whole script as one base64 blob of UTF-16LE text,
which the outer shell never re-tokenizes.  Inner quoting of values
embedded in the script is still the caller's job.
"""

from __future__ import annotations

import base64
import binascii

from psinvoke.exceptions import PayloadDecodeError

POWERSHELL_COMMAND: str = "powershell"
ENCODED_COMMAND_PARAM: str = "-EncodedCommand"

_SCRIPT_ENCODING = "utf-16-le"


def encode_utf16_base64(script: str) -> str:
    """Encode *script* as UTF-16LE bytes, then standard base64 text.

    >>> encode_utf16_base64("dir")
    'ZABpAHIA'
    """
    return base64.b64encode(script.encode(_SCRIPT_ENCODING)).decode("ascii")


def decode_utf16_base64(payload: str) -> str:
    """Inverse of :func:`encode_utf16_base64`.

    Raises
    ------
    PayloadDecodeError
        When *payload* is not valid base64 or not UTF-16LE text.
    """
    try:
        raw = base64.b64decode(payload.strip(), validate=True)
        return raw.decode(_SCRIPT_ENCODING)
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise PayloadDecodeError(
            f"Not an encoded PowerShell command: {exc}",
        ) from exc
