"""Percent-escaping of data URI payloads and parameter values."""

from __future__ import annotations

import re
from urllib.parse import quote, unquote_to_bytes

__all__ = [
    "UnescapeError",
    "escape",
    "escape_string",
    "unescape",
    "unescape_to_string",
]

# Reserved characters that may stay unescaped inside a path segment.
_SAFE = "$&+:=@"

_BAD_ESCAPE = re.compile(rb"%(?![0-9A-Fa-f]{2})")


class UnescapeError(ValueError):
    """Raised when a percent-escape sequence is malformed."""

    def __init__(self, sequence: str) -> None:
        self.sequence = sequence
        super().__init__(f'invalid URL escape "{sequence}"')


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", "surrogateescape")
    return bytes(value)


def escape(data: bytes) -> str:
    """Percent-escape raw bytes.

    Letters, digits and ``-_.~$&+:=@`` are kept; every other byte
    becomes ``%XX`` with upper-case hex digits.
    """
    return quote(_to_bytes(data), safe=_SAFE)


def escape_string(s: str) -> str:
    """Like :func:`escape`, taking a string (encoded as UTF-8)."""
    return quote(_to_bytes(s), safe=_SAFE)


def unescape(s: str | bytes) -> bytes:
    """Decode ``%XX`` sequences; ``+`` is left as it is.

    Raises :class:`UnescapeError` on a truncated or non-hex escape.
    """
    raw = _to_bytes(s)
    bad = _BAD_ESCAPE.search(raw)
    if bad is not None:
        sequence = raw[bad.start() : bad.start() + 3]
        raise UnescapeError(sequence.decode("utf-8", "replace"))
    return unquote_to_bytes(raw)


def unescape_to_string(s: str | bytes) -> str:
    """Like :func:`unescape`, returning a string decoded as UTF-8."""
    return unescape(s).decode("utf-8", "surrogateescape")