"""Parsing and generation of RFC 2397 data URIs.

A data URI looks like ``data:text/plain;charset=utf-8,A%20brief%20note``
or, with base64 encoding, ``data:image/png;base64,iVBORw0KGgo...``.
Use :func:`decode_string` or :func:`decode` to obtain a :class:`DataURI`,
and ``str(uri)`` or :meth:`DataURI.write_to` to produce the URI text.
"""

from __future__ import annotations

import base64
import binascii
import string
from dataclasses import dataclass, field
from typing import IO, Callable, Optional, Union

from .escaping import escape, escape_string, unescape, unescape_to_string
from .lexer import ItemType, lex

__all__ = [
    "ENCODING_BASE64",
    "ENCODING_ASCII",
    "DataURIError",
    "MediaType",
    "DataURI",
    "new",
    "decode_string",
    "decode",
    "detect_content_type",
    "encode_bytes",
]

ENCODING_BASE64 = "base64"
ENCODING_ASCII = "ascii"


class DataURIError(ValueError):
    """Raised for malformed data URIs and invalid data URI values."""


def _default_params() -> dict[str, str]:
    return {"charset": "US-ASCII"}


@dataclass
class MediaType:
    """A media type, its subtype and optional parameters."""

    type: str = ""
    subtype: str = ""
    params: dict[str, str] = field(default_factory=dict)

    def content_type(self) -> str:
        """Return the content type in the form ``type/subtype``."""
        return f"{self.type}/{self.subtype}"

    def __str__(self) -> str:
        parts = [self.content_type()]
        parts.extend(
            f";{key}={escape_string(value)}"
            for key, value in sorted(self.params.items())
        )
        return "".join(parts)


@dataclass
class DataURI(MediaType):
    """A media type together with the data it describes."""

    encoding: str = ENCODING_BASE64
    data: bytes = b""

    @property
    def media_type(self) -> MediaType:
        """The media type part of this data URI."""
        return MediaType(self.type, self.subtype, dict(self.params))

    def _payload(self) -> str:
        if self.encoding == ENCODING_BASE64:
            return base64.b64encode(self.data).decode("ascii")
        if self.encoding == ENCODING_ASCII:
            return escape(self.data)
        raise DataURIError(f"datauri: invalid encoding {self.encoding}")

    def marshal_text(self) -> bytes:
        """Return the data URI text as bytes.

        The result is not necessarily equal to the text this value was
        decoded from: default parameters are filled in and parameter
        values are always percent-escaped rather than quoted.
        """
        payload = self._payload()
        marker = ";base64" if self.encoding == ENCODING_BASE64 else ""
        return f"data:{self.media_type}{marker},{payload}".encode("utf-8")

    def __str__(self) -> str:
        return self.marshal_text().decode("utf-8")

    def write_to(self, stream: IO[bytes]) -> int:
        """Write the data URI text to a binary stream; return bytes written."""
        text = self.marshal_text()
        stream.write(text)
        return len(text)

    def unmarshal_text(self, text: Union[str, bytes]) -> None:
        """Decode a data URI and replace this value's contents with it."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", "replace")
        decoded = decode_string(text)
        self.type = decoded.type
        self.subtype = decoded.subtype
        self.params = decoded.params
        self.encoding = decoded.encoding
        self.data = decoded.data


def new(data: bytes, mediatype: str, *args: str) -> DataURI:
    """Build a base64-encoded :class:`DataURI`.

    ``mediatype`` must be ``type/subtype``; ``args`` are alternating
    parameter names and values.
    """
    parts = mediatype.split("/")
    if len(parts) != 2:
        raise DataURIError("datauri: invalid mediatype")
    if len(args) % 2 != 0:
        raise DataURIError("datauri: requires an even number of param pairs")
    params = dict(zip(args[::2], args[1::2]))
    return DataURI(parts[0], parts[1], params, ENCODING_BASE64, bytes(data))


_SIMPLE_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
    '"': 0x22,
}
_HEX_WIDTHS = {"x": 2, "u": 4, "U": 8}
_OCTAL = frozenset("01234567")
_HEX = frozenset(string.hexdigits)


def _unquote(s: str) -> str:
    """Interpret the body of a double-quoted string with backslash escapes."""
    if "\n" in s:
        raise DataURIError("invalid syntax")
    out = bytearray()
    i = 0
    while i < len(s):
        ch = s[i]
        if ch == '"':
            raise DataURIError("invalid syntax")
        if ch != "\\":
            out += ch.encode("utf-8", "surrogateescape")
            i += 1
            continue
        if i + 1 >= len(s):
            raise DataURIError("invalid syntax")
        esc = s[i + 1]
        i += 2
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
        elif esc in _HEX_WIDTHS:
            width = _HEX_WIDTHS[esc]
            digits = s[i : i + width]
            if len(digits) != width or not set(digits) <= _HEX:
                raise DataURIError("invalid syntax")
            i += width
            value = int(digits, 16)
            if esc == "x":
                out.append(value)
            elif value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
                raise DataURIError("invalid syntax")
            else:
                out += chr(value).encode("utf-8")
        elif esc in _OCTAL:
            digits = s[i - 1 : i + 2]
            if len(digits) != 3 or not set(digits) <= _OCTAL:
                raise DataURIError("invalid syntax")
            value = int(digits, 8)
            if value > 0xFF:
                raise DataURIError("invalid syntax")
            out.append(value)
            i += 2
        else:
            raise DataURIError("invalid syntax")
    return out.decode("utf-8", "surrogateescape")


def _read_ascii(s: str) -> bytes:
    return unescape(s)


def _read_base64(s: str) -> bytes:
    cleaned = s.replace("\n", "").replace("\r", "")
    try:
        return base64.b64decode(cleaned, validate=True)
    except binascii.Error as exc:
        raise DataURIError(f"illegal base64 data: {exc}") from exc


def decode_string(s: str) -> DataURI:
    """Decode a data URI string."""
    du = DataURI("text", "plain", _default_params(), ENCODING_ASCII, b"")
    reader: Optional[Callable[[str], bytes]] = None
    data: Optional[bytes] = None
    attr = ""
    quoted = False

    for item in lex(s):
        kind, value = item.kind, item.value
        if kind is ItemType.ERROR:
            raise DataURIError(str(item))
        if kind is ItemType.MEDIA_TYPE:
            du.type = value
            du.params.pop("charset", None)
        elif kind is ItemType.MEDIA_SUBTYPE:
            du.subtype = value
        elif kind is ItemType.PARAM_ATTR:
            attr = value
        elif kind is ItemType.LEFT_STRING_QUOTE:
            quoted = True
        elif kind is ItemType.PARAM_VAL:
            if quoted:
                quoted = False
                du.params[attr] = _unquote(value)
            else:
                du.params[attr] = unescape_to_string(value)
        elif kind is ItemType.BASE64_ENC:
            du.encoding = ENCODING_BASE64
            reader = _read_base64
        elif kind is ItemType.DATA_COMMA:
            if reader is None:
                reader = _read_ascii
        elif kind is ItemType.DATA:
            assert reader is not None
            data = reader(value)
        elif kind is ItemType.EOF:
            du.data = data if data is not None else b""
            return du
    raise DataURIError("EOF not found")


def decode(stream: IO) -> DataURI:
    """Decode a data URI read in full from a text or binary stream."""
    content = stream.read()
    if isinstance(content, (bytes, bytearray)):
        content = bytes(content).decode("utf-8", "replace")
    return decode_string(content)


# -- content sniffing -------------------------------------------------------

_SNIFF_LEN = 512
_WHITESPACE = b"\t\n\x0c\r "
_BINARY_BYTES = frozenset(
    [*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)]
)
_HTML_TAGS = tuple(
    tag.encode("ascii")
    for tag in (
        "<!DOCTYPE HTML",
        "<HTML",
        "<HEAD",
        "<SCRIPT",
        "<IFRAME",
        "<H1",
        "<DIV",
        "<FONT",
        "<TABLE",
        "<A",
        "<STYLE",
        "<TITLE",
        "<B",
        "<BODY",
        "<BR",
        "<P",
        "<!--",
    )
)
_HTML_CT = "text/html; charset=utf-8"
_TEXT_CT = "text/plain; charset=utf-8"
_DEFAULT_CT = "application/octet-stream"

# (mask or None for an exact prefix, pattern, skip leading whitespace, type)
_Signature = tuple[Optional[bytes], bytes, bool, str]

_SIGNATURES_BEFORE_MP4: tuple[_Signature, ...] = (
    (b"\xff\xff\xff\xff\xff", b"<?xml", True, "text/xml; charset=utf-8"),
    (None, b"%PDF-", False, "application/pdf"),
    (None, b"%!PS-Adobe-", False, "application/postscript"),
    (b"\xff\xff\x00\x00", b"\xfe\xff\x00\x00", False, "text/plain; charset=utf-16be"),
    (b"\xff\xff\x00\x00", b"\xff\xfe\x00\x00", False, "text/plain; charset=utf-16le"),
    (b"\xff\xff\xff\x00", b"\xef\xbb\xbf\x00", False, _TEXT_CT),
    (None, b"\x00\x00\x01\x00", False, "image/x-icon"),
    (None, b"\x00\x00\x02\x00", False, "image/x-icon"),
    (None, b"BM", False, "image/bmp"),
    (None, b"GIF87a", False, "image/gif"),
    (None, b"GIF89a", False, "image/gif"),
    (
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WEBPVP",
        False,
        "image/webp",
    ),
    (None, b"\x89PNG\x0d\x0a\x1a\x0a", False, "image/png"),
    (None, b"\xff\xd8\xff", False, "image/jpeg"),
    (
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"FORM\x00\x00\x00\x00AIFF",
        False,
        "audio/aiff",
    ),
    (b"\xff\xff\xff", b"ID3", False, "audio/mpeg"),
    (b"\xff\xff\xff\xff\xff", b"OggS\x00", False, "application/ogg"),
    (
        b"\xff\xff\xff\xff\xff\xff\xff\xff",
        b"MThd\x00\x00\x00\x06",
        False,
        "audio/midi",
    ),
    (
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00AVI ",
        False,
        "video/avi",
    ),
    (
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WAVE",
        False,
        "audio/wave",
    ),
)

_SIGNATURES_AFTER_MP4: tuple[_Signature, ...] = (
    (None, b"\x1a\x45\xdf\xa3", False, "video/webm"),
    (
        b"\x00" * 34 + b"\xff\xff",
        b"\x00" * 34 + b"LP",
        False,
        "application/vnd.ms-fontobject",
    ),
    (None, b"\x00\x01\x00\x00", False, "font/ttf"),
    (None, b"OTTO", False, "font/otf"),
    (None, b"ttcf", False, "font/collection"),
    (None, b"wOFF", False, "font/woff"),
    (None, b"wOF2", False, "font/woff2"),
    (None, b"\x1f\x8b\x08", False, "application/x-gzip"),
    (None, b"PK\x03\x04", False, "application/zip"),
    (None, b"Rar!\x1a\x07\x00", False, "application/x-rar-compressed"),
    (None, b"Rar!\x1a\x07\x01\x00", False, "application/x-rar-compressed"),
    (None, b"\x00\x61\x73\x6d", False, "application/wasm"),
)


def _skip_ws(data: bytes) -> bytes:
    return data.lstrip(_WHITESPACE)


def _matches_html(data: bytes, tag: bytes) -> bool:
    data = _skip_ws(data)
    if len(data) < len(tag) + 1:
        return False
    for have, want in zip(data, tag):
        if 0x41 <= want <= 0x5A:
            have &= 0xDF
        if have != want:
            return False
    return data[len(tag)] in b" >"


def _matches(data: bytes, signature: _Signature) -> bool:
    mask, pattern, skip_ws, _ = signature
    if skip_ws:
        data = _skip_ws(data)
    if mask is None:
        return data.startswith(pattern)
    if len(data) < len(pattern):
        return False
    return all((d & m) == p for d, m, p in zip(data, mask, pattern))


def _is_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0:
        return False
    if data[4:8] != b"ftyp":
        return False
    return any(
        data[start : start + 3] == b"mp4"
        for start in range(8, box_size, 4)
        if start != 12
    )


def _is_text(data: bytes) -> bool:
    return not any(b in _BINARY_BYTES for b in _skip_ws(data))


def detect_content_type(data: bytes) -> str:
    """Guess the media type of data from at most its first 512 bytes.

    Always returns a valid media type, ``application/octet-stream``
    when nothing more specific is recognised.
    """
    data = bytes(data[:_SNIFF_LEN])
    if any(_matches_html(data, tag) for tag in _HTML_TAGS):
        return _HTML_CT
    for signature in _SIGNATURES_BEFORE_MP4:
        if _matches(data, signature):
            return signature[3]
    if _is_mp4(data):
        return "video/mp4"
    for signature in _SIGNATURES_AFTER_MP4:
        if _matches(data, signature):
            return signature[3]
    if _is_text(data):
        return _TEXT_CT
    return _DEFAULT_CT


def encode_bytes(data: bytes) -> str:
    """Encode data as a base64 data URI, detecting its media type."""
    mediatype = detect_content_type(data).replace("; ", ";")
    return str(new(data, mediatype))