"""Tokenizer for RFC 2397 data URI strings."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterator, Optional

__all__ = [
    "DATA_PREFIX",
    "ItemType",
    "Item",
    "lex",
    "is_token_char",
    "is_url_char",
    "is_base64_char",
]

DATA_PREFIX = "data:"
_MEDIA_SEP = "/"
_PARAM_SEMICOLON = ";"
_PARAM_EQUAL = "="
_DATA_COMMA = ","

_TSPECIALS = frozenset('()<>@,;:\\"/[]?=')
_URL_EXCLUDED = frozenset(' <>#"{}|\\^[]`')
_BASE64_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789+/=\n"
)
_DISCRETE_TYPES = ("text", "image", "audio", "video", "application")
_COMPOSITE_TYPES = ("message", "multipart")

_QUOTE_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    '"': '\\"',
    "\\": "\\\\",
}


class ItemType(IntEnum):
    """Kinds of lexical items in a data URI."""

    ERROR = 0
    EOF = 1
    DATA_PREFIX = 2
    MEDIA_TYPE = 3
    MEDIA_SEP = 4
    MEDIA_SUBTYPE = 5
    PARAM_SEMICOLON = 6
    PARAM_ATTR = 7
    PARAM_EQUAL = 8
    LEFT_STRING_QUOTE = 9
    RIGHT_STRING_QUOTE = 10
    PARAM_VAL = 11
    BASE64_ENC = 12
    DATA_COMMA = 13
    DATA = 14


def _quote(s: str) -> str:
    parts = []
    for ch in s:
        if ch in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif ord(ch) < 0x100:
            parts.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(f"\\U{ord(ch):08x}")
    return '"' + "".join(parts) + '"'


@dataclass(frozen=True)
class Item:
    """A lexical item: its kind and the text it covers."""

    kind: ItemType
    value: str

    def __str__(self) -> str:
        if self.kind is ItemType.EOF:
            return "EOF"
        if self.kind is ItemType.ERROR:
            return self.value
        if len(self.value.encode("utf-8", "surrogatepass")) > 10:
            return _quote(self.value[:10]) + "..."
        return _quote(self.value)


def is_token_char(ch: str) -> bool:
    """True for an ASCII, non-control, non-space, non-tspecial character."""
    code = ord(ch)
    return (
        code <= 0x7F
        and code > 0x1F
        and code != 0x7F
        and not ch.isspace()
        and ch not in _TSPECIALS
    )


def is_url_char(ch: str) -> bool:
    """True for a character allowed unescaped in URL-encoded data."""
    code = ord(ch)
    return 0x1F < code < 0x7F and ch not in _URL_EXCLUDED


def is_base64_char(ch: str) -> bool:
    """True for a base64 alphabet character, padding or newline."""
    return ch in _BASE64_CHARS


def _is_discrete_type(s: str) -> bool:
    return s.startswith(_DISCRETE_TYPES)


def _is_composite_type(s: str) -> bool:
    return s.startswith(_COMPOSITE_TYPES)


_State = Optional[Callable[[], "_State"]]


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.start = 0
        self.pos = 0
        self.width = 0
        self.seen_base64 = False
        self.pending: deque[Item] = deque()

    def run(self) -> Iterator[Item]:
        state: _State = self.before_data_prefix
        while state is not None:
            state = state()
            while self.pending:
                yield self.pending.popleft()

    # -- primitives -------------------------------------------------------

    def emit(self, kind: ItemType) -> None:
        self.pending.append(Item(kind, self.text[self.start : self.pos]))
        self.start = self.pos

    def next(self) -> Optional[str]:
        if self.pos >= len(self.text):
            self.width = 0
            return None
        ch = self.text[self.pos]
        self.width = 1
        self.pos += 1
        return ch

    def backup(self) -> None:
        self.pos -= self.width

    def error(self, message: str) -> _State:
        self.pending.append(Item(ItemType.ERROR, message))
        return None

    # -- states -----------------------------------------------------------

    def before_data_prefix(self) -> _State:
        if self.text.startswith(DATA_PREFIX, self.pos):
            return self.data_prefix
        return self.error("missing data prefix")

    def data_prefix(self) -> _State:
        self.pos += len(DATA_PREFIX)
        self.emit(ItemType.DATA_PREFIX)
        return self.after_data_prefix

    def after_data_prefix(self) -> _State:
        ch = self.next()
        if ch == _PARAM_SEMICOLON:
            self.backup()
            return self.param_semicolon
        if ch == _DATA_COMMA:
            self.backup()
            return self.data_comma
        if ch is None:
            return self.error("missing comma before data")
        if ch in ("x", "X"):
            if self.next() == "-":
                return self.x_token_media_type
            return self.in_discrete_media_type
        if is_token_char(ch):
            return self.in_discrete_media_type
        return self.error("invalid character after data prefix")

    def x_token_media_type(self) -> _State:
        while True:
            ch = self.next()
            if ch == _MEDIA_SEP:
                self.backup()
                return self.media_type
            if ch is None:
                return self.error("missing media type slash")
            if not is_token_char(ch):
                return self.error("invalid character for media type")

    def in_discrete_media_type(self) -> _State:
        while True:
            ch = self.next()
            if ch == _MEDIA_SEP:
                self.backup()
                word = self.text[self.start : self.pos]
                if not _is_discrete_type(word) and not _is_composite_type(word):
                    return self.error("invalid media type")
                return self.media_type
            if ch is None:
                return self.error("missing media type slash")
            if not is_token_char(ch):
                return self.error("invalid character for media type")

    def media_type(self) -> _State:
        if self.pos > self.start:
            self.emit(ItemType.MEDIA_TYPE)
        return self.media_sep

    def media_sep(self) -> _State:
        self.next()
        self.emit(ItemType.MEDIA_SEP)
        return self.after_media_sep

    def after_media_sep(self) -> _State:
        while True:
            ch = self.next()
            if ch in (_PARAM_SEMICOLON, _DATA_COMMA):
                self.backup()
                return self.media_subtype
            if ch is None:
                return self.error("incomplete media type")
            if not is_token_char(ch):
                return self.error("invalid character for media subtype")

    def media_subtype(self) -> _State:
        if self.pos > self.start:
            self.emit(ItemType.MEDIA_SUBTYPE)
        return self.after_media_subtype

    def after_media_subtype(self) -> _State:
        return self._semicolon_or_comma()

    def _semicolon_or_comma(self) -> _State:
        ch = self.next()
        if ch == _PARAM_SEMICOLON:
            self.backup()
            return self.param_semicolon
        if ch == _DATA_COMMA:
            self.backup()
            return self.data_comma
        if ch is None:
            return self.error("missing comma before data")
        return self.error("expected semicolon or comma")

    def param_semicolon(self) -> _State:
        self.next()
        self.emit(ItemType.PARAM_SEMICOLON)
        return self.after_param_semicolon

    def after_param_semicolon(self) -> _State:
        ch = self.next()
        if ch is None or ch in (_PARAM_EQUAL, _DATA_COMMA):
            return self.error("unterminated parameter sequence")
        if is_token_char(ch):
            self.backup()
            return self.in_param_attr
        return self.error("invalid character for parameter attribute")

    def base64_enc(self) -> _State:
        if self.pos > self.start:
            word = self.text[self.start : self.pos]
            if word != "base64":
                return self.error(f"expected base64, got {word}")
            self.seen_base64 = True
            self.emit(ItemType.BASE64_ENC)
        return self.data_comma

    def in_param_attr(self) -> _State:
        while True:
            ch = self.next()
            if ch == _PARAM_EQUAL:
                self.backup()
                return self.param_attr
            if ch == _DATA_COMMA:
                self.backup()
                return self.base64_enc
            if ch is None:
                return self.error("unterminated parameter sequence")
            if not is_token_char(ch):
                return self.error("invalid character for parameter attribute")

    def param_attr(self) -> _State:
        if self.pos > self.start:
            self.emit(ItemType.PARAM_ATTR)
        return self.param_equal

    def param_equal(self) -> _State:
        self.next()
        self.emit(ItemType.PARAM_EQUAL)
        return self.after_param_equal

    def after_param_equal(self) -> _State:
        ch = self.next()
        if ch == '"':
            self.emit(ItemType.LEFT_STRING_QUOTE)
            return self.in_quoted_param_val
        if ch is None:
            return self.error("missing comma before data")
        if is_token_char(ch):
            return self.in_param_val
        return self.error("invalid character for parameter value")

    def in_quoted_param_val(self) -> _State:
        while True:
            ch = self.next()
            if ch is None:
                return self.error("unclosed quoted string")
            if ch == "\\":
                return self.escaped_char
            if ch == '"':
                self.backup()
                return self.quoted_param_val
            if ord(ch) > 0x7F:
                return self.error("invalid character for parameter value")

    def escaped_char(self) -> _State:
        ch = self.next()
        if ch is None or ord(ch) <= 0x7F:
            return self.in_quoted_param_val
        return self.error("invalid escaped character")

    def in_param_val(self) -> _State:
        while True:
            ch = self.next()
            if ch in (_PARAM_SEMICOLON, _DATA_COMMA):
                self.backup()
                return self.param_val
            if ch is None:
                return self.error("missing comma before data")
            if not is_token_char(ch):
                return self.error("invalid character for parameter value")

    def quoted_param_val(self) -> _State:
        if self.pos > self.start:
            self.emit(ItemType.PARAM_VAL)
        self.next()
        self.emit(ItemType.RIGHT_STRING_QUOTE)
        return self.after_param_val

    def param_val(self) -> _State:
        if self.pos > self.start:
            self.emit(ItemType.PARAM_VAL)
        return self.after_param_val

    def after_param_val(self) -> _State:
        return self._semicolon_or_comma()

    def data_comma(self) -> _State:
        self.next()
        self.emit(ItemType.DATA_COMMA)
        if self.seen_base64:
            return self.base64_data
        return self.data

    def _lex_payload(self, accept: Callable[[str], bool]) -> _State:
        while True:
            ch = self.next()
            if ch is None:
                break
            if not accept(ch):
                return self.error("invalid data character")
        if self.pos > self.start:
            self.emit(ItemType.DATA)
        self.emit(ItemType.EOF)
        return None

    def data(self) -> _State:
        return self._lex_payload(is_url_char)

    def base64_data(self) -> _State:
        return self._lex_payload(is_base64_char)


def lex(text: str) -> Iterator[Item]:
    """Yield the lexical items of a data URI string.

    The sequence ends with an ``EOF`` item, or with an ``ERROR`` item
    carrying the message when the input is malformed.
    """
    return _Lexer(text).run()