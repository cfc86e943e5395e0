import pytest

from datauri.escaping import (
    UnescapeError,
    escape,
    escape_string,
    unescape,
    unescape_to_string,
)

CASES = [
    ("A%20brief%20note%0A", b"A brief note\n"),
    (
        "%7B%5B%5Dbyte%28%22A%2520brief%2520note%22%29%2C%20%5B%5Dbyte%28%22A%20brief%20note%22%29%7D",
        b'{[]byte("A%20brief%20note"), []byte("A brief note")}',
    ),
]


@pytest.mark.parametrize("escaped, unescaped", CASES)
def test_escape(escaped, unescaped):
    assert escape(unescaped) == escaped


@pytest.mark.parametrize("escaped, unescaped", CASES)
def test_unescape(escaped, unescaped):
    assert unescape(escaped) == unescaped


def test_escape_string_example():
    assert escape_string("A brief note") == "A%20brief%20note"


def test_escape_bytes_example():
    assert escape(b"A brief note") == "A%20brief%20note"


def test_unescape_example():
    assert unescape("A%20brief%20note") == b"A brief note"


def test_unescape_to_string_example():
    assert unescape_to_string("A%20brief%20note") == "A brief note"


def test_reserved_characters():
    assert escape_string("a$&+:=@b") == "a$&+:=@b"
    assert escape_string("/;,?") == "%2F%3B%2C%3F"
    assert escape_string("-_.~") == "-_.~"


def test_non_ascii_is_utf8_escaped():
    assert escape_string("é") == "%C3%A9"
    assert unescape_to_string("%C3%A9") == "é"


def test_plus_is_not_a_space():
    assert unescape("a+b") == b"a+b"


def test_lowercase_hex_accepted():
    assert unescape("%7b%7d") == b"{}"


@pytest.mark.parametrize(
    "text, sequence",
    [("%zz", "%zz"), ("abc%4", "%4"), ("x%", "%"), ("%4gabc", "%4g")],
)
def test_bad_escape(text, sequence):
    with pytest.raises(UnescapeError) as info:
        unescape(text)
    assert info.value.sequence == sequence
    assert str(info.value) == f'invalid URL escape "{sequence}"'


def test_bad_escape_is_value_error():
    with pytest.raises(ValueError):
        unescape_to_string("%G0")


@pytest.mark.parametrize("data", [b"", b"\x00\xff\x10 hello", bytes(range(256))])
def test_round_trip(data):
    assert unescape(escape(data)) == data