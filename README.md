# datauri

Parse and generate data URIs as described in RFC 2397.

A data URI carries a small piece of data inline, such as a short note:

    data:text/plain;charset=utf-8,A%20brief%20note

or a base64-encoded image:

    data:image/vnd.microsoft.icon;name=favicon;base64,AAABAAEAEBAAAAEAIABoBAAA...

## Installation

    pip install datauri

## Decoding

```python
from datauri.datauri import decode_string

uri = decode_string("data:text/plain;charset=utf-8;base64,aGV5YQ==")
print(uri.content_type())  # text/plain
print(uri.params)          # {'charset': 'utf-8'}
print(uri.data)            # b'heya'
```

`decode(stream)` does the same for a readable text or binary file-like
object. `DataURI.unmarshal_text(text)` decodes into an existing value.
Malformed input raises `DataURIError` (a `ValueError`). When no media type is
given, the default `text/plain` with `charset=US-ASCII` applies. Parameter
values may be percent-escaped or double-quoted with backslash escapes.

## Encoding

```python
from datauri.datauri import new, encode_bytes

uri = new(b'{"msg": "heya"}', "application/json", "charset", "utf-8")
print(str(uri))
# data:application/json;charset=utf-8;base64,eyJtc2ciOiAiaGV5YSJ9

print(encode_bytes(b"A brief note"))
# data:text/plain;charset=utf-8;base64,QSBicmllZiBub3Rl
```

`new` takes the data, a `type/subtype` string and parameter name/value pairs;
a bad media type or an odd number of pair items raises `DataURIError`. It uses
base64 encoding by default; set `uri.encoding = "ascii"` for percent-escaped
output. `marshal_text()` returns the URI as bytes and `write_to(stream)` writes
it to a binary stream, returning the number of bytes written. Parameters are
written sorted by name and always percent-escaped, so the output need not
match the text a value was decoded from.

`encode_bytes` picks the media type with `detect_content_type`, which looks at
the first 512 bytes for common signatures (HTML, XML, PDF, images, audio,
video, fonts, archives) and falls back to `text/plain; charset=utf-8` or
`application/octet-stream`.

## Lower-level helpers

- `datauri.escaping`: `escape`, `escape_string`, `unescape` and
  `unescape_to_string` for percent-escaping; a malformed escape raises
  `UnescapeError`.
- `datauri.lexer`: `lex(text)` yields the `Item`s (`kind`, `value`) of a data
  URI, ending with an `ItemType.EOF` or `ItemType.ERROR` item.

## Command line

    datauri [-d|--decode] [-a|--ascii] [-m|--mimetype TYPE] [FILE]

Encodes FILE, or standard input if FILE is `-` or left out, and writes the
data URI to standard output. With `--decode` it reads a data URI and writes
the raw data instead. Unless `--mimetype` is given, the media type is guessed
from the file extension and falls back to `application/octet-stream`. On an
error the message is printed to standard error and the exit status is 1.

    datauri picture.png > picture.txt
    datauri --decode picture.txt > copy.png