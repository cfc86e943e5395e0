import io
import sys

import pytest

from datauri.cli import decode_stream, encode_stream, main
from datauri.datauri import (
    ENCODING_ASCII,
    ENCODING_BASE64,
    DataURIError,
    decode_string,
)


def _feed_stdin(monkeypatch, data):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


def test_encode_stream_base64_round_trip():
    out = io.BytesIO()
    encode_stream(io.BytesIO(b"heya"), out, ENCODING_BASE64, "text/plain")
    du = decode_string(out.getvalue().decode("ascii"))
    assert du.data == b"heya"
    assert du.content_type() == "text/plain"
    assert du.encoding == ENCODING_BASE64


def test_encode_stream_ascii_round_trip():
    out = io.BytesIO()
    encode_stream(io.BytesIO(b"A brief note"), out, ENCODING_ASCII, "text/plain")
    text = out.getvalue().decode("ascii")
    assert ";base64" not in text
    du = decode_string(text)
    assert du.data == b"A brief note"
    assert du.encoding == ENCODING_ASCII


def test_encode_stream_invalid_mediatype():
    with pytest.raises(DataURIError):
        encode_stream(io.BytesIO(b"heya"), io.BytesIO(), ENCODING_BASE64, "plain")


def test_encode_stream_invalid_encoding():
    with pytest.raises(DataURIError):
        encode_stream(io.BytesIO(b"heya"), io.BytesIO(), "rot13", "text/plain")


def test_decode_stream_writes_raw_data():
    out = io.BytesIO()
    decode_stream(
        io.BytesIO(b"data:text/plain;charset=utf-8;base64,aGV5YQ=="), out
    )
    assert out.getvalue() == b"heya"


def test_decode_stream_error():
    with pytest.raises(DataURIError) as excinfo:
        decode_stream(io.BytesIO(b"data:xxx;base64,aGV5YQ=="), io.BytesIO())
    assert str(excinfo.value) == "invalid character for media type"


def test_main_encodes_file_with_detected_mimetype(tmp_path, capsysbinary):
    path = tmp_path / "payload.json"
    path.write_bytes(b'{"msg": "heya"}')
    assert main([str(path)]) == 0
    out, _ = capsysbinary.readouterr()
    du = decode_string(out.decode("ascii"))
    assert du.content_type() == "application/json"
    assert du.data == b'{"msg": "heya"}'


def test_main_mimetype_override(tmp_path, capsysbinary):
    path = tmp_path / "payload.json"
    path.write_bytes(b"heya")
    assert main(["-m", "text/plain", str(path)]) == 0
    out, _ = capsysbinary.readouterr()
    assert decode_string(out.decode("ascii")).content_type() == "text/plain"


def test_main_stdin_defaults_to_octet_stream(monkeypatch, capsysbinary):
    payload = bytes([0x0A, 0xFF, 0x99, 0x34, 0x56, 0x34, 0x00])
    _feed_stdin(monkeypatch, payload)
    assert main([]) == 0
    out, _ = capsysbinary.readouterr()
    du = decode_string(out.decode("ascii"))
    assert du.content_type() == "application/octet-stream"
    assert du.data == payload


def test_main_dash_reads_stdin(monkeypatch, capsysbinary):
    _feed_stdin(monkeypatch, b"heya")
    assert main(["-a", "-"]) == 0
    out, _ = capsysbinary.readouterr()
    du = decode_string(out.decode("ascii"))
    assert du.encoding == ENCODING_ASCII
    assert du.data == b"heya"


def test_main_decodes_file(tmp_path, capsysbinary):
    path = tmp_path / "uri.txt"
    path.write_bytes(b"data:text/plain;charset=utf-8;base64,aGV5YQ==")
    assert main(["-d", str(path)]) == 0
    out, _ = capsysbinary.readouterr()
    assert out == b"heya"


def test_main_long_decode_flag(monkeypatch, capsysbinary):
    _feed_stdin(monkeypatch, b"data:,A%20brief%20note")
    assert main(["-decode"]) == 0
    out, _ = capsysbinary.readouterr()
    assert out == b"A brief note"


def test_main_decode_error_reports(monkeypatch, capsysbinary):
    _feed_stdin(monkeypatch, b"heya")
    assert main(["--decode"]) == 1
    _, err = capsysbinary.readouterr()
    assert b"missing data prefix" in err


def test_main_missing_file(tmp_path, capsysbinary):
    assert main([str(tmp_path / "absent.bin")]) == 1
    _, err = capsysbinary.readouterr()
    assert b"absent.bin" in err