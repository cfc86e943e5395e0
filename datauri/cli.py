"""Command line tool that encodes or decodes data URIs."""

from __future__ import annotations

import argparse
import contextlib
import mimetypes
import sys
from typing import IO, Optional, Sequence

from .datauri import ENCODING_ASCII, ENCODING_BASE64, decode, new

__all__ = ["decode_stream", "encode_stream", "main"]

_DEFAULT_MIMETYPE = "application/octet-stream"

_DESCRIPTION = (
    "Encode or decode datauri data and print to standard output.\n\n"
    "datauri encodes or decodes FILE or standard input if FILE is - or "
    "omitted, and prints to standard output. Unless -mimetype is used, when "
    "FILE is specified, datauri will attempt to detect its mimetype from its "
    "extension. If this fails or data is read from standard input, the "
    "mimetype defaults to application/octet-stream."
)


def decode_stream(infile: IO[bytes], outfile: IO[bytes]) -> None:
    """Read a data URI from infile and write its raw data to outfile."""
    du = decode(infile)
    outfile.write(du.data)


def encode_stream(
    infile: IO[bytes], outfile: IO[bytes], encoding: str, mediatype: str
) -> None:
    """Read raw data from infile and write it to outfile as a data URI."""
    du = new(infile.read(), mediatype)
    du.encoding = encoding
    du.write_to(outfile)


def _type_by_extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot < 0:
        return ""
    guessed, _ = mimetypes.guess_type("file" + name[dot:])
    return guessed or ""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datauri",
        description=_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-d",
        "-decode",
        "--decode",
        dest="decode",
        action="store_true",
        help="decode data instead of encoding",
    )
    parser.add_argument(
        "-m",
        "-mimetype",
        "--mimetype",
        dest="mimetype",
        default="",
        help="force the mimetype of the data to encode to this value",
    )
    parser.add_argument(
        "-a",
        "-ascii",
        "--ascii",
        dest="ascii",
        action="store_true",
        help="encode data using ascii instead of base64",
    )
    parser.add_argument("file", nargs="?", default=None, metavar="FILE")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command; return the process exit status."""
    args = _build_parser().parse_args(argv)
    detected = ""
    try:
        if args.file is None or args.file == "-":
            source = contextlib.nullcontext(sys.stdin.buffer)
        else:
            source = open(args.file, "rb")
            detected = _type_by_extension(args.file)
        mimetype = args.mimetype or detected or _DEFAULT_MIMETYPE
        out = sys.stdout.buffer
        with source as infile:
            if args.decode:
                decode_stream(infile, out)
            else:
                encoding = ENCODING_ASCII if args.ascii else ENCODING_BASE64
                encode_stream(infile, out, encoding, mimetype)
        out.flush()
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())