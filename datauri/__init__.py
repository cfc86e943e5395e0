"""Parse and generate RFC 2397 data URIs, with a command line encoder and decoder."""

__version__ = "1.0.0"