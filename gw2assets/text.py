"""Readers for plain text, string tables and packed MP3 sound files."""

from __future__ import annotations

_STRS_MAGIC = b"strs"
_ASND_HEADER_SIZE = 36


def printable_text(data: bytes) -> str:
    """Return the ASCII printable and control characters of ``data`` as text.

    Bytes outside the 7-bit range are dropped.
    """
    return bytes(b for b in data if b < 0x80).decode("ascii")


def strip_asnd_header(data: bytes) -> bytes:
    """Return the MP3 payload of an asnd file by removing its 36-byte header."""
    if len(data) < _ASND_HEADER_SIZE:
        raise ValueError(
            f"asnd data is {len(data)} bytes, shorter than its "
            f"{_ASND_HEADER_SIZE}-byte header"
        )
    return bytes(data[_ASND_HEADER_SIZE:])


def is_strings_header(data: bytes) -> bool:
    """Return True if ``data`` starts with the string table magic."""
    return bytes(data[:4]) == _STRS_MAGIC