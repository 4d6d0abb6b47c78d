"""Helpers for loading files and handling UTF-8 and UTF-16 text."""

from __future__ import annotations

import os
import struct

# Largest file load_file accepts: 4MB is the most that Echo can address.
MAX_BLOBSIZE = 0x400000

REPLACEMENT = 0xFFFD


def load_file(filename: str | os.PathLike) -> bytes:
    """Read a whole file into memory.

    Raises OSError if the file cannot be read or is MAX_BLOBSIZE bytes or
    larger.
    """
    with open(filename, "rb") as file:
        size = file.seek(0, os.SEEK_END)
        if size >= MAX_BLOBSIZE:
            raise OSError(f"file \"{os.fspath(filename)}\" is too large")
        file.seek(0)
        data = file.read()
    if len(data) < size:
        raise OSError(f"can't read all of \"{os.fspath(filename)}\"")
    return data


def _is_continuation(value: int) -> bool:
    return (value & 0xC0) == 0x80


def decode_utf8(data: bytes, pos: int = 0) -> int:
    """Decode the UTF-8 sequence at ``pos``.

    Returns 0 at the end of the data. Malformed, overlong, surrogate and
    non-character sequences decode to U+FFFD.
    """
    def byte(offset: int) -> int:
        index = pos + offset
        return data[index] if index < len(data) else 0

    lead = byte(0)

    if lead < 0x80:
        return lead

    if (lead & 0xE0) == 0xC0:
        if not _is_continuation(byte(1)):
            return REPLACEMENT
        code = (lead & 0x1F) << 6 | (byte(1) & 0x3F)
        return REPLACEMENT if code < 0x80 else code

    if (lead & 0xF0) == 0xE0:
        if not all(_is_continuation(byte(i)) for i in (1, 2)):
            return REPLACEMENT
        code = (lead & 0x0F) << 12 | (byte(1) & 0x3F) << 6 | (byte(2) & 0x3F)
        if code < 0x800 or 0xD800 <= code <= 0xDFFF or code >= 0xFFFE:
            return REPLACEMENT
        return code

    if (lead & 0xF8) == 0xF0:
        if not all(_is_continuation(byte(i)) for i in (1, 2, 3)):
            return REPLACEMENT
        code = ((lead & 0x07) << 18 | (byte(1) & 0x3F) << 12
                | (byte(2) & 0x3F) << 6 | (byte(3) & 0x3F))
        if code < 0x10000 or (code & 0xFFFE) == 0xFFFE:
            return REPLACEMENT
        return code

    return REPLACEMENT


def next_utf8(data: bytes, pos: int) -> int:
    """Return the position of the UTF-8 sequence following the one at ``pos``."""
    pos += 1
    while pos < len(data) and _is_continuation(data[pos]):
        pos += 1
    return pos


def utf8_to_utf16(text: str | bytes) -> bytes:
    """Convert UTF-8 text to nul-terminated little-endian UTF-16.

    Conversion stops at the first nul character.
    """
    raw = text.encode("utf-8", "surrogateescape") if isinstance(text, str) else bytes(text)

    units: list[int] = []
    pos = 0
    while (codepoint := decode_utf8(raw, pos)) != 0:
        pos = next_utf8(raw, pos)
        if codepoint <= 0xFFFF:
            units.append(codepoint)
        else:
            codepoint -= 0x10000
            units.append(0xD800 | (codepoint & 0x3FF))
            units.append(0xDC00 | (codepoint >> 10))
    units.append(0)

    return struct.pack(f"<{len(units)}H", *units)