"""GD3 track information tags for VGM files."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .util import utf8_to_utf16

SYSTEM_NAME = "Sega Mega Drive / Genesis"
GD3_MAGIC = b"Gd3 "
GD3_VERSION = b"\x00\x01\x00\x00"


@dataclass
class TrackInfo:
    """Track details that end up in the GD3 tag."""

    title: str = ""
    game: str = ""
    composer: str = ""
    release: str = ""
    rippedby: str = ""

    def to_gd3(self) -> bytes:
        """Build the GD3 block.

        Title, game, system and composer are stored twice (English and
        Japanese slots); release date, ripper and notes once each.
        """
        title = utf8_to_utf16(self.title)
        game = utf8_to_utf16(self.game)
        system = utf8_to_utf16(SYSTEM_NAME)
        composer = utf8_to_utf16(self.composer)
        release = utf8_to_utf16(self.release)
        rippedby = utf8_to_utf16(self.rippedby)
        notes = utf8_to_utf16("")

        text = b"".join((
            title, title,
            game, game,
            system, system,
            composer, composer,
            release,
            rippedby,
            notes,
        ))
        size = 12 + len(text)
        return GD3_MAGIC + GD3_VERSION + struct.pack("<I", size & 0xFFFFFFFF) + text