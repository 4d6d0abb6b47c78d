"""Instrument bank and PCM data block handling."""

from __future__ import annotations

import os
import struct
import sys
from typing import Iterable, Optional

from .util import load_file

# Echo can address at most this many instruments.
MAX_INSTRUMENTS = 0x100


class InstrumentBank:
    """Instruments indexed by ID, plus the PCM block built from them."""

    def __init__(self, instruments: Iterable[Optional[bytes]] = ()) -> None:
        self.instruments: list[Optional[bytes]] = list(instruments)
        if len(self.instruments) > MAX_INSTRUMENTS:
            raise ValueError(
                f"too many instruments ({len(self.instruments)}, "
                f"maximum is {MAX_INSTRUMENTS})")
        self._pcm_map: dict[int, int] = {}
        self._pcm_block = bytearray()

    @classmethod
    def load(cls, listname: str | os.PathLike) -> "InstrumentBank":
        """Load every instrument named in a list file, one filename per line.

        Blank lines are skipped. Instruments that can't be loaded are
        reported on stderr and left empty. Raises OSError if the list
        itself can't be opened.
        """
        instruments: list[Optional[bytes]] = []
        with open(listname, "r", encoding="utf-8", newline="") as listfile:
            for line in listfile:
                name = line.removesuffix("\n")
                if not name:
                    continue
                try:
                    blob: Optional[bytes] = load_file(name)
                except OSError:
                    print(f"Warning: can't load instrument \"{name}\"",
                          file=sys.stderr)
                    blob = None
                instruments.append(blob)
        return cls(instruments)

    def get(self, instrument_id: int) -> bytes:
        """Return an instrument's data, or empty data if it is missing."""
        if 0 <= instrument_id < len(self.instruments):
            blob = self.instruments[instrument_id]
            if blob is not None:
                return blob
        return b""

    def mark_as_pcm(self, instrument_id: int) -> None:
        """Add an instrument to the PCM block, once.

        The trailing 0xFF terminator of the sample is left out.
        """
        if instrument_id in self._pcm_map:
            return
        data = self.get(instrument_id)
        if not data:
            raise ValueError(f"instrument {instrument_id} has no PCM data")
        sample = data[:-1]
        self._pcm_block += b"\x67\x66\x00" + struct.pack("<I", len(sample))
        self._pcm_block += sample
        self._pcm_map[instrument_id] = len(self._pcm_map)

    def pcm_id(self, instrument_id: int) -> int:
        """Return the PCM block ID of an instrument, adding it if needed."""
        self.mark_as_pcm(instrument_id)
        return self._pcm_map[instrument_id]

    @property
    def pcm_block(self) -> bytes:
        """All PCM data blocks, in the order they were added."""
        return bytes(self._pcm_block)