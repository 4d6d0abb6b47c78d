"""A sound chip command stream, with size and timing bookkeeping."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

MAX_DELAY = 65535


class CommandType(enum.IntEnum):
    """Kinds of command held in a stream."""

    DUMMY = 0
    DELAY = 1
    YMREG0 = 2
    YMREG1 = 3
    PSGREG = 4
    INITPCM = 5
    STARTPCM = 6
    STOPPCM = 7
    SETPCMFREQ = 8
    END = 9


# Size in bytes each command takes once written out.
COMMAND_SIZES = {
    CommandType.DUMMY: 0,
    CommandType.DELAY: 3,        # 61 nn nn
    CommandType.YMREG0: 3,       # 52 rr nn
    CommandType.YMREG1: 3,       # 53 rr nn
    CommandType.PSGREG: 2,       # 50 nn
    CommandType.INITPCM: 10,     # 90 00 02 00 2A  91 00 00 01 00
    CommandType.STARTPCM: 5,     # 95 00 ii ii 00
    CommandType.STOPPCM: 2,      # 94 00
    CommandType.SETPCMFREQ: 6,   # 92 00 nn nn nn nn
    CommandType.END: 1,          # 66
}


@dataclass(frozen=True)
class StreamCommand:
    """One command with up to two arguments."""

    type: CommandType
    value1: int = 0
    value2: int = 0


class Stream:
    """An ordered list of commands, tracking byte length, samples and loop."""

    def __init__(self) -> None:
        self.commands: list[StreamCommand] = []
        self.size = 0
        self.samples = 0
        self.has_loop = False
        self.loop_offset = 0
        self._loop_samples = 0

    def __iter__(self) -> Iterator[StreamCommand]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def _add(self, kind: CommandType, value1: int = 0, value2: int = 0) -> None:
        self.commands.append(StreamCommand(kind, value1, value2))
        self.size += COMMAND_SIZES[kind]

    def add_delay(self, samples: int) -> None:
        """Wait a number of 44100Hz samples, split into chunks of at most 65535."""
        while samples > 0:
            chunk = min(samples, MAX_DELAY)
            self._add(CommandType.DELAY, chunk)
            self.samples += chunk
            samples -= chunk

    def add_ym_write(self, bank: int, reg: int, value: int) -> None:
        """Write a YM2612 register in bank 0 or 1."""
        kind = CommandType.YMREG1 if bank else CommandType.YMREG0
        self._add(kind, reg, value)

    def add_psg_write(self, value: int) -> None:
        """Write a byte to the PSG."""
        self._add(CommandType.PSGREG, value)

    def setup_ym2612_pcm(self) -> None:
        """Set up PCM streaming to the YM2612 DAC."""
        self._add(CommandType.INITPCM)

    def start_pcm_output(self, pcm_id: int) -> None:
        """Start streaming a PCM data block."""
        self._add(CommandType.STARTPCM, pcm_id)

    def stop_pcm_output(self) -> None:
        """Stop PCM streaming."""
        self._add(CommandType.STOPPCM)

    def set_pcm_freq(self, hz: int) -> None:
        """Set the PCM playback sample rate."""
        self._add(CommandType.SETPCMFREQ, hz)

    def end_of_stream(self) -> None:
        """Finish the stream."""
        self._add(CommandType.END)

    def set_loop_point(self) -> None:
        """Mark the current position as the loop point."""
        self.has_loop = True
        self.loop_offset = self.size
        self._loop_samples = self.samples

    def loop_length(self) -> int:
        """Number of samples from the loop point to the end of the stream."""
        return self.samples - self._loop_samples