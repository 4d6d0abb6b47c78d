"""Conversion of Echo stream format (ESF) data into a command stream."""

from __future__ import annotations

import os

from .channels import SoundState
from .instruments import InstrumentBank
from .stream import Stream
from .util import load_file

# Sample rate the PCM channel plays at.
PCM_FREQUENCY = 10650

# FM channel numbers an event may address (3 and 7 do not exist).
_FM_CHANNELS = frozenset((0, 1, 2, 4, 5, 6))


class EsfError(ValueError):
    """Raised when ESF data can't be read or is invalid."""


def _is_fm_event(event: int, base: int) -> bool:
    return (event & 0xF8) == base and (event & 0x07) in _FM_CHANNELS


def _setup_chips(stream: Stream) -> None:
    stream.setup_ym2612_pcm()
    stream.set_pcm_freq(PCM_FREQUENCY)

    for chan in (0x00, 0x01, 0x02, 0x04, 0x05, 0x06):
        stream.add_ym_write(0, 0x28, chan)

    for bank in (0, 1):
        for reg in (0xB4, 0xB5, 0xB6):
            stream.add_ym_write(bank, reg, 0xC0)

    stream.add_ym_write(0, 0x2A, 0x80)
    stream.add_ym_write(0, 0x2B, 0x00)


def parse_esf(data: bytes, bank: InstrumentBank, stream: Stream) -> None:
    """Turn ESF data into stream commands, appended to ``stream``.

    Raises EsfError if an event is truncated or not recognised.
    """
    _setup_chips(stream)
    state = SoundState(bank, stream)
    data = bytes(data)
    pos = 0

    def need(count: int) -> None:
        if len(data) - pos < count:
            raise EsfError(f"truncated event ${data[pos]:02X} at offset {pos}")

    while pos < len(data):
        event = data[pos]

        if _is_fm_event(event, 0x00):
            need(2)
            state.key_on_fm(event & 0x07, data[pos + 1])
            pos += 2
        elif 0x08 <= event <= 0x0A:
            need(2)
            state.key_on_psg(event & 0x03, data[pos + 1])
            pos += 2
        elif event == 0x0B:
            need(2)
            state.key_on_noise(data[pos + 1])
            pos += 2
        elif event == 0x0C:
            need(2)
            state.key_on_pcm(data[pos + 1])
            pos += 2

        elif _is_fm_event(event, 0x10):
            state.key_off_fm(event & 0x07)
            pos += 1
        elif 0x18 <= event <= 0x1B:
            state.key_off_psg(event & 0x03)
            pos += 1
        elif event == 0x1C:
            state.key_off_pcm()
            pos += 1

        elif _is_fm_event(event, 0x20):
            need(2)
            state.set_fm_volume(event & 0x07, data[pos + 1])
            pos += 2
        elif 0x28 <= event <= 0x2B:
            need(2)
            state.set_psg_volume(event & 0x03, data[pos + 1])
            pos += 2

        elif _is_fm_event(event, 0x30):
            need(2)
            if data[pos + 1] & 0x80:
                state.set_fm_pitch(event & 0x07, data[pos + 1])
                pos += 2
            else:
                need(3)
                state.set_fm_raw_pitch(event & 0x07,
                                       data[pos + 1] << 8 | data[pos + 2])
                pos += 3
        elif 0x38 <= event <= 0x3A:
            need(2)
            if data[pos + 1] & 0x80:
                state.set_psg_pitch(event & 0x03, data[pos + 1])
                pos += 2
            else:
                need(3)
                state.set_psg_raw_pitch(event & 0x03,
                                        (data[pos + 1] & 0x0F)
                                        | (data[pos + 2] << 4))
                pos += 3
        elif event == 0x3B:
            need(2)
            state.set_psg_pitch(3, data[pos + 1])
            pos += 2

        elif _is_fm_event(event, 0xF0):
            need(2)
            state.set_fm_params(event & 0x07, data[pos + 1])
            pos += 2

        elif _is_fm_event(event, 0x40):
            need(2)
            state.load_fm_instrument(event & 0x07, data[pos + 1])
            pos += 2
        elif 0x48 <= event <= 0x4B:
            need(2)
            state.load_psg_instrument(event & 0x03, data[pos + 1])
            pos += 2

        elif event in (0xF8, 0xF9):
            need(3)
            stream.add_ym_write(event & 0x01, data[pos + 1], data[pos + 2])
            pos += 3
        elif event in (0xFA, 0xFB):
            # Flag commands have no audible effect.
            need(2)
            pos += 2

        elif 0xD0 <= event <= 0xDF:
            state.run_ticks((event & 0x0F) + 1)
            pos += 1
        elif event == 0xFE:
            need(2)
            state.run_ticks(data[pos + 1] or 0x100)
            pos += 2

        elif 0xE0 <= event <= 0xEF:
            # Channel locking has no audible effect.
            pos += 1
        elif event == 0xFD:
            stream.set_loop_point()
            pos += 1
        elif event in (0xFC, 0xFF):
            break

        else:
            dump = " ".join(f"{value:02X}" for value in data[pos:pos + 16])
            raise EsfError(
                f"unhandled Echo event ${event:02X} at offset {pos}: {dump}")

    stream.end_of_stream()


def convert_esf(filename: str | os.PathLike, bank: InstrumentBank,
                stream: Stream) -> None:
    """Load an ESF file and turn it into stream commands.

    Raises EsfError if the file can't be read or is invalid.
    """
    name = os.fspath(filename)
    try:
        data = load_file(filename)
    except OSError as exc:
        raise EsfError(f"can't open ESF file \"{name}\"") from exc
    try:
        parse_esf(data, bank, stream)
    except EsfError as exc:
        raise EsfError(f"invalid ESF file \"{name}\": {exc}") from exc