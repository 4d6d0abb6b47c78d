"""Sound chip channel state driven by Echo stream events."""

from __future__ import annotations

from dataclasses import dataclass

from .instruments import InstrumentBank
from .stream import Stream

# Raw YM2612 frequencies for each semitone within an octave.
FM_PITCH = (
    644, 681, 722, 765,
    810, 858, 910, 964,
    1021, 1081, 1146, 1214,
)

# Raw PSG frequencies for each semitone (six octaves).
PSG_PITCH = (
    851, 803, 758, 715, 675, 637, 601, 568, 536, 506, 477, 450,
    425, 401, 379, 357, 337, 318, 300, 284, 268, 253, 238, 225,
    212, 200, 189, 178, 168, 159, 150, 142, 134, 126, 119, 112,
    106, 100, 94, 89, 84, 79, 75, 71, 67, 63, 59, 56,
    53, 50, 47, 44, 42, 39, 37, 35, 33, 31, 29, 28,
    26, 25, 23, 22, 21, 19, 18, 17, 16, 15, 14, 14,
)

# Pitch offsets (in semitones) selected by the high nibble of envelope data.
PITCH_OFFSET = (
    0,
    +1, +2, +3, +4, +6, +8, +12,
    -1, -2, -3, -4, -6, -8, -12,
)

# Register order in which FM instruments are stored.
FM_INSTRUMENT_FORMAT = (
    0xB0,
    0x30, 0x34, 0x38, 0x3C,
    0x40, 0x44, 0x48, 0x4C,
    0x50, 0x54, 0x58, 0x5C,
    0x60, 0x64, 0x68, 0x6C,
    0x70, 0x74, 0x78, 0x7C,
    0x80, 0x84, 0x88, 0x8C,
    0x90, 0x94, 0x98, 0x9C,
)

FM_INSTRUMENT_SIZE = len(FM_INSTRUMENT_FORMAT)

# Base pitch value meaning "use the raw frequency instead".
VOID_PITCH = 0xFF

# Samples per tick at 44100Hz (60Hz ticks).
TICK_SAMPLES = 735

NUM_PSG_CHANNELS = 4
NOISE_CHANNEL = 3


@dataclass
class _FmChannel:
    algo: int = 0
    tl_s1: int = 0x7F
    tl_s2: int = 0x7F
    tl_s3: int = 0x7F
    tl_s4: int = 0x7F


@dataclass
class _PsgChannel:
    instrument: bytes = b""
    playing: bool = False
    loop: int = 0
    pos: int = 0
    vol: int = 0
    base_pitch: int = VOID_PITCH
    raw_pitch: int = 0


def _fm_frequency(octave: int, semitone: int) -> int:
    if semitone >= len(FM_PITCH):
        raise ValueError(f"invalid FM semitone {semitone}")
    return (FM_PITCH[semitone] | (octave << 11)) & 0xFFFF


class SoundState:
    """Tracks FM, PSG and PCM channel state and emits stream commands."""

    def __init__(self, bank: InstrumentBank, stream: Stream) -> None:
        self.bank = bank
        self.stream = stream
        self._fm = [_FmChannel() for _ in range(8)]
        self._psg = [_PsgChannel() for _ in range(NUM_PSG_CHANNELS)]

    def _write_fm_frequency(self, chan: int, raw: int) -> None:
        bank = chan >> 2
        base = chan & 0x03
        self.stream.add_ym_write(bank, 0xA4 + base, (raw >> 8) & 0xFF)
        self.stream.add_ym_write(bank, 0xA0 + base, raw & 0xFF)

    def key_on_fm(self, chan: int, pitch: int) -> None:
        """Key on an FM channel at an ESF pitch byte."""
        self.stream.add_ym_write(0, 0x28, chan)
        pitch >>= 1
        raw = _fm_frequency(pitch >> 4, pitch & 0x0F)
        self._write_fm_frequency(chan, raw)
        self.stream.add_ym_write(0, 0x28, 0xF0 | chan)

    def _restart_psg(self, chan: int, base_pitch: int) -> None:
        state = self._psg[chan]
        state.playing = True
        state.loop = 0
        state.pos = 0
        state.base_pitch = base_pitch

    def key_on_psg(self, chan: int, pitch: int) -> None:
        """Key on a square wave PSG channel at an ESF pitch byte."""
        self._restart_psg(chan, pitch >> 1)

    def key_on_noise(self, noise: int) -> None:
        """Key on the noise channel with a noise type."""
        self._restart_psg(NOISE_CHANNEL, noise)

    def key_on_pcm(self, instrument_id: int) -> None:
        """Start playing a PCM instrument through the DAC."""
        pcm_id = self.bank.pcm_id(instrument_id)
        self.stream.add_ym_write(0, 0x2A, 0x80)
        self.stream.add_ym_write(0, 0x2B, 0x80)
        self.stream.start_pcm_output(pcm_id)

    def key_off_fm(self, chan: int) -> None:
        """Release all operators of an FM channel."""
        self.stream.add_ym_write(0, 0x28, chan)

    def key_off_psg(self, chan: int) -> None:
        """Mute a PSG channel."""
        self._psg[chan].playing = False

    def key_off_pcm(self) -> None:
        """Stop PCM playback and disable the DAC."""
        self.stream.stop_pcm_output()
        self.stream.add_ym_write(0, 0x2B, 0x00)
        self.stream.add_ym_write(0, 0x2A, 0x80)

    def set_fm_volume(self, chan: int, vol: int) -> None:
        """Attenuate the carrier operators of an FM channel (0 = loudest)."""
        bank = chan >> 2
        reg = 0x40 + (chan & 0x03)
        data = self._fm[chan]

        def write(offset: int, tl: int) -> None:
            self.stream.add_ym_write(bank, reg + offset, min(tl + vol, 0x7F))

        if data.algo == 7:
            write(0x00, data.tl_s1)
        if data.algo >= 5:
            write(0x04, data.tl_s3)
        if data.algo >= 4:
            write(0x08, data.tl_s2)
        write(0x0C, data.tl_s4)

    def set_psg_volume(self, chan: int, vol: int) -> None:
        """Set a PSG channel's attenuation (0 = loudest, 15 = quietest)."""
        self._psg[chan].vol = vol

    def set_fm_pitch(self, chan: int, pitch: int) -> None:
        """Change an FM channel's pitch in semitones."""
        pitch &= 0x7F
        self._write_fm_frequency(chan, _fm_frequency(pitch >> 4, pitch & 0x0F))

    def set_fm_raw_pitch(self, chan: int, freq: int) -> None:
        """Change an FM channel's pitch to a raw YM2612 frequency."""
        self._write_fm_frequency(chan, freq)

    def set_psg_pitch(self, chan: int, pitch: int) -> None:
        """Change a PSG channel's pitch in semitones (or noise type)."""
        self._psg[chan].base_pitch = pitch & 0x7F

    def set_psg_raw_pitch(self, chan: int, freq: int) -> None:
        """Change a square PSG channel's pitch to a raw PSG frequency."""
        state = self._psg[chan]
        state.base_pitch = VOID_PITCH
        state.raw_pitch = freq

    def set_fm_params(self, chan: int, params: int) -> None:
        """Set panning, AMS and PMS of an FM channel."""
        self.stream.add_ym_write(chan >> 2, 0xB4 | (chan & 0x03), params)

    def load_fm_instrument(self, chan: int, instrument_id: int) -> None:
        """Load an FM instrument into a channel.

        Instruments that are not exactly 29 bytes only key off the channel.
        """
        self.stream.add_ym_write(0, 0x28, chan)
        data = self.bank.get(instrument_id)
        if len(data) != FM_INSTRUMENT_SIZE:
            return

        self._fm[chan] = _FmChannel(
            algo=data[0] & 0x07,
            tl_s1=data[5] & 0x7F,
            tl_s3=data[6] & 0x7F,
            tl_s2=data[7] & 0x7F,
            tl_s4=data[8] & 0x7F,
        )

        bank = chan >> 2
        base = chan & 0x03
        for reg, value in zip(FM_INSTRUMENT_FORMAT, data):
            self.stream.add_ym_write(bank, reg + base, value)

    def load_psg_instrument(self, chan: int, instrument_id: int) -> None:
        """Assign a PSG envelope instrument to a channel and mute it."""
        state = self._psg[chan]
        state.playing = False
        state.instrument = self.bank.get(instrument_id)

    def _step_envelope(self, state: _PsgChannel) -> tuple[int, int]:
        """Advance a channel's envelope by one tick; return (volume, pitch offset)."""
        data = state.instrument
        pos = state.pos
        visited: set[int] = set()
        instr_vol = 0x0F
        instr_pitch = 0

        while pos < len(data):
            value = data[pos]
            if value == 0xFE:
                state.loop = pos
                pos += 1
            elif value == 0xFF:
                if pos in visited:
                    raise ValueError("PSG instrument loops without envelope data")
                visited.add(pos)
                pos = state.loop
            else:
                if value < 0xF0:
                    instr_vol = value & 0x0F
                    instr_pitch = PITCH_OFFSET[value >> 4]
                    pos += 1
                break

        state.pos = pos
        return instr_vol, instr_pitch

    def run_ticks(self, ticks: int) -> None:
        """Run the PSG envelopes for a number of ticks, one frame each."""
        for _ in range(ticks):
            for chan, state in enumerate(self._psg):
                if not state.playing:
                    self.stream.add_psg_write(0x9F | (chan << 5))
                    continue

                instr_vol, instr_pitch = self._step_envelope(state)
                final_vol = min(state.vol + instr_vol, 0x0F)
                self.stream.add_psg_write(0x90 | (chan << 5) | final_vol)

                if chan != NOISE_CHANNEL:
                    if state.base_pitch != VOID_PITCH:
                        pitch = state.base_pitch + instr_pitch
                        freq = PSG_PITCH[pitch] if 0 <= pitch < len(PSG_PITCH) else 0
                    else:
                        freq = state.raw_pitch
                    self.stream.add_psg_write(0x80 | (chan << 5) | (freq & 0x0F))
                    self.stream.add_psg_write(freq >> 4)
                else:
                    self.stream.add_psg_write(0xE0 | state.base_pitch)

            self.stream.add_delay(TICK_SAMPLES)