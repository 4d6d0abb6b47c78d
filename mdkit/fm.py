"""FM instruments in Echo's EIF format and TFM Maker's TFI format."""

from __future__ import annotations

from dataclasses import dataclass

EIF_SIZE = 29
TFI_SIZE = 42
NUM_OPERATORS = 4

# Detune values in TFI order, indexed by the YM2612 detune field.
DETUNE_TABLE = (3, 4, 5, 6, 3, 2, 1, 0)

# Start of each per-operator group of registers in an EIF file, with the
# bits that must be clear in it.
_EIF_CHECKS = (
    (0x01, 0x80),   # DT/MUL
    (0x05, 0x80),   # TL
    (0x09, 0x20),   # RS/AR
    (0x0D, 0xE0),   # DR
    (0x11, 0xE0),   # SR
    (0x19, 0xF0),   # SSG-EG
)


class CorruptInstrumentError(ValueError):
    """Raised when data isn't a valid Echo FM instrument."""


@dataclass(frozen=True)
class FmInstrument:
    """An FM instrument: global parameters plus four values per operator."""

    algorithm: int
    feedback: int
    mul: tuple[int, ...]
    dt: tuple[int, ...]
    tl: tuple[int, ...]
    rs: tuple[int, ...]
    ar: tuple[int, ...]
    dr: tuple[int, ...]
    sr: tuple[int, ...]
    rr: tuple[int, ...]
    sl: tuple[int, ...]
    ssg_eg: tuple[int, ...]

    def to_tfi(self) -> bytes:
        """Encode the instrument in TFM Maker's 42-byte TFI format."""
        out = bytearray((self.algorithm, self.feedback))
        for operator in zip(self.mul, self.dt, self.tl, self.rs, self.ar,
                            self.dr, self.sr, self.rr, self.sl, self.ssg_eg):
            out.extend(operator)
        return bytes(out)


def read_eif(data: bytes) -> FmInstrument:
    """Decode a 29-byte EIF instrument.

    Raises CorruptInstrumentError if the data has the wrong size or holds
    values out of range.
    """
    data = bytes(data)
    if len(data) != EIF_SIZE:
        raise CorruptInstrumentError(
            f"expected {EIF_SIZE} bytes, got {len(data)}")

    if data[0] & 0xC0:
        raise CorruptInstrumentError("invalid algorithm/feedback byte")
    for base, mask in _EIF_CHECKS:
        if any(value & mask for value in data[base:base + NUM_OPERATORS]):
            raise CorruptInstrumentError(
                f"invalid value in registers at offset {base}")

    def group(base: int) -> bytes:
        return data[base:base + NUM_OPERATORS]

    return FmInstrument(
        algorithm=data[0] & 0x07,
        feedback=data[0] >> 3,
        mul=tuple(value & 0x0F for value in group(0x01)),
        dt=tuple(DETUNE_TABLE[value >> 4 & 0x03] for value in group(0x01)),
        tl=tuple(value & 0x7F for value in group(0x05)),
        rs=tuple(value >> 6 for value in group(0x09)),
        ar=tuple(value & 0x1F for value in group(0x09)),
        dr=tuple(value & 0x1F for value in group(0x0D)),
        sr=tuple(value & 0x1F for value in group(0x11)),
        rr=tuple(value & 0x0F for value in group(0x15)),
        sl=tuple(value >> 4 for value in group(0x15)),
        ssg_eg=tuple(value & 0x0F for value in group(0x19)),
    )