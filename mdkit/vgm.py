"""VGM file generation from a command stream."""

from __future__ import annotations

import os
import struct
import sys

from .stream import CommandType, Stream

HEADER_SIZE = 0x100

HEADER_EOFOFFSET = 0x04
HEADER_VERSION = 0x08
HEADER_PSGCLOCK = 0x0C
HEADER_GD3OFFSET = 0x14
HEADER_TOTALSAMPLES = 0x18
HEADER_LOOPOFFSET = 0x1C
HEADER_LOOPSAMPLES = 0x20
HEADER_PSGNOISEFEEDBACK = 0x28
HEADER_PSGNOISEWIDTH = 0x2A
HEADER_YMCLOCK = 0x2C
HEADER_VGMOFFSET = 0x34

VERSION = 0x160
YMCLOCK = 7670454
PSGCLOCK = 3579545
PSGNOISEFEEDBACK = 9
PSGNOISEWIDTH = 16

VGMCMD_PSGREG = 0x50
VGMCMD_YMREG0 = 0x52
VGMCMD_YMREG1 = 0x53
VGMCMD_DELAY = 0x61
VGMCMD_END = 0x66
VGMCMD_SETUPPCMCHIP = 0x90
VGMCMD_SETUPPCMDATA = 0x91
VGMCMD_SETPCMFREQ = 0x92
VGMCMD_STOPPCM = 0x94
VGMCMD_STARTPCM = 0x95

_INIT_PCM = bytes((
    VGMCMD_SETUPPCMCHIP, 0x00, 0x02, 0x00, 0x2A,
    VGMCMD_SETUPPCMDATA, 0x00, 0x00, 0x01, 0x00,
))


def _u32(value: int) -> bytes:
    return struct.pack("<I", value & 0xFFFFFFFF)


def _build_header(stream: Stream, pcm_size: int, gd3_size: int) -> bytes:
    header = bytearray(HEADER_SIZE)
    header[0:4] = b"Vgm "

    data_end = HEADER_SIZE + stream.size + pcm_size
    if stream.has_loop:
        loop_offset = stream.loop_offset + pcm_size + HEADER_SIZE - HEADER_LOOPOFFSET
        loop_length = stream.loop_length()
    else:
        loop_offset = 0
        loop_length = 0

    fields = {
        HEADER_VERSION: VERSION,
        HEADER_TOTALSAMPLES: stream.samples,
        HEADER_VGMOFFSET: HEADER_SIZE - HEADER_VGMOFFSET,
        HEADER_LOOPOFFSET: loop_offset,
        HEADER_LOOPSAMPLES: loop_length,
        HEADER_GD3OFFSET: data_end - HEADER_GD3OFFSET,
        HEADER_EOFOFFSET: data_end + gd3_size - HEADER_EOFOFFSET,
        HEADER_YMCLOCK: YMCLOCK,
        HEADER_PSGCLOCK: PSGCLOCK,
    }
    for offset, value in fields.items():
        header[offset:offset + 4] = _u32(value)

    header[HEADER_PSGNOISEFEEDBACK:HEADER_PSGNOISEFEEDBACK + 2] = \
        struct.pack("<H", PSGNOISEFEEDBACK)
    header[HEADER_PSGNOISEWIDTH] = PSGNOISEWIDTH
    return bytes(header)


def _encode_commands(stream: Stream) -> bytes:
    out = bytearray()
    for cmd in stream:
        kind = cmd.type
        if kind == CommandType.DELAY:
            out += bytes((VGMCMD_DELAY,)) + struct.pack("<H", cmd.value1 & 0xFFFF)
        elif kind in (CommandType.YMREG0, CommandType.YMREG1):
            opcode = VGMCMD_YMREG1 if kind == CommandType.YMREG1 else VGMCMD_YMREG0
            out += bytes((opcode, cmd.value1 & 0xFF, cmd.value2 & 0xFF))
        elif kind == CommandType.PSGREG:
            out += bytes((VGMCMD_PSGREG, cmd.value1 & 0xFF))
        elif kind == CommandType.INITPCM:
            out += _INIT_PCM
        elif kind == CommandType.STARTPCM:
            out += (bytes((VGMCMD_STARTPCM, 0x00))
                    + struct.pack("<H", cmd.value1 & 0xFFFF) + b"\x00")
        elif kind == CommandType.STOPPCM:
            out += bytes((VGMCMD_STOPPCM, 0x00))
        elif kind == CommandType.SETPCMFREQ:
            out += bytes((VGMCMD_SETPCMFREQ, 0x00)) + _u32(cmd.value1)
        elif kind == CommandType.END:
            out += bytes((VGMCMD_END,))
        else:
            print(f"[INTERNAL] Warning: unhandled command type {int(kind)}!",
                  file=sys.stderr)
    return bytes(out)


def build_vgm(stream: Stream, pcm_block: bytes, gd3: bytes) -> bytes:
    """Assemble a complete VGM file: header, PCM block, commands, GD3 tag."""
    header = _build_header(stream, len(pcm_block), len(gd3))
    return header + bytes(pcm_block) + _encode_commands(stream) + bytes(gd3)


def save_vgm(filename: str | os.PathLike, stream: Stream, pcm_block: bytes,
             gd3: bytes) -> None:
    """Write a VGM file. Raises OSError if it can't be created or written."""
    data = build_vgm(stream, pcm_block, gd3)
    with open(filename, "wb") as vgmfile:
        vgmfile.write(data)