"""Command line tool that converts an Echo stream into a VGM file."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .esf import EsfError, convert_esf
from .gd3 import TrackInfo
from .instruments import InstrumentBank
from .stream import Stream
from .vgm import save_vgm

VERSION = "1.0"
PROG = "echo2vgm"

USAGE = (f"Usage: {PROG} <instruments.txt> <track.esf> <track.vgm> "
         "[track-title] [game-title] [composer] [release] [ripped-by]")


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the converter; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)

    if any(arg in ("--version", "-v") for arg in args):
        print(VERSION)
        return 0

    if not 3 <= len(args) <= 8:
        print(USAGE, file=sys.stderr)
        return 1

    listname, esfname, vgmname = args[:3]
    extra = args[3:] + [""] * (5 - len(args[3:]))
    info = TrackInfo(*extra)

    try:
        bank = InstrumentBank.load(listname)
    except OSError:
        return _error(f"can't open instrument list \"{listname}\"")
    except ValueError as exc:
        return _error(str(exc))

    stream = Stream()
    try:
        convert_esf(esfname, bank, stream)
    except ValueError as exc:
        return _error(str(exc))

    try:
        save_vgm(vgmname, stream, bank.pcm_block, info.to_gd3())
    except OSError:
        return _error(f"can't create VGM file \"{vgmname}\"")

    return 0


if __name__ == "__main__":
    sys.exit(main())