"""Command line tool that converts Echo FM instruments to TFI files."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .fm import EIF_SIZE, CorruptInstrumentError, read_eif

VERSION = "1.0b"
PROG = "eif2tfi"

HELP = (
    "Usage:\n"
    f"  {PROG} <infile> <outfile>\n"
    "\n"
    "Options:\n"
    "  -h or --help ...... Show this help\n"
    "  -v or --version ... Show tool version"
)


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the converter; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)

    failed = False
    show_help = False
    show_ver = False
    scan_options = True
    too_many = False
    filenames: list[str] = []

    for arg in args:
        if scan_options and arg.startswith("-"):
            if arg == "--":
                scan_options = False
            elif arg in ("-h", "--help"):
                show_help = True
            elif arg in ("-v", "--version"):
                show_ver = True
            else:
                print(f"Error: unknown option \"{arg}\"", file=sys.stderr)
                failed = True
        elif len(filenames) < 2:
            filenames.append(arg)
        else:
            too_many = True

    if not show_help and not show_ver:
        if not filenames:
            failed = True
            print("Error: input filename missing", file=sys.stderr)
        elif len(filenames) < 2:
            failed = True
            print("Error: output filename missing", file=sys.stderr)
        elif too_many:
            failed = True
            print("Error: too many filenames specified", file=sys.stderr)

    if failed:
        return 1
    if show_ver:
        print(VERSION)
        return 0
    if show_help:
        print(HELP)
        return 0

    infilename, outfilename = filenames

    try:
        infile = open(infilename, "rb")
    except OSError:
        return _error(f"can't open input file \"{infilename}\"")

    with infile:
        try:
            outfile = open(outfilename, "wb")
        except OSError:
            return _error(f"can't open output file \"{outfilename}\"")

        with outfile:
            try:
                data = infile.read(EIF_SIZE + 1)
            except OSError:
                return _error("can't read from input file")

            try:
                instrument = read_eif(data)
            except CorruptInstrumentError:
                return _error("input file isn't a valid Echo FM instrument")

            try:
                outfile.write(instrument.to_tfi())
            except OSError:
                return _error("can't write to output file")

    return 0


if __name__ == "__main__":
    sys.exit(main())