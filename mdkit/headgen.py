"""Command line tool that generates a Mega Drive ROM header as assembly."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

VERSION = "1.0"
PROG = "headgen"

# Limits fixed by the header format.
MAX_TITLE = 48
MAX_COPYRIGHT = 4
MAX_DEVICES = 16

MONTHS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

HELP = (
    "Usage:\n"
    f"  {PROG} <options>\n"
    "\n"
    "Options:\n"
    "  -t or --title ....... Set game title\n"
    "  -c or --copyright ... Set copyright code\n"
    "\n"
    "  -6 or --6pad ........ Specify 6-pad support\n"
    "  -m or --mouse ....... Specify mouse support\n"
    "  -cd or --megacd ..... Specify Mega CD support\n"
    "  -s or --sram ........ Specify SRAM support\n"
    "\n"
    "  -h or --help ........ Show this help\n"
    "  -v or --version ..... Show tool version\n"
    "\n"
    "The -t and -c options take an extra argument following them,\n"
    f"for example: {PROG} -t \"SONIC THE HEDGEHOG\" -c \"SEGA\"."
)

_ASCII_UPPER = str.maketrans("abcdefghijklmnopqrstuvwxyz",
                             "ABCDEFGHIJKLMNOPQRSTUVWXYZ")


def _normalize(text: str, limit: int) -> str:
    """Truncate to ``limit`` characters and upper-case ASCII letters."""
    return text[:limit].translate(_ASCII_UPPER)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HeaderInfo:
    """Information shown in the ROM header.

    ``month`` counts from 0 (January). Year and month default to today (UTC).
    Title and copyright are truncated to their maximum length and upper-cased.
    """

    title: str = ""
    copyright: str = ""
    year: int = field(default_factory=lambda: _utc_now().year)
    month: int = field(default_factory=lambda: _utc_now().month - 1)
    pad6: bool = False
    mouse: bool = False
    megacd: bool = False
    sram: bool = False

    def __post_init__(self) -> None:
        self.title = _normalize(self.title, MAX_TITLE)
        self.copyright = _normalize(self.copyright, MAX_COPYRIGHT)

    @property
    def devices(self) -> str:
        """Device support string; the standard 3-pad is always supported."""
        flags = ((self.pad6, "6"), (self.mouse, "M"), (self.megacd, "C"))
        return "J" + "".join(code for enabled, code in flags if enabled)


def generate_asm(header: HeaderInfo) -> str:
    """Return the Mega Drive header as assembly source.

    Raises ValueError if the month or year is out of range.
    """
    if not 0 <= header.month < len(MONTHS):
        raise ValueError(f"invalid month {header.month}")
    if header.year < 0:
        raise ValueError(f"invalid year {header.year}")

    lines = [
        '    dc.b    "SEGA MEGA DRIVE "',
        f'    dc.b    "(C){header.copyright:<4} '
        f'{header.year:04d}.{MONTHS[header.month]}"',
        f'    dc.b    "{header.title:<48}"',
        f'    dc.b    "{header.title:<48}"',
        '    dc.b    "GM ????????-00"',
        "    dc.w    $0000",
        f'    dc.b    "{header.devices:<16}"',
        "    dc.l    $000000, $3FFFFF",
        "    dc.l    $FF0000, $FFFFFF",
    ]
    if header.sram:
        lines.append('    dc.b    "RA", $F8, $20')
        lines.append("    dc.l    $200001, $20FFFF")
    else:
        lines.append("    dcb.b   12, $20")
    lines += [
        "    dcb.b   12, $20",
        "    dcb.b   40, $20",
        '    dc.b    "JUE"',
        "    dcb.b   13, $20",
    ]
    return "\n".join(lines) + "\n"


def _complain(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the header generator; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)

    failed = False
    show_help = False
    show_ver = False
    scan_options = True
    too_many = False
    outfilename: Optional[str] = None

    text_options = {
        "-t": ("title", "game title"), "--title": ("title", "game title"),
        "-c": ("copyright", "copyright code"),
        "--copyright": ("copyright", "copyright code"),
    }
    flag_options = {
        "-6": "pad6", "--6pad": "pad6",
        "-m": "mouse", "--mouse": "mouse",
        "-cd": "megacd", "--megacd": "megacd",
        "-s": "sram", "--sram": "sram",
    }
    texts = {"title": "", "copyright": ""}
    flags = {"pad6": False, "mouse": False, "megacd": False, "sram": False}

    remaining = iter(args)
    for arg in remaining:
        if scan_options and arg.startswith("-"):
            if arg == "--":
                scan_options = False
            elif arg in text_options:
                key, what = text_options[arg]
                if texts[key]:
                    _complain(f"{what} already specified")
                    failed = True
                    continue
                value = next(remaining, None)
                if value is None:
                    _complain(f"missing {what}")
                    failed = True
                elif not value:
                    _complain(f"{what} is empty")
                    failed = True
                else:
                    texts[key] = value
            elif arg in flag_options:
                flags[flag_options[arg]] = True
            elif arg in ("-h", "--help"):
                show_help = True
            elif arg in ("-v", "--version"):
                show_ver = True
            else:
                _complain(f"unknown option \"{arg}\"")
                failed = True
        elif outfilename is None:
            outfilename = arg
        else:
            too_many = True

    if not show_help and not show_ver and too_many:
        failed = True
        _complain("too many filenames specified")

    if failed:
        return 1
    if show_ver:
        print(VERSION)
        return 0

    header = HeaderInfo(title=texts["title"], copyright=texts["copyright"],
                        **flags)

    if outfilename is None:
        if show_help:
            print(HELP)
            return 0
        try:
            sys.stdout.write(generate_asm(header))
            sys.stdout.flush()
        except OSError:
            _complain("can't write header")
            return 1
        return 0

    try:
        out = open(outfilename, "w", encoding="utf-8")
    except OSError:
        _complain(f"can't open output file \"{outfilename}\"")
        return 1

    with out:
        if show_help:
            print(HELP)
            return 0
        try:
            out.write(generate_asm(header))
        except OSError:
            _complain("can't write header")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())