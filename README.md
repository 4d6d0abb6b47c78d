# mdkit

Tools for Mega Drive / Genesis development:

- **echo2vgm**: renders an Echo stream (ESF) with its instruments into a VGM
  file, including PCM data blocks and a GD3 track information tag.
- **eif2tfi**: converts an Echo FM instrument (EIF) into a TFM Maker
  instrument (TFI).
- **headgen**: generates a Mega Drive ROM header as assembly source.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Command line

### echo2vgm

```
echo2vgm <instruments.txt> <track.esf> <track.vgm> [track-title] [game-title] [composer] [release] [ripped-by]
```

`instruments.txt` lists instrument files one per line, in the order of their
IDs. Blank lines are skipped. An instrument that can't be loaded only
produces a warning and is treated as empty. `-v` or `--version` prints the
version. The exit status is 0 on success and 1 on any error.

PSG envelopes are run once per 60 Hz tick (735 samples at 44100 Hz), and PCM
instruments are streamed to the YM2612 DAC at 10650 Hz.

### eif2tfi

```
eif2tfi <infile> <outfile>
```

The input must be a valid 29-byte Echo FM instrument; the output is a 42-byte
TFI file. `-h` or `--help` shows help, `-v` or `--version` shows the version,
and `--` ends option parsing.

### headgen

```
headgen -t "MY GAME" -c "ACME" -6 -s header.asm
```

| Option | Meaning |
| --- | --- |
| `-t`, `--title` | game title (up to 48 characters, upper-cased) |
| `-c`, `--copyright` | copyright code (up to 4 characters, upper-cased) |
| `-6`, `--6pad` | 6-button pad support |
| `-m`, `--mouse` | mouse support |
| `-cd`, `--megacd` | Mega CD support |
| `-s`, `--sram` | SRAM support |
| `-h`, `--help` | show help |
| `-v`, `--version` | show the version |

Without an output file the header is written to standard output. The release
date is the current month (UTC). The standard 3-button pad is always listed
as supported.

## Library use

```python
from mdkit.fm import read_eif

with open("bass.eif", "rb") as f:
    instrument = read_eif(f.read())
tfi_bytes = instrument.to_tfi()
```

```python
from mdkit.headgen import HeaderInfo, generate_asm

print(generate_asm(HeaderInfo(title="MY GAME", copyright="ACME", year=2024, month=0)))
```

`HeaderInfo.month` counts from 0 (January).

```python
from mdkit.esf import convert_esf
from mdkit.gd3 import TrackInfo
from mdkit.instruments import InstrumentBank
from mdkit.stream import Stream
from mdkit.vgm import build_vgm, save_vgm

bank = InstrumentBank.load("instruments.txt")
stream = Stream()
convert_esf("track.esf", bank, stream)
gd3 = TrackInfo(title="Theme").to_gd3()
save_vgm("track.vgm", stream, bank.pcm_block, gd3)
```

`parse_esf(data, bank, stream)` does the same as `convert_esf` for ESF data
already in memory, and `build_vgm` returns the VGM file as bytes instead of
writing it.

A bad ESF file raises `EsfError`. A bad EIF instrument raises
`CorruptInstrumentError`. Both are subclasses of `ValueError`.

## Limitations

- echo2vgm only writes VGM files; it does not play audio.
- eif2tfi converts one way only, from EIF to TFI.
- headgen leaves the ROM checksum at `$0000` and the serial number as
  `GM ????????-00`; it does not compute either.