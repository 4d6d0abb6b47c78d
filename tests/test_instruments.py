import pytest

from mdkit.instruments import InstrumentBank


def _write_list(tmp_path, entries):
    listfile = tmp_path / "list.txt"
    listfile.write_text("".join(f"{e}\n" for e in entries), encoding="utf-8")
    return listfile


def test_load_and_get(tmp_path):
    a = tmp_path / "a.eif"
    a.write_bytes(b"\x01\x02")
    b = tmp_path / "b.eif"
    b.write_bytes(b"\x03")
    bank = InstrumentBank.load(_write_list(tmp_path, [a, "", b]))
    assert bank.get(0) == b"\x01\x02"
    assert bank.get(1) == b"\x03"
    assert bank.get(2) == b""


def test_missing_instrument_warns_and_is_empty(tmp_path, capsys):
    a = tmp_path / "a.eif"
    a.write_bytes(b"\x05")
    missing = tmp_path / "nope.eif"
    bank = InstrumentBank.load(_write_list(tmp_path, [missing, a]))
    assert bank.get(0) == b""
    assert bank.get(1) == b"\x05"
    assert "can't load instrument" in capsys.readouterr().err


def test_missing_list_raises(tmp_path):
    with pytest.raises(OSError):
        InstrumentBank.load(tmp_path / "absent.txt")


def test_too_many_instruments():
    with pytest.raises(ValueError):
        InstrumentBank([b"\x00"] * 0x101)


def test_pcm_block_layout():
    bank = InstrumentBank([b"\x01\x02\x03\xff"])
    assert bank.pcm_id(0) == 0
    assert bank.pcm_block == b"\x67\x66\x00\x03\x00\x00\x00\x01\x02\x03"


def test_pcm_ids_are_reused_and_sequential():
    bank = InstrumentBank([b"\x10\xff", b"\x20\x21\xff"])
    assert bank.pcm_id(1) == 0
    assert bank.pcm_id(0) == 1
    before = bank.pcm_block
    assert bank.pcm_id(1) == 0
    assert bank.pcm_block == before
    assert before.startswith(b"\x67\x66\x00\x02\x00\x00\x00\x20\x21")


def test_pcm_of_missing_instrument_raises():
    bank = InstrumentBank([None])
    with pytest.raises(ValueError):
        bank.mark_as_pcm(0)