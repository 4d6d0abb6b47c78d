import pytest

from mdkit.channels import SoundState
from mdkit.instruments import InstrumentBank
from mdkit.stream import CommandType, Stream, StreamCommand


def make_state(instruments=()):
    bank = InstrumentBank(instruments)
    stream = Stream()
    return SoundState(bank, stream), stream, bank


def ym(bank, reg, value):
    kind = CommandType.YMREG1 if bank else CommandType.YMREG0
    return StreamCommand(kind, reg, value)


def psg_writes(stream):
    return [c.value1 for c in stream if c.type == CommandType.PSGREG]


def test_key_on_fm_sequence():
    state, stream, _ = make_state()
    state.key_on_fm(0, 0)
    assert stream.commands == [
        ym(0, 0x28, 0),
        ym(0, 0xA4, 644 >> 8),
        ym(0, 0xA0, 644 & 0xFF),
        ym(0, 0x28, 0xF0),
    ]


def test_key_on_fm_bank_one_channel():
    state, stream, _ = make_state()
    state.key_on_fm(5, 0)
    assert stream.commands[0] == ym(0, 0x28, 5)
    assert stream.commands[1].type == CommandType.YMREG1
    assert stream.commands[1].value1 == 0xA5
    assert stream.commands[2].value1 == 0xA1
    assert stream.commands[3] == ym(0, 0x28, 0xF5)


def test_key_on_fm_matches_set_fm_pitch():
    a, stream_a, _ = make_state()
    b, stream_b, _ = make_state()
    a.key_on_fm(2, 0x35 << 1)
    b.set_fm_pitch(2, 0x35)
    assert stream_a.commands[1:3] == stream_b.commands


def test_set_fm_pitch_ignores_top_bit():
    a, stream_a, _ = make_state()
    b, stream_b, _ = make_state()
    a.set_fm_pitch(1, 0x80 | 0x2B)
    b.set_fm_pitch(1, 0x2B)
    assert stream_a.commands == stream_b.commands


def test_invalid_fm_semitone_raises():
    state, _, _ = make_state()
    with pytest.raises(ValueError):
        state.key_on_fm(0, 0x0F << 1)


def test_set_fm_raw_pitch():
    state, stream, _ = make_state()
    state.set_fm_raw_pitch(1, 0x1234)
    assert stream.commands == [ym(0, 0xA5, 0x12), ym(0, 0xA1, 0x34)]


def test_set_fm_params():
    state, stream, _ = make_state()
    state.set_fm_params(6, 0xC0)
    assert stream.commands == [ym(1, 0xB6, 0xC0)]


def test_key_off_fm():
    state, stream, _ = make_state()
    state.key_off_fm(4)
    assert stream.commands == [ym(0, 0x28, 4)]


def test_default_fm_volume_only_touches_s4():
    state, stream, _ = make_state()
    state.set_fm_volume(0, 10)
    assert stream.commands == [ym(0, 0x4C, 0x7F)]


def fm_instrument(algo, tls):
    data = bytearray(29)
    data[0] = algo
    data[5:9] = bytes(tls)
    return bytes(data)


def test_load_fm_instrument_writes_all_registers():
    inst = fm_instrument(0x07, [0x10, 0x20, 0x30, 0x7E])
    state, stream, _ = make_state([inst])
    state.load_fm_instrument(4, 0)
    assert stream.commands[0] == ym(0, 0x28, 4)
    assert len(stream.commands) == 30
    writes = stream.commands[1:]
    assert all(c.type == CommandType.YMREG1 for c in writes)
    assert writes[0].value1 == 0xB0
    assert [c.value2 for c in writes] == list(inst)


def test_fm_volume_after_algorithm_7_instrument():
    inst = fm_instrument(0x07, [0x10, 0x20, 0x30, 0x7E])
    state, stream, _ = make_state([inst])
    state.load_fm_instrument(0, 0)
    stream.commands.clear()
    state.set_fm_volume(0, 2)
    assert stream.commands == [
        ym(0, 0x40, inst[5] + 2),
        ym(0, 0x44, inst[6] + 2),
        ym(0, 0x48, inst[7] + 2),
        ym(0, 0x4C, 0x7F),
    ]


def test_fm_volume_algorithm_4_writes_two_operators():
    inst = fm_instrument(0x04, [0x10, 0x20, 0x30, 0x00])
    state, stream, _ = make_state([inst])
    state.load_fm_instrument(1, 0)
    stream.commands.clear()
    state.set_fm_volume(1, 1)
    assert [c.value1 for c in stream] == [0x49, 0x4D]


def test_load_fm_instrument_wrong_size_only_keys_off():
    state, stream, _ = make_state([b"\x00" * 10])
    state.load_fm_instrument(2, 0)
    assert stream.commands == [ym(0, 0x28, 2)]


def test_idle_ticks_mute_all_psg_channels():
    state, stream, _ = make_state()
    state.run_ticks(3)
    assert psg_writes(stream) == [0x9F, 0xBF, 0xDF, 0xFF] * 3
    assert stream.samples == 735 * 3
    delays = [c for c in stream if c.type == CommandType.DELAY]
    assert len(delays) == 3


def test_psg_envelope_volume_and_pitch():
    state, stream, _ = make_state([bytes([0x03])])
    state.load_psg_instrument(0, 0)
    state.key_on_psg(0, 0)
    state.set_psg_volume(0, 1)
    state.run_ticks(2)
    writes = psg_writes(stream)
    first = writes[:6]
    assert first == [0x90 | 4, 0x80 | (851 & 0x0F), 851 >> 4, 0xBF, 0xDF, 0xFF]
    second = writes[6:9]
    assert second[0] == 0x9F


def test_psg_pitch_offset_up_an_octave():
    state, stream, _ = make_state([bytes([0x70])])
    state.load_psg_instrument(1, 0)
    state.key_on_psg(1, 0)
    state.run_ticks(1)
    writes = psg_writes(stream)
    assert writes[1:4] == [0xB0, 0xA0 | (425 & 0x0F), 425 >> 4]


def test_psg_pitch_below_range_gives_zero_frequency():
    state, stream, _ = make_state([bytes([0xE0])])
    state.load_psg_instrument(0, 0)
    state.key_on_psg(0, 0)
    state.run_ticks(1)
    assert psg_writes(stream)[:3] == [0x90, 0x80, 0x00]


def test_psg_envelope_loop():
    state, stream, _ = make_state([bytes([0xFE, 0x01, 0x02, 0xFF])])
    state.load_psg_instrument(0, 0)
    state.key_on_psg(0, 0)
    state.run_ticks(4)
    volumes = [w for w in psg_writes(stream) if (w & 0xF0) == 0x90]
    assert [v & 0x0F for v in volumes] == [1, 2, 1, 2]


def test_psg_envelope_loop_without_data_raises():
    state, _, _ = make_state([bytes([0xFE, 0xFF])])
    state.load_psg_instrument(0, 0)
    state.key_on_psg(0, 0)
    with pytest.raises(ValueError):
        state.run_ticks(1)


def test_psg_raw_pitch():
    state, stream, _ = make_state([bytes([0x00])])
    state.load_psg_instrument(1, 0)
    state.key_on_psg(1, 0)
    state.set_psg_raw_pitch(1, 0x3FF)
    state.run_ticks(1)
    assert psg_writes(stream)[1:4] == [0xB0, 0xA0 | 0x0F, 0x3F]


def test_noise_channel():
    state, stream, _ = make_state([bytes([0x00])])
    state.load_psg_instrument(3, 0)
    state.key_on_noise(5)
    state.run_ticks(1)
    assert psg_writes(stream) == [0x9F, 0xBF, 0xDF, 0xF0, 0xE5]


def test_key_off_psg_mutes_channel():
    state, stream, _ = make_state([bytes([0x00, 0x00])])
    state.load_psg_instrument(2, 0)
    state.key_on_psg(2, 0)
    state.key_off_psg(2)
    state.run_ticks(1)
    assert psg_writes(stream) == [0x9F, 0xBF, 0xDF, 0xFF]


def test_missing_psg_instrument_is_silent():
    state, stream, _ = make_state()
    state.load_psg_instrument(0, 7)
    state.key_on_psg(0, 0)
    state.run_ticks(1)
    assert psg_writes(stream)[0] == 0x9F


def test_key_on_pcm_allocates_blocks():
    state, stream, bank = make_state([b"\x01\x02\xFF", b"\x03\xFF"])
    state.key_on_pcm(1)
    state.key_on_pcm(0)
    state.key_on_pcm(1)
    assert stream.commands[:3] == [
        ym(0, 0x2A, 0x80),
        ym(0, 0x2B, 0x80),
        StreamCommand(CommandType.STARTPCM, 0),
    ]
    starts = [c.value1 for c in stream if c.type == CommandType.STARTPCM]
    assert starts == [0, 1, 0]
    assert b"\x03" in bank.pcm_block and b"\x01\x02" in bank.pcm_block


def test_key_off_pcm():
    state, stream, _ = make_state()
    state.key_off_pcm()
    assert stream.commands == [
        StreamCommand(CommandType.STOPPCM),
        ym(0, 0x2B, 0x00),
        ym(0, 0x2A, 0x80),
    ]