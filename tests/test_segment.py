import pytest

from qrgen.bitbuffer import BitBuffer
from qrgen.errors import RangeError, ValidationError
from qrgen.segment import (
    Mode,
    QrSegment,
    get_total_bits,
    is_alphanumeric,
    is_numeric,
    make_alphanumeric,
    make_bytes,
    make_eci,
    make_numeric,
    make_segments,
)


def bits(value: int, width: int) -> list[int]:
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


@pytest.mark.parametrize(
    "mode,version,expected",
    [
        (Mode.NUMERIC, 1, 10), (Mode.NUMERIC, 9, 10), (Mode.NUMERIC, 10, 12),
        (Mode.NUMERIC, 26, 12), (Mode.NUMERIC, 27, 14), (Mode.NUMERIC, 40, 14),
        (Mode.ALPHANUMERIC, 1, 9), (Mode.ALPHANUMERIC, 27, 13),
        (Mode.BYTE, 9, 8), (Mode.BYTE, 10, 16), (Mode.BYTE, 40, 16),
        (Mode.KANJI, 20, 10), (Mode.ECI, 40, 0),
    ],
)
def test_char_count_bits(mode: Mode, version: int, expected: int):
    assert mode.num_char_count_bits(version) == expected


def test_mode_indicators():
    assert [m.mode_bits for m in Mode] == [0x1, 0x2, 0x4, 0x8, 0x7]


def test_make_numeric_groups_of_three():
    seg = make_numeric("01234567")
    assert seg.mode is Mode.NUMERIC
    assert seg.num_chars == 8
    assert list(seg.data) == bits(12, 10) + bits(345, 10) + bits(67, 7)


def test_make_numeric_single_trailing_digit():
    assert list(make_numeric("1234").data) == bits(123, 10) + bits(4, 4)


@pytest.mark.parametrize("text", ["12a", "1 2", "١٢٣", "-1"])
def test_make_numeric_rejects(text: str):
    with pytest.raises(ValidationError):
        make_numeric(text)


def test_make_alphanumeric_pairs():
    seg = make_alphanumeric("AC-42")
    assert seg.mode is Mode.ALPHANUMERIC
    assert seg.num_chars == 5
    assert list(seg.data) == bits(10 * 45 + 12, 11) + bits(41 * 45 + 4, 11) + bits(2, 6)


@pytest.mark.parametrize("text", ["hello", "A,B", "A\nB", "É"])
def test_make_alphanumeric_rejects(text: str):
    with pytest.raises(ValidationError):
        make_alphanumeric(text)


def test_make_bytes():
    seg = make_bytes(b"\x00\xff")
    assert seg.mode is Mode.BYTE
    assert seg.num_chars == 2
    assert list(seg.data) == [0] * 8 + [1] * 8


@pytest.mark.parametrize("data", [[1, 256], [-1], ["a"]])
def test_make_bytes_rejects_non_bytes(data):
    with pytest.raises(ValidationError):
        make_bytes(data)


def test_make_bytes_accepts_int_sequence():
    seg = make_bytes([0, 255])
    assert seg.num_chars == 2
    assert list(seg.data) == [0] * 8 + [1] * 8


def test_empty_segments_are_valid():
    assert make_numeric("").bit_length == 0
    assert make_alphanumeric("").bit_length == 0
    assert make_bytes(b"").num_chars == 0


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, bits(0, 8)),
        (127, bits(127, 8)),
        (128, [1, 0] + bits(128, 14)),
        (16383, [1, 0] + bits(16383, 14)),
        (16384, [1, 1, 0] + bits(16384, 21)),
        (999_999, [1, 1, 0] + bits(999_999, 21)),
    ],
)
def test_make_eci(value: int, expected: list[int]):
    seg = make_eci(value)
    assert seg.mode is Mode.ECI
    assert seg.num_chars == 0
    assert list(seg.data) == expected


@pytest.mark.parametrize("value", [-1, 1_000_000])
def test_make_eci_out_of_range(value: int):
    with pytest.raises(RangeError):
        make_eci(value)


def test_make_segments_picks_single_mode():
    assert make_segments("") == []
    [seg] = make_segments("0123")
    assert seg.mode is Mode.NUMERIC
    [seg] = make_segments("HELLO WORLD")
    assert seg.mode is Mode.ALPHANUMERIC
    [seg] = make_segments("Hello, world")
    assert seg.mode is Mode.BYTE
    assert seg.num_chars == 12


def test_make_segments_utf8_byte_count():
    [seg] = make_segments("é€")
    assert seg.mode is Mode.BYTE
    assert seg.num_chars == len("é€".encode("utf-8")) == 5


def test_mixed_text_stays_one_segment():
    segs = make_segments("ABC123abc")
    assert len(segs) == 1
    assert segs[0].mode is Mode.BYTE


def test_predicates():
    assert is_numeric("")
    assert is_numeric("0123456789")
    assert not is_numeric("12 ")
    assert is_alphanumeric("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:")
    assert not is_alphanumeric("abc")


def test_segment_is_detached_from_buffer():
    bb = BitBuffer([1, 0, 1])
    seg = QrSegment(Mode.BYTE, 0, bb)
    bb.append_bits(1, 1)
    assert seg.bit_length == 3


def test_segment_payload_cannot_be_changed():
    seg = make_numeric("123")
    before = hash(seg)
    seg.data.append_bits(0b1010, 4)
    assert seg.bit_length == 10
    assert list(seg.data) == bits(123, 10)
    assert hash(seg) == before
    assert seg == make_numeric("123")


def test_segment_rejects_non_bits():
    with pytest.raises(RangeError):
        QrSegment(Mode.BYTE, 0, (0, 2))


def test_segment_rejects_negative_count():
    with pytest.raises(RangeError):
        QrSegment(Mode.BYTE, -1, BitBuffer())


def test_total_bits():
    segs = [make_numeric("0123"), make_alphanumeric("AB")]
    # 4 + 10 + 14  and  4 + 9 + 11
    assert get_total_bits(segs, 1) == 28 + 24
    # wider count fields at version 10
    assert get_total_bits(segs, 10) == 30 + 26
    assert get_total_bits([], 1) == 0


def test_total_bits_char_count_overflow():
    seg = QrSegment(Mode.BYTE, 1 << 10, BitBuffer())
    assert get_total_bits([seg], 1) == -1
    assert get_total_bits([seg], 10) == 4 + 16


def test_total_bits_exact_field_limit():
    assert get_total_bits([QrSegment(Mode.BYTE, 255, BitBuffer())], 1) == 12
    assert get_total_bits([QrSegment(Mode.BYTE, 256, BitBuffer())], 1) == -1
