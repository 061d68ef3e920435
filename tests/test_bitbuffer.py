import pytest

from qrgen import bitbuffer
from qrgen.bitbuffer import BitBuffer
from qrgen.errors import CapacityError, RangeError, ValidationError


def test_append_bits_msb_first():
    bb = BitBuffer()
    bb.append_bits(5, 3)
    bb.append_bits(1, 2)
    assert list(bb) == [1, 0, 1, 0, 1]
    assert len(bb) == 5
    assert bb.bit_at(0) == 1
    assert bb[1] == 0


def test_append_zero_length_is_noop():
    bb = BitBuffer()
    bb.append_bits(0, 0)
    assert len(bb) == 0


@pytest.mark.parametrize("value,length", [(8, 3), (-1, 4), (0, 32), (1, -1), (1 << 31, 31)])
def test_append_bits_rejects_values_outside_width(value: int, length: int):
    with pytest.raises(RangeError):
        BitBuffer().append_bits(value, length)


def test_append_bits_accepts_31_bits():
    bb = BitBuffer()
    bb.append_bits((1 << 31) - 1, 31)
    assert list(bb) == [1] * 31


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_bit_at_out_of_range(index: int):
    bb = BitBuffer([1, 0, 1])
    with pytest.raises(IndexError):
        bb.bit_at(index)


def test_append_data_keeps_order_and_source():
    a = BitBuffer([1, 1])
    b = BitBuffer([0, 1, 0])
    a.append_data(b)
    assert list(a) == [1, 1, 0, 1, 0]
    assert list(b) == [0, 1, 0]


def test_copy_is_independent():
    a = BitBuffer([1, 0])
    b = a.copy()
    b.append_bits(1, 1)
    assert len(a) == 2
    assert len(b) == 3


def test_capacity_guard(monkeypatch):
    monkeypatch.setattr(bitbuffer, "MAX_LENGTH", 10)
    bb = BitBuffer()
    bb.append_bits(0, 8)
    with pytest.raises(CapacityError):
        bb.append_bits(0, 3)
    with pytest.raises(CapacityError):
        bb.append_data(BitBuffer([0, 0, 0]))
    assert len(bb) == 8


def test_to_bytes():
    bb = BitBuffer()
    bb.append_bits(0xEC, 8)
    bb.append_bits(0x11, 8)
    assert bb.to_bytes() == b"\xec\x11"


def test_to_bytes_requires_whole_bytes():
    with pytest.raises(ValidationError):
        BitBuffer([1, 0, 1]).to_bytes()


def test_constructor_rejects_non_bits():
    with pytest.raises(RangeError):
        BitBuffer([0, 2])
