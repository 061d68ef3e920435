"""Append-only bit sequence used to assemble segment payloads and codewords."""

from collections.abc import Iterable, Iterator

from qrgen.errors import CapacityError, RangeError, ValidationError

# Largest bit count a buffer may hold (signed 32-bit limit)
MAX_LENGTH = (1 << 31) - 1


class BitBuffer:
    """Growable sequence of bits (each 0 or 1).

    Bits are only ever appended; existing bits cannot be changed or
    removed. Use ``copy()`` to branch off an independent buffer.
    """

    __slots__ = ("_bits",)

    def __init__(self, bits: Iterable[int] = ()):
        self._bits: list[int] = []
        for b in bits:
            if b not in (0, 1):
                raise RangeError(f"Bit value must be 0 or 1, got {b!r}")
            self._bits.append(int(b))
        if len(self._bits) > MAX_LENGTH:
            raise CapacityError("Maximum length reached")

    def __len__(self) -> int:
        return len(self._bits)

    def __iter__(self) -> Iterator[int]:
        return iter(self._bits)

    def __getitem__(self, index: int) -> int:
        return self.bit_at(index)

    def __eq__(self, other):
        if not isinstance(other, BitBuffer):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self):
        return hash(tuple(self._bits))

    def __repr__(self) -> str:
        shown = "".join(map(str, self._bits[:32]))
        if len(self._bits) > 32:
            shown += "..."
        return f"BitBuffer(len={len(self._bits)}, bits={shown})"

    def bit_at(self, index: int) -> int:
        """Return the bit at ``index``; negative indices are not wrapped."""
        if not 0 <= index < len(self._bits):
            raise IndexError(f"Bit index {index} out of range [0, {len(self._bits)})")
        return self._bits[index]

    def append_bits(self, value: int, length: int) -> None:
        """Append the ``length`` low-order bits of ``value``, most significant first.

        Requires 0 <= length <= 31 and 0 <= value < 2**length.
        """
        if not 0 <= length <= 31 or value < 0 or value >> length != 0:
            raise RangeError(f"Value {value} does not fit in {length} bits")
        if MAX_LENGTH - len(self._bits) < length:
            raise CapacityError("Maximum length reached")
        self._bits.extend((value >> i) & 1 for i in range(length - 1, -1, -1))

    def append_data(self, other: "BitBuffer") -> None:
        """Append every bit of ``other`` in order."""
        if MAX_LENGTH - len(self._bits) < len(other):
            raise CapacityError("Maximum length reached")
        self._bits.extend(other._bits)

    def copy(self) -> "BitBuffer":
        clone = BitBuffer()
        clone._bits = list(self._bits)
        return clone

    def to_bytes(self) -> bytes:
        """Pack the bits into bytes in big-endian bit order."""
        if len(self._bits) % 8 != 0:
            raise ValidationError(f"Bit length {len(self._bits)} is not a multiple of 8")
        out = bytearray(len(self._bits) // 8)
        for i, bit in enumerate(self._bits):
            out[i >> 3] |= bit << (7 - (i & 7))
        return bytes(out)
