"""Segments: mode-tagged chunks of the QR Code data bit stream.

The mid-level way to create a segment is a factory such as
``make_numeric``; the low-level way is to build a ``BitBuffer`` and call
the ``QrSegment`` constructor directly. Segments impose no length limit of
their own; whether one fits a symbol is decided per version by
``get_total_bits``.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from qrgen.bitbuffer import MAX_LENGTH, BitBuffer
from qrgen.errors import RangeError, ValidationError

MIN_VERSION = 1
MAX_VERSION = 40

NUMERIC_REGEX = re.compile(r"[0-9]*")
ALPHANUMERIC_REGEX = re.compile(r"[A-Z0-9 $%*+./:-]*")

# Each character's value in alphanumeric mode is its index here
ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
_ALPHANUMERIC_INDEX = {ch: i for i, ch in enumerate(ALPHANUMERIC_CHARSET)}


class Mode(Enum):
    """Segment mode: 4-bit indicator and character-count widths per version band."""

    NUMERIC = (0x1, (10, 12, 14))
    ALPHANUMERIC = (0x2, (9, 11, 13))
    BYTE = (0x4, (8, 16, 16))
    KANJI = (0x8, (8, 10, 12))
    ECI = (0x7, (0, 0, 0))

    def __init__(self, mode_bits: int, char_count_bits: tuple[int, int, int]):
        self.mode_bits = mode_bits
        self.char_count_bits = char_count_bits

    def num_char_count_bits(self, version: int) -> int:
        """Width of the character count field at ``version``, in [0, 16]."""
        assert MIN_VERSION <= version <= MAX_VERSION
        return self.char_count_bits[(version + 7) // 17]


@dataclass(frozen=True)
class QrSegment:
    """An immutable segment of character, binary or control data.

    The payload is kept as a tuple of bits; ``data`` hands out a fresh
    ``BitBuffer`` on every access.
    """

    mode: Mode
    num_chars: int
    bits: tuple[int, ...] = field(repr=False)

    def __post_init__(self):
        if self.num_chars < 0:
            raise RangeError(f"Character count {self.num_chars} is negative")
        # Validates each bit and detaches from the caller's buffer
        object.__setattr__(self, "bits", tuple(BitBuffer(self.bits)))

    @property
    def data(self) -> BitBuffer:
        return BitBuffer(self.bits)

    @property
    def bit_length(self) -> int:
        return len(self.bits)


def is_numeric(text: str) -> bool:
    return NUMERIC_REGEX.fullmatch(text) is not None


def is_alphanumeric(text: str) -> bool:
    return ALPHANUMERIC_REGEX.fullmatch(text) is not None


def make_bytes(data: bytes | bytearray | Sequence[int]) -> QrSegment:
    """Encode binary data in byte mode. Every value must be in [0, 255]."""
    try:
        payload = bytes(data)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Byte data must be integers in [0, 255]: {e}") from None
    bb = BitBuffer()
    for b in payload:
        bb.append_bits(b, 8)
    return QrSegment(Mode.BYTE, len(payload), bb)


def make_numeric(digits: str) -> QrSegment:
    """Encode a string of decimal digits in numeric mode."""
    if not is_numeric(digits):
        raise ValidationError("String contains non-numeric characters")
    bb = BitBuffer()
    for i in range(0, len(digits), 3):
        group = digits[i:i + 3]
        bb.append_bits(int(group), len(group) * 3 + 1)
    return QrSegment(Mode.NUMERIC, len(digits), bb)


def make_alphanumeric(text: str) -> QrSegment:
    """Encode text in alphanumeric mode.

    Allowed characters: 0 to 9, A to Z (uppercase only), space, and
    ``$ % * + - . / :``.
    """
    if not is_alphanumeric(text):
        raise ValidationError("String contains unencodable characters in alphanumeric mode")
    bb = BitBuffer()
    pairs_end = len(text) - len(text) % 2
    for i in range(0, pairs_end, 2):
        value = _ALPHANUMERIC_INDEX[text[i]] * 45 + _ALPHANUMERIC_INDEX[text[i + 1]]
        bb.append_bits(value, 11)
    if pairs_end < len(text):
        bb.append_bits(_ALPHANUMERIC_INDEX[text[-1]], 6)
    return QrSegment(Mode.ALPHANUMERIC, len(text), bb)


def make_segments(text: str) -> list[QrSegment]:
    """Return zero or one segments representing ``text``.

    Picks the most compact single mode that can hold the whole string;
    segments are never mixed.
    """
    if text == "":
        return []
    if is_numeric(text):
        return [make_numeric(text)]
    if is_alphanumeric(text):
        return [make_alphanumeric(text)]
    return [make_bytes(text.encode("utf-8"))]


def make_eci(assign_val: int) -> QrSegment:
    """Encode an Extended Channel Interpretation designator (AIM ECI)."""
    bb = BitBuffer()
    if assign_val < 0:
        raise RangeError("ECI assignment value out of range")
    elif assign_val < (1 << 7):
        bb.append_bits(assign_val, 8)
    elif assign_val < (1 << 14):
        bb.append_bits(0b10, 2)
        bb.append_bits(assign_val, 14)
    elif assign_val < 1_000_000:
        bb.append_bits(0b110, 3)
        bb.append_bits(assign_val, 21)
    else:
        raise RangeError("ECI assignment value out of range")
    return QrSegment(Mode.ECI, 0, bb)


def get_total_bits(segments: Sequence[QrSegment], version: int) -> int:
    """Number of bits needed to encode ``segments`` at ``version``.

    Returns -1 if a segment has too many characters for its count field,
    or if the total would exceed the largest bit buffer length.
    """
    result = 0
    for seg in segments:
        ccbits = seg.mode.num_char_count_bits(version)
        if seg.num_chars >= (1 << ccbits):
            return -1
        result += 4 + ccbits + seg.bit_length
        if result > MAX_LENGTH:
            return -1
    return result
