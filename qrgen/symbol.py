"""QR Code symbols and the encoder that produces them.

Three ways to make a symbol, from high level to low level:

- ``encode_text`` / ``encode_binary``: give the payload, everything else
  (segment mode, version, mask) is chosen automatically.
- ``encode_segments``: give hand-made segments plus optional version
  bounds, a fixed mask, and whether to boost the ECC level.
- ``QrCode.from_codewords``: give the final data codewords (segment
  headers and padding included, ECC excluded) and an exact version.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from qrgen.bitbuffer import BitBuffer
from qrgen.builder import NUM_MASKS, GridView, QrCodeBuilder
from qrgen.ecc import Ecc, add_ecc_and_interleave, get_num_data_codewords
from qrgen.errors import DataTooLongError, RangeError
from qrgen.logging import audit, get_logger, trace
from qrgen.penalty import get_penalty_score
from qrgen.segment import (
    MAX_VERSION,
    MIN_VERSION,
    QrSegment,
    get_total_bits,
    make_bytes,
    make_segments,
)

log = get_logger("symbol")

PAD_BYTES = (0xEC, 0x11)


def _check_mask(mask: int | None):
    if mask is not None and not 0 <= mask < NUM_MASKS:
        raise RangeError(f"Mask value {mask} out of range [0, 7]")


@dataclass(frozen=True, eq=False)
class QrCode:
    """An immutable QR Code symbol: a square grid of dark and light modules.

    ``modules`` is indexed ``[y, x]`` and is read-only. Coordinates passed
    to ``get_module`` are (x, y) with (0, 0) at the top left corner.
    """

    version: int
    error_correction_level: Ecc
    mask: int
    modules: np.ndarray

    @property
    def size(self) -> int:
        return self.version * 4 + 17

    def get_module(self, x: int, y: int) -> bool:
        """Colour of the module at (x, y); out-of-range coordinates are light (False)."""
        return 0 <= x < self.size and 0 <= y < self.size and bool(self.modules[y, x])

    def to_matrix(self) -> list[list[bool]]:
        """Row-major copy of the grid (True = dark)."""
        return self.modules.tolist()

    def penalty(self) -> int:
        """Penalty score of the finished grid."""
        return get_penalty_score(GridView(self.size, self.modules, np.zeros_like(self.modules)))

    def __eq__(self, other):
        if not isinstance(other, QrCode):
            return NotImplemented
        return (self.version == other.version
                and self.error_correction_level is other.error_correction_level
                and self.mask == other.mask
                and np.array_equal(self.modules, other.modules))

    def __hash__(self):
        return hash((self.version, self.error_correction_level, self.mask, self.modules.tobytes()))

    def __repr__(self) -> str:
        return (f"QrCode(version={self.version}, ecc={self.error_correction_level.name}, "
                f"mask={self.mask}, size={self.size})")

    @classmethod
    def from_codewords(
        cls,
        version: int,
        ecl: Ecc,
        data_codewords: Sequence[int],
        mask: int | None = None,
    ) -> "QrCode":
        """Build a symbol from data codewords at an exact version.

        ``mask`` is 0-7 to force that pattern, or None to try all eight and
        keep the one with the lowest penalty (lowest index on ties).
        """
        if not MIN_VERSION <= version <= MAX_VERSION:
            raise RangeError(f"Version {version} out of range [{MIN_VERSION}, {MAX_VERSION}]")
        _check_mask(mask)

        builder = QrCodeBuilder(version)
        builder.draw_function_patterns(ecl)
        builder.draw_codewords(add_ecc_and_interleave(version, ecl, data_codewords))

        if mask is None:
            mask = _choose_mask(builder, ecl)
        builder.apply_mask(mask)
        builder.draw_format_bits(ecl, mask)
        return cls(version, ecl, mask, builder.result())

    # Static-style entry points mirroring the module functions
    @staticmethod
    def encode_text(text: str, ecl: Ecc) -> "QrCode":
        return encode_text(text, ecl)

    @staticmethod
    def encode_binary(data: bytes, ecl: Ecc) -> "QrCode":
        return encode_binary(data, ecl)

    @staticmethod
    def encode_segments(segments: Sequence[QrSegment], ecl: Ecc, **kwargs) -> "QrCode":
        return encode_segments(segments, ecl, **kwargs)


def _choose_mask(builder: QrCodeBuilder, ecl: Ecc) -> int:
    """Try every mask on ``builder`` and leave it unmasked again."""
    view = builder.view()
    scores = {}
    for candidate in range(NUM_MASKS):
        builder.apply_mask(candidate)
        builder.draw_format_bits(ecl, candidate)
        scores[candidate] = get_penalty_score(view)
        builder.apply_mask(candidate)  # XOR again undoes the mask

    # min() keeps the first (lowest) mask among equal scores
    best = min(scores, key=scores.get)
    audit(
        "mask.selected", logger=log,
        best_mask=best, best_score=scores[best],
        all_scores={str(k): v for k, v in scores.items()},
    )
    return best


@trace
def encode_text(text: str, ecl: Ecc) -> QrCode:
    """Encode a Unicode string at the given error correction level.

    The smallest version is chosen automatically and the ECC level may be
    raised if that does not need a larger version.

    Raises:
        DataTooLongError: the text does not fit a version 40 symbol.
    """
    return _encode(make_segments(text), ecl)


@trace
def encode_binary(data: bytes, ecl: Ecc) -> QrCode:
    """Encode binary data in byte mode (at most 2953 bytes)."""
    return _encode([make_bytes(data)], ecl)


@trace
def encode_segments(
    segments: Sequence[QrSegment],
    ecl: Ecc,
    min_version: int = MIN_VERSION,
    max_version: int = MAX_VERSION,
    mask: int | None = None,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode segments using the smallest version in [min_version, max_version].

    Args:
        segments: Segments to concatenate, in order.
        ecl: Requested error correction level.
        min_version: Smallest allowed version (at least 1).
        max_version: Largest allowed version (at most 40).
        mask: Mask 0-7 to force, or None for automatic choice.
        boost_ecl: Raise the ECC level while the data still fits the chosen version.

    Raises:
        RangeError: bad version bounds or mask.
        DataTooLongError: the segments do not fit ``max_version``.
    """
    return _encode(segments, ecl, min_version, max_version, mask, boost_ecl)


def _encode(
    segments: Sequence[QrSegment],
    ecl: Ecc,
    min_version: int = MIN_VERSION,
    max_version: int = MAX_VERSION,
    mask: int | None = None,
    boost_ecl: bool = True,
) -> QrCode:
    """Untraced body of ``encode_segments``, shared by the public entry points."""
    if not MIN_VERSION <= min_version <= max_version <= MAX_VERSION:
        raise RangeError(f"Invalid version range [{min_version}, {max_version}]")
    _check_mask(mask)

    # Find the smallest version that holds the data
    version = min_version
    while True:
        capacity_bits = get_num_data_codewords(version, ecl) * 8
        used_bits = get_total_bits(segments, version)
        if used_bits != -1 and used_bits <= capacity_bits:
            break
        if version >= max_version:
            if used_bits != -1:
                raise DataTooLongError(
                    f"Data length = {used_bits} bits, Max capacity = {capacity_bits} bits"
                )
            raise DataTooLongError("Segment too long")
        version += 1
    log.debug("Selected version %d (%d data bits)", version, used_bits)

    # Raise the ECC level while the data still fits this version
    requested = ecl
    if boost_ecl:
        for candidate in Ecc:
            if used_bits <= get_num_data_codewords(version, candidate) * 8:
                ecl = candidate
    if ecl is not requested:
        audit("ecl.boosted", logger=log, version=version, requested=requested.name, boosted=ecl.name)

    # Segment headers and payloads
    bb = BitBuffer()
    for seg in segments:
        bb.append_bits(seg.mode.mode_bits, 4)
        bb.append_bits(seg.num_chars, seg.mode.num_char_count_bits(version))
        bb.append_data(seg.data)
    assert len(bb) == used_bits

    # Terminator, then zero bits up to a byte boundary
    capacity_bits = get_num_data_codewords(version, ecl) * 8
    assert len(bb) <= capacity_bits
    bb.append_bits(0, min(4, capacity_bits - len(bb)))
    bb.append_bits(0, (8 - len(bb) % 8) % 8)
    assert len(bb) % 8 == 0

    # Alternating pad bytes until capacity is reached
    pad = 0
    while len(bb) < capacity_bits:
        bb.append_bits(PAD_BYTES[pad], 8)
        pad ^= 1

    qr = QrCode.from_codewords(version, ecl, bb.to_bytes(), mask)
    audit(
        "qr.encoded", logger=log,
        version=qr.version, size=f"{qr.size}x{qr.size}",
        ecc=qr.error_correction_level.name, mask=qr.mask,
        data_bits=used_bits, capacity_bits=capacity_bits,
    )
    return qr
