"""Module grid builder: function patterns, codeword placement, masking.

The builder owns two boolean grids indexed ``[y, x]``: the module colours
(True = dark) and the set of function modules that masking never touches.
It moves through three phases in order: function patterns, codewords, then
masking and format bits. A finished grid is handed out as a frozen copy.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from qrgen.ecc import Ecc, get_num_raw_data_modules
from qrgen.errors import RangeError, ValidationError
from qrgen.segment import MAX_VERSION, MIN_VERSION

# Builder phases
_EMPTY = 0
_FUNCTION_PATTERNS = 1
_CODEWORDS = 2

NUM_MASKS = 8


def get_alignment_pattern_positions(version: int) -> list[int]:
    """Ascending alignment pattern centre positions, used on both axes."""
    if version == 1:
        return []
    num_align = version // 7 + 2
    size = version * 4 + 17
    step = (version * 8 + num_align * 3 + 5) // (num_align * 4 - 4) * 2
    return [6] + [size - 7 - k * step for k in reversed(range(num_align - 1))]


def mask_pattern(mask: int, size: int) -> np.ndarray:
    """Boolean grid that is True where ``mask`` inverts a module."""
    if not 0 <= mask < NUM_MASKS:
        raise RangeError(f"Mask value {mask} out of range [0, 7]")
    y, x = np.indices((size, size))
    if mask == 0:
        return (x + y) % 2 == 0
    if mask == 1:
        return y % 2 == 0
    if mask == 2:
        return x % 3 == 0
    if mask == 3:
        return (x + y) % 3 == 0
    if mask == 4:
        return (x // 3 + y // 2) % 2 == 0
    if mask == 5:
        return x * y % 2 + x * y % 3 == 0
    if mask == 6:
        return (x * y % 2 + x * y % 3) % 2 == 0
    return ((x + y) % 2 + x * y % 3) % 2 == 0


def _get_bit(value: int, i: int) -> bool:
    return (value >> i) & 1 != 0


@dataclass(frozen=True)
class GridView:
    """Read-only view over a builder's grids."""

    size: int
    modules: np.ndarray
    is_function: np.ndarray

    @property
    def total_count(self) -> int:
        return self.size * self.size

    @property
    def dark_count(self) -> int:
        return int(np.count_nonzero(self.modules))

    def get_module(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size and bool(self.modules[y, x])

    def is_function_module(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size and bool(self.is_function[y, x])


class QrCodeBuilder:
    """Mutable grid for one symbol under construction."""

    def __init__(self, version: int):
        if not MIN_VERSION <= version <= MAX_VERSION:
            raise RangeError(f"Version {version} out of range [{MIN_VERSION}, {MAX_VERSION}]")
        self.version = version
        self.size = version * 4 + 17
        self._modules = np.zeros((self.size, self.size), dtype=bool)
        self._is_function = np.zeros((self.size, self.size), dtype=bool)
        self._phase = _EMPTY

    def _require_phase(self, phase: int, operation: str):
        if self._phase != phase:
            raise RuntimeError(f"{operation} called out of order (phase {self._phase})")

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def get_module(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size and bool(self._modules[y, x])

    def is_function_module(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size and bool(self._is_function[y, x])

    def _set_function_module(self, x: int, y: int, is_dark: bool):
        self._modules[y, x] = is_dark
        self._is_function[y, x] = True

    def view(self) -> GridView:
        modules = self._modules.view()
        modules.flags.writeable = False
        is_function = self._is_function.view()
        is_function.flags.writeable = False
        return GridView(self.size, modules, is_function)

    def result(self) -> np.ndarray:
        """Frozen copy of the module grid."""
        out = self._modules.copy()
        out.flags.writeable = False
        return out

    # ------------------------------------------------------------------
    # Phase 1: function patterns
    # ------------------------------------------------------------------

    def draw_function_patterns(self, ecl: Ecc):
        """Draw and mark every function module."""
        self._require_phase(_EMPTY, "draw_function_patterns")
        size = self.size

        # Timing patterns
        for i in range(size):
            self._set_function_module(6, i, i % 2 == 0)
            self._set_function_module(i, 6, i % 2 == 0)

        # Three finders (all corners except bottom right; overwrites some timing modules)
        self._draw_finder_pattern(3, 3)
        self._draw_finder_pattern(size - 4, 3)
        self._draw_finder_pattern(3, size - 4)

        positions = get_alignment_pattern_positions(self.version)
        last = len(positions) - 1
        for i, px in enumerate(positions):
            for j, py in enumerate(positions):
                # Skip the three finder corners
                if (i, j) in ((0, 0), (0, last), (last, 0)):
                    continue
                self._draw_alignment_pattern(px, py)

        # Dummy mask value; overwritten once the mask is chosen
        self._write_format_bits(ecl, 0)
        self.draw_version()
        self._phase = _FUNCTION_PATTERNS

    def _draw_finder_pattern(self, x: int, y: int):
        """9*9 finder with separator centred on (x, y); clipped at the edges."""
        for dy in range(-4, 5):
            for dx in range(-4, 5):
                xx, yy = x + dx, y + dy
                if 0 <= xx < self.size and 0 <= yy < self.size:
                    dist = max(abs(dx), abs(dy))  # Chebyshev norm
                    self._set_function_module(xx, yy, dist not in (2, 4))

    def _draw_alignment_pattern(self, x: int, y: int):
        for dy in range(-2, 3):
            for dx in range(-2, 3):
                self._set_function_module(x + dx, y + dy, max(abs(dx), abs(dy)) != 1)

    def draw_format_bits(self, ecl: Ecc, mask: int):
        """Draw both copies of the format information for ``ecl`` and ``mask``."""
        if self._phase != _CODEWORDS:
            raise RuntimeError("draw_format_bits called before draw_codewords")
        self._write_format_bits(ecl, mask)

    def _write_format_bits(self, ecl: Ecc, mask: int):
        if not 0 <= mask < NUM_MASKS:
            raise RangeError(f"Mask value {mask} out of range [0, 7]")
        data = ecl.format_bits << 3 | mask
        rem = data
        for _ in range(10):
            rem = (rem << 1) ^ ((rem >> 9) * 0x537)
        bits = (data << 10 | rem) ^ 0x5412
        assert bits >> 15 == 0

        # First copy, around the top left finder
        for i in range(6):
            self._set_function_module(8, i, _get_bit(bits, i))
        self._set_function_module(8, 7, _get_bit(bits, 6))
        self._set_function_module(8, 8, _get_bit(bits, 7))
        self._set_function_module(7, 8, _get_bit(bits, 8))
        for i in range(9, 15):
            self._set_function_module(14 - i, 8, _get_bit(bits, i))

        # Second copy, split between the other two finders
        size = self.size
        for i in range(8):
            self._set_function_module(size - 1 - i, 8, _get_bit(bits, i))
        for i in range(8, 15):
            self._set_function_module(8, size - 15 + i, _get_bit(bits, i))
        self._set_function_module(8, size - 8, True)  # always dark

    def draw_version(self):
        """Draw both copies of the version information (version 7 and up)."""
        if self.version < 7:
            return
        rem = self.version
        for _ in range(12):
            rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
        bits = self.version << 12 | rem
        assert bits >> 18 == 0

        for i in range(18):
            bit = _get_bit(bits, i)
            a = self.size - 11 + i % 3
            b = i // 3
            self._set_function_module(a, b, bit)
            self._set_function_module(b, a, bit)

    # ------------------------------------------------------------------
    # Phase 2: codewords
    # ------------------------------------------------------------------

    def draw_codewords(self, codewords: Sequence[int]):
        """Place data and ECC codewords over the whole data area in zigzag order.

        Remainder bits (0 to 7) left at the end stay light.
        """
        self._require_phase(_FUNCTION_PATTERNS, "draw_codewords")
        expected = get_num_raw_data_modules(self.version) // 8
        if len(codewords) != expected:
            raise ValidationError(f"Invalid codeword count {len(codewords)}, expected {expected}")

        size = self.size
        total_bits = len(codewords) * 8
        i = 0
        right = size - 1  # right column of each pair
        while right >= 1:
            if right == 6:
                right = 5
            upward = ((right + 1) & 2) == 0
            for vert in range(size):
                y = size - 1 - vert if upward else vert
                for x in (right, right - 1):
                    if not self._is_function[y, x] and i < total_bits:
                        self._modules[y, x] = _get_bit(codewords[i >> 3], 7 - (i & 7))
                        i += 1
            right -= 2
        assert i == total_bits
        self._phase = _CODEWORDS

    # ------------------------------------------------------------------
    # Phase 3: masking
    # ------------------------------------------------------------------

    def apply_mask(self, mask: int):
        """XOR the data modules with ``mask``.

        Applying the same mask twice restores the previous grid, which is
        how candidate masks are tried and undone.
        """
        self._require_phase(_CODEWORDS, "apply_mask")
        invert = mask_pattern(mask, self.size)
        self._modules ^= invert & ~self._is_function
