"""Error correction levels, symbol capacity, and codeword interleaving."""

from collections.abc import Sequence
from enum import Enum

from qrgen.errors import RangeError, ValidationError
from qrgen.reedsolomon import compute_divisor, compute_remainder
from qrgen.segment import MAX_VERSION, MIN_VERSION

# ---------------------------------------------------------------------------
# Per-version tables (index 0 is padding and holds an illegal value)
# ---------------------------------------------------------------------------

_ECC_CODEWORDS_PER_BLOCK = {
    "LOW": (-1, 7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28,
            28, 28, 28, 30, 30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    "MEDIUM": (-1, 10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26,
               26, 26, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28),
    "QUARTILE": (-1, 13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26,
                 30, 28, 30, 30, 30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    "HIGH": (-1, 17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26,
             28, 30, 24, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
}

_NUM_ERROR_CORRECTION_BLOCKS = {
    "LOW": (-1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 4, 4, 4, 4, 4, 6, 6, 6, 6, 7, 8, 8, 9, 9,
            10, 12, 12, 12, 13, 14, 15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25),
    "MEDIUM": (-1, 1, 1, 1, 2, 2, 4, 4, 4, 5, 5, 5, 8, 9, 9, 10, 10, 11, 13, 14, 16, 17,
               17, 18, 20, 21, 23, 25, 26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49),
    "QUARTILE": (-1, 1, 1, 2, 2, 4, 4, 6, 6, 8, 8, 8, 10, 12, 16, 12, 17, 16, 18, 21, 20,
                 23, 23, 25, 27, 29, 34, 34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68),
    "HIGH": (-1, 1, 1, 2, 4, 4, 4, 5, 6, 8, 8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25,
             25, 34, 30, 32, 35, 37, 40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81),
}


class Ecc(Enum):
    """Error correction level, declared in ascending order of protection."""

    LOW = 1       # tolerates about  7% erroneous codewords
    MEDIUM = 0    # tolerates about 15% erroneous codewords
    QUARTILE = 3  # tolerates about 25% erroneous codewords
    HIGH = 2      # tolerates about 30% erroneous codewords

    @property
    def format_bits(self) -> int:
        """2-bit value written into the format information."""
        return self.value

    @property
    def ordinal(self) -> int:
        return _ECC_ORDER.index(self)

    @property
    def codewords_per_block(self) -> tuple[int, ...]:
        return _ECC_CODEWORDS_PER_BLOCK[self.name]

    @property
    def num_blocks(self) -> tuple[int, ...]:
        return _NUM_ERROR_CORRECTION_BLOCKS[self.name]

    def num_data_codewords(self, version: int) -> int:
        return get_num_data_codewords(version, self)

    @classmethod
    def from_letter(cls, letter: str) -> "Ecc":
        """Look up a level by its usual single-letter name (L, M, Q, H)."""
        try:
            return ECC_NAMES[letter.upper()]
        except KeyError:
            raise ValidationError(f"Unknown error correction level {letter!r}") from None


_ECC_ORDER = (Ecc.LOW, Ecc.MEDIUM, Ecc.QUARTILE, Ecc.HIGH)

ECC_NAMES = {"L": Ecc.LOW, "M": Ecc.MEDIUM, "Q": Ecc.QUARTILE, "H": Ecc.HIGH}


def _check_version(version: int):
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise RangeError(f"Version {version} out of range [{MIN_VERSION}, {MAX_VERSION}]")


def get_num_raw_data_modules(version: int) -> int:
    """Number of data bits a symbol of ``version`` holds once function modules are excluded.

    Includes remainder bits, so the result may not be a multiple of 8.
    The result is in the range [208, 29648].
    """
    _check_version(version)
    size = version * 4 + 17
    result = size * size
    result -= 8 * 8 * 3        # three finders with separators
    result -= 15 * 2 + 1       # format information and dark module
    result -= (size - 16) * 2  # timing patterns excluding finders
    if version >= 2:
        num_align = version // 7 + 2
        result -= (num_align - 1) * (num_align - 1) * 25  # alignment patterns clear of timing
        result -= (num_align - 2) * 2 * 20                # alignment patterns crossing timing
        if version >= 7:
            result -= 6 * 3 * 2  # version information
    assert 208 <= result <= 29648
    return result


def get_num_data_codewords(version: int, ecl: Ecc) -> int:
    """Number of 8-bit data codewords (not ECC) in a symbol, remainder bits discarded."""
    return (get_num_raw_data_modules(version) // 8
            - ecl.codewords_per_block[version] * ecl.num_blocks[version])


def add_ecc_and_interleave(version: int, ecl: Ecc, data: Sequence[int]) -> bytes:
    """Split ``data`` into blocks, append Reed-Solomon ECC to each, and interleave them."""
    if len(data) != get_num_data_codewords(version, ecl):
        raise ValidationError(
            f"Invalid data length {len(data)}, expected {get_num_data_codewords(version, ecl)}"
        )

    num_blocks = ecl.num_blocks[version]
    block_ecc_len = ecl.codewords_per_block[version]
    raw_codewords = get_num_raw_data_modules(version) // 8
    num_short_blocks = num_blocks - raw_codewords % num_blocks
    short_block_len = raw_codewords // num_blocks
    short_data_len = short_block_len - block_ecc_len

    # Short blocks first; every block is padded to the long block length
    divisor = compute_divisor(block_ecc_len)
    blocks = []
    k = 0
    for i in range(num_blocks):
        dat = bytes(data[k:k + short_data_len + (0 if i < num_short_blocks else 1)])
        k += len(dat)
        ecc = compute_remainder(dat, divisor)
        if i < num_short_blocks:
            dat += b"\x00"
        blocks.append(dat + ecc)
    assert k == len(data)

    # Interleave (not concatenate) the bytes from every block
    result = bytearray()
    for i in range(short_block_len + 1):
        for j, block in enumerate(blocks):
            # Skip the padding byte in short blocks
            if i != short_data_len or j >= num_short_blocks:
                result.append(block[i])
    assert len(result) == raw_codewords
    return bytes(result)
