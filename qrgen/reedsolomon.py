"""Reed-Solomon error correction over GF(2^8) with modulus 0x11D."""

import functools
from collections.abc import Sequence

from qrgen.errors import RangeError

# x^8 + x^4 + x^3 + x^2 + 1
FIELD_MODULUS = 0x11D
GENERATOR = 0x02


def multiply(x: int, y: int) -> int:
    """Return the product of two field elements (unsigned 8-bit ints)."""
    assert x >> 8 == 0 and y >> 8 == 0
    # Russian peasant multiplication
    z = 0
    for i in range(7, -1, -1):
        z = (z << 1) ^ ((z >> 7) * FIELD_MODULUS)
        z ^= ((y >> i) & 1) * x
    assert z >> 8 == 0
    return z


@functools.lru_cache(maxsize=None)
def compute_divisor(degree: int) -> bytes:
    """Return the generator polynomial of the given degree.

    Coefficients are stored from highest to lowest power, excluding the
    leading term which is always 1. For example x^3 + 255x^2 + 8x + 93 is
    returned as bytes([255, 8, 93]).
    """
    if not 1 <= degree <= 255:
        raise RangeError(f"Degree {degree} out of range [1, 255]")
    result = [0] * degree
    result[-1] = 1  # Start off with the monomial x^0

    # Multiply by (x - r^i) for each i, dropping the x^degree term
    root = 1
    for _ in range(degree):
        for j in range(degree):
            result[j] = multiply(result[j], root)
            if j + 1 < degree:
                result[j] ^= result[j + 1]
        root = multiply(root, GENERATOR)
    return bytes(result)


def compute_remainder(data: Sequence[int], divisor: Sequence[int]) -> bytes:
    """Return the error correction codewords for ``data`` divided by ``divisor``."""
    result = [0] * len(divisor)
    for b in data:
        factor = b ^ result.pop(0)
        result.append(0)
        for i, coef in enumerate(divisor):
            result[i] ^= multiply(coef, factor)
    return bytes(result)
