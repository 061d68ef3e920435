"""qrgen: QR Code Model 2 encoder (ISO/IEC 18004), versions 1-40."""

from qrgen.bitbuffer import BitBuffer
from qrgen.ecc import Ecc
from qrgen.errors import (
    CapacityError,
    DataTooLongError,
    QrGenError,
    RangeError,
    ValidationError,
)
from qrgen.segment import (
    Mode,
    QrSegment,
    make_alphanumeric,
    make_bytes,
    make_eci,
    make_numeric,
    make_segments,
)
from qrgen.symbol import MAX_VERSION, MIN_VERSION, QrCode, encode_binary, encode_segments, encode_text

__version__ = "0.1.0"

__all__ = [
    "BitBuffer",
    "CapacityError",
    "DataTooLongError",
    "Ecc",
    "MAX_VERSION",
    "MIN_VERSION",
    "Mode",
    "QrCode",
    "QrGenError",
    "QrSegment",
    "RangeError",
    "ValidationError",
    "encode_binary",
    "encode_segments",
    "encode_text",
    "make_alphanumeric",
    "make_bytes",
    "make_eci",
    "make_numeric",
    "make_segments",
]
