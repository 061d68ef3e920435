"""Exceptions raised by the qrgen encoder.

Hierarchy::

    QrGenError
    ├── ValidationError   malformed input to a segment factory or codec
    ├── RangeError        numeric parameter outside its domain
    ├── CapacityError     bit buffer would outgrow its maximum length
    └── DataTooLongError  payload does not fit the allowed versions

Each concrete class also derives from the closest builtin so callers can
catch ``ValueError`` / ``OverflowError`` without importing qrgen.
"""

__all__ = [
    "QrGenError",
    "ValidationError",
    "RangeError",
    "CapacityError",
    "DataTooLongError",
]


class QrGenError(Exception):
    """Base class for every error raised by qrgen."""


class ValidationError(QrGenError, ValueError):
    """Input does not match the format an operation accepts."""


class RangeError(QrGenError, ValueError):
    """A numeric argument is outside its allowed range."""


class CapacityError(QrGenError, OverflowError):
    """A bit buffer would exceed its maximum representable length."""


class DataTooLongError(QrGenError, ValueError):
    """The supplied data does not fit any allowed QR Code version."""
