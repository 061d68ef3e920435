"""Render finished symbols as Pillow images or terminal text.

Renderers only read ``QrCode.size`` and ``QrCode.get_module``; probing
one module past the edge is fine because out-of-range modules are light.
"""

import numpy as np
from PIL import Image

from qrgen.errors import RangeError
from qrgen.logging import audit, get_logger, trace
from qrgen.symbol import QrCode

log = get_logger("render")


def _module_grid(qr: QrCode, border: int) -> np.ndarray:
    """Boolean grid of the symbol surrounded by ``border`` light modules."""
    if border < 0:
        raise RangeError(f"Border {border} must be non-negative")
    span = range(-border, qr.size + border)
    return np.array([[qr.get_module(x, y) for x in span] for y in span], dtype=bool)


@trace
def to_image(
    qr: QrCode,
    box_size: int = 10,
    border: int = 4,
    fill: tuple[int, int, int] = (0, 0, 0),
    back: tuple[int, int, int] = (255, 255, 255),
) -> Image.Image:
    """Rasterise a symbol into an RGB image.

    Args:
        qr: The symbol to draw.
        box_size: Pixel size of each module.
        border: Quiet zone width in modules (4 is the standard minimum).
        fill: Colour of dark modules.
        back: Colour of light modules and the quiet zone.
    """
    if box_size < 1:
        raise RangeError(f"Box size {box_size} must be at least 1")
    grid = _module_grid(qr, border)
    pixels = np.where(grid[..., None], np.array(fill, dtype=np.uint8), np.array(back, dtype=np.uint8))
    pixels = pixels.repeat(box_size, axis=0).repeat(box_size, axis=1)
    img = Image.fromarray(pixels.astype(np.uint8))
    audit("render.image", logger=log,
          version=qr.version, size=f"{qr.size}x{qr.size}",
          image_px=f"{img.size[0]}x{img.size[1]}")
    return img


def to_text(qr: QrCode, border: int = 2, dark: str = "##", light: str = "  ") -> str:
    """Render a symbol as lines of text, one line per module row."""
    grid = _module_grid(qr, border)
    return "\n".join("".join(dark if cell else light for cell in row) for row in grid)
