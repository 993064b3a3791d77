import logging

import numpy as np
from PIL import Image

from svg2raster.utils.color import Color

logger = logging.getLogger(__name__)

RGB = "RGB"
RGBA = "RGBA"


class CanvasAllocationFailed(ValueError):
    """Raised when a canvas is requested with a zero dimension."""


def new_canvas(width: int, height: int) -> np.ndarray:
    """Allocate a transparent premultiplied RGBA canvas of shape (H, W, 4)."""
    if width <= 0 or height <= 0:
        raise CanvasAllocationFailed(f"Cannot allocate a {width}x{height} canvas")
    return np.zeros((height, width, 4), dtype=np.uint8)


def fill_canvas(canvas: np.ndarray, color: Color) -> None:
    """Fill the canvas with a color, premultiplying it first."""
    canvas[...] = color.premultiplied()


def image_to_premultiplied(image: Image.Image) -> np.ndarray:
    """Convert a PIL image to a premultiplied RGBA array."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image.convert("RGBa"), dtype=np.uint8)


def composite_over(canvas: np.ndarray, layer: np.ndarray) -> None:
    """Composite a premultiplied layer over the canvas in place.

    Both arrays are premultiplied RGBA of the same shape. Applies Porter-Duff
    source-over: ``out = src + dst * (255 - src_alpha) / 255``.
    """
    if canvas.shape != layer.shape:
        raise ValueError(
            f"Layer shape {layer.shape} does not match canvas shape {canvas.shape}"
        )
    inv_alpha = 255 - layer[..., 3:4].astype(np.uint32)
    dst = (canvas.astype(np.uint32) * inv_alpha + 127) // 255
    canvas[...] = np.minimum(layer.astype(np.uint32) + dst, 255).astype(np.uint8)


def unpremultiply_to_rgb(canvas: np.ndarray) -> np.ndarray:
    """Convert a premultiplied RGBA canvas into a straight RGB array.

    Fully transparent pixels become black. Other pixels are divided by their
    normalized alpha, clamped to 255 and truncated.
    """
    color = canvas[..., :3].astype(np.float32)
    alpha = canvas[..., 3:4].astype(np.float32) / np.float32(255.0)
    rgb = np.zeros_like(color)
    np.divide(color, alpha, out=rgb, where=alpha > 0)
    np.minimum(rgb, 255.0, out=rgb)
    return rgb.astype(np.uint8)


def to_pixel_buffer(canvas: np.ndarray, supports_alpha: bool) -> tuple[bytes, str]:
    """Return the raw bytes and pixel layout an encoder should receive.

    Formats with an alpha channel get the canvas RGBA bytes unchanged;
    other formats get unpremultiplied RGB bytes.
    """
    if supports_alpha:
        return np.ascontiguousarray(canvas).tobytes(), RGBA
    return unpremultiply_to_rgb(canvas).tobytes(), RGB


def save_buffer(
    filepath: str,
    buffer: bytes,
    width: int,
    height: int,
    layout: str,
    image_format: str,
) -> None:
    """Encode a raw pixel buffer and write it to a file.

    Args:
        filepath: Output file path.
        buffer: Raw pixel bytes, row-major, without padding.
        width: Image width in pixels.
        height: Image height in pixels.
        layout: Pixel layout, ``"RGB"`` or ``"RGBA"``.
        image_format: Pillow format name (e.g., 'PNG', 'JPEG', 'WEBP').

    Raises:
        ValueError: If the buffer size does not match the layout, or Pillow
            has no encoder for the format.
        OSError: If the file cannot be written or the codec fails.
    """
    image_format = image_format.upper()
    Image.init()
    if image_format not in Image.SAVE:
        raise ValueError(f"No {image_format} encoder available in this Pillow build")
    image = Image.frombuffer(layout, (width, height), buffer, "raw", layout, 0, 1)
    image.save(filepath, format=image_format)
