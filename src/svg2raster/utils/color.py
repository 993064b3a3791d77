import logging
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"[0-9a-fA-F]{6}|[0-9a-fA-F]{8}")


class InvalidColorFormat(ValueError):
    """Raised when a color string is not '#RRGGBB' or '#RRGGBBAA'."""


class Color(NamedTuple):
    """Straight-alpha RGBA color with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    def premultiplied(self) -> tuple[int, int, int, int]:
        """Return the color with alpha multiplied into the color channels."""
        return (
            _premultiply(self.r, self.a),
            _premultiply(self.g, self.a),
            _premultiply(self.b, self.a),
            self.a,
        )

    def to_hex(self) -> str:
        return "#%02x%02x%02x%02x" % self


TRANSPARENT = Color(0, 0, 0, 0)
WHITE = Color(255, 255, 255, 255)


def _premultiply(channel: int, alpha: int) -> int:
    # Rounded integer form of channel * alpha / 255.
    return (channel * alpha + 127) // 255


def parse_color(text: str) -> Color:
    """Parse a hexadecimal color string.

    Accepts ``RRGGBB`` or ``RRGGBBAA`` with an optional leading ``#``. Alpha
    defaults to 255 when omitted.

    Raises:
        InvalidColorFormat: If the string has the wrong length or contains
            non-hexadecimal characters.
    """
    value = text.lstrip("#")
    if not HEX_COLOR_RE.fullmatch(value):
        raise InvalidColorFormat(
            f"Invalid color format (expected '#RRGGBB' or '#RRGGBBAA'): {text!r}"
        )
    channels = [int(value[i : i + 2], 16) for i in range(0, len(value), 2)]
    return Color(*channels)
