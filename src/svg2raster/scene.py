"""SVG scene loading.

Parses an SVG (or gzip-compressed SVGZ) document and determines its
intrinsic size the way resvg does, so that the exporter can resolve the
output geometry before any rendering happens.
"""

import dataclasses
import gzip
import logging
import math
import re
import xml.etree.ElementTree as ET
from typing import Optional

logger = logging.getLogger(__name__)

NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

ET.register_namespace("", NAMESPACE)
ET.register_namespace("xlink", XLINK_NAMESPACE)

GZIP_MAGIC = b"\x1f\x8b"

# Absolute length units in CSS pixels at 96 DPI. Font-relative units assume
# the default 16px font size.
UNITS_TO_PX = {
    "": 1.0,
    "px": 1.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
    "pt": 4.0 / 3.0,
    "pc": 16.0,
    "em": 16.0,
    "ex": 8.0,
}

LENGTH_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-z%]*)\s*")
NUMBER_SEP_RE = re.compile(r"[\s,]+")


class SceneParseError(ValueError):
    """Raised when the input is not a usable SVG document."""


def parse_length(value: Optional[str]) -> Optional[float]:
    """Convert an SVG length attribute to pixels.

    Returns None for missing or percentage values, which are resolved
    against the viewBox instead.

    Raises:
        SceneParseError: If the value is not a valid length.
    """
    if value is None:
        return None
    match = LENGTH_RE.fullmatch(value)
    if match is None:
        raise SceneParseError(f"Invalid length: {value!r}")
    number, unit = match.groups()
    if unit == "%":
        return None
    if unit not in UNITS_TO_PX:
        raise SceneParseError(f"Unsupported length unit: {value!r}")
    return float(number) * UNITS_TO_PX[unit]


def parse_viewbox(value: Optional[str]) -> Optional[tuple[float, float, float, float]]:
    """Parse a ``viewBox`` attribute, ignoring invalid or empty boxes."""
    if value is None:
        return None
    try:
        numbers = [float(v) for v in NUMBER_SEP_RE.split(value.strip()) if v]
    except ValueError:
        logger.warning(f"Ignoring invalid viewBox: {value!r}")
        return None
    if len(numbers) != 4 or numbers[2] <= 0 or numbers[3] <= 0:
        logger.warning(f"Ignoring invalid viewBox: {value!r}")
        return None
    return (numbers[0], numbers[1], numbers[2], numbers[3])


@dataclasses.dataclass(frozen=True)
class SVGScene:
    """Parsed SVG document with a known intrinsic size.

    The ``svg`` element is treated as read-only once the scene is built, so a
    single scene can be rendered from several threads at once.

    Example::

        scene = SVGScene.from_file("icon.svg")
        width, height = scene.intrinsic_size()
    """

    svg: ET.Element
    width: float
    height: float

    @staticmethod
    def from_bytes(data: bytes) -> "SVGScene":
        """Parse SVG or SVGZ data.

        Raises:
            SceneParseError: If the data is not a valid SVG document or its
                size cannot be determined.
        """
        if data[:2] == GZIP_MAGIC:
            try:
                data = gzip.decompress(data)
            except (OSError, EOFError) as e:
                raise SceneParseError(f"Failed to decompress SVGZ data: {e}") from e

        try:
            svg = ET.fromstring(data)
        except ET.ParseError as e:
            raise SceneParseError(f"Failed to parse SVG: {e}") from e

        if svg.tag != f"{{{NAMESPACE}}}svg":
            raise SceneParseError(
                f"Root element is {svg.tag!r}, expected <svg> in the SVG namespace"
            )

        width, height = SVGScene._resolve_size(svg)
        logger.debug(f"Parsed SVG with intrinsic size {width}x{height}")
        return SVGScene(svg=svg, width=width, height=height)

    @staticmethod
    def from_file(filepath: str) -> "SVGScene":
        """Read and parse an SVG or SVGZ file."""
        with open(filepath, "rb") as f:
            return SVGScene.from_bytes(f.read())

    @staticmethod
    def _resolve_size(svg: ET.Element) -> tuple[float, float]:
        width = parse_length(svg.get("width"))
        height = parse_length(svg.get("height"))
        viewbox = parse_viewbox(svg.get("viewBox"))

        if width is not None and height is not None:
            pass
        elif viewbox is None:
            raise SceneParseError(
                "Cannot determine SVG size: set width and height or a viewBox"
            )
        elif height is not None:
            width = height * viewbox[2] / viewbox[3]
        elif width is not None:
            height = width * viewbox[3] / viewbox[2]
        else:
            width, height = viewbox[2], viewbox[3]

        if width <= 0 or height <= 0:
            raise SceneParseError(f"SVG size must be positive, got {width}x{height}")
        return width, height

    def intrinsic_size(self) -> tuple[int, int]:
        """Return the intrinsic size rounded up to whole pixels."""
        return (
            max(1, math.ceil(self.width)),
            max(1, math.ceil(self.height)),
        )

    def tostring(self) -> str:
        """Serialize the document without modifying it."""
        return ET.tostring(self.svg, encoding="unicode")
