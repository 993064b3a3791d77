"""Output format registry.

Each output format carries the static metadata the exporter needs: the file
extension, whether the format stores an alpha channel, the Pillow format
name used for encoding, and the largest image dimension the codec accepts.
"""

import logging
import os
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)

# WebP hard limit for image dimensions (16383 pixels)
WEBP_MAX_DIMENSION = 16383
# JPEG stores dimensions as 16-bit integers
JPEG_MAX_DIMENSION = 65535

_ALIASES = {"jpg": "jpeg", "tif": "tiff"}


class OutputFormat(Enum):
    """Supported raster output formats."""

    AVIF = ("avif", True, "AVIF", 0)
    JPEG = ("jpeg", False, "JPEG", JPEG_MAX_DIMENSION)
    PNG = ("png", True, "PNG", 0)
    TIFF = ("tiff", True, "TIFF", 0)
    WEBP = ("webp", True, "WEBP", WEBP_MAX_DIMENSION)

    def __init__(
        self, extension: str, supports_alpha: bool, pil_format: str, max_dimension: int
    ) -> None:
        self.extension = extension
        self.supports_alpha = supports_alpha
        self.pil_format = pil_format
        # 0 means the codec has no dimension limit of its own.
        self.max_dimension = max_dimension

    def __str__(self) -> str:
        return self.extension

    @classmethod
    def from_name(cls, name: str) -> "OutputFormat":
        """Look up a format by extension name, case-insensitively.

        ``jpg`` and ``tif`` are accepted as aliases.

        Raises:
            ValueError: If the name does not match any format.
        """
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        for fmt in cls:
            if fmt.extension == key:
                return fmt
        choices = ", ".join(fmt.extension for fmt in cls)
        raise ValueError(f"Unsupported format {name!r} (choose from {choices})")


ALL_FORMATS: tuple[OutputFormat, ...] = tuple(OutputFormat)


def dedupe_formats(formats: Iterable[OutputFormat]) -> list[OutputFormat]:
    """Drop repeated formats, keeping the position of the first occurrence."""
    seen: set[OutputFormat] = set()
    unique = []
    for fmt in formats:
        if fmt not in seen:
            seen.add(fmt)
            unique.append(fmt)
    return unique


def parse_formats(text: str) -> list[OutputFormat]:
    """Parse a comma-separated format list such as ``"png,jpeg,png"``.

    Raises:
        ValueError: If a name is unknown or the list is empty.
    """
    names = [name for name in text.split(",") if name.strip()]
    if not names:
        raise ValueError("At least one output format is required")
    return dedupe_formats(OutputFormat.from_name(name) for name in names)


def output_path(output_dir: str, filename: str, fmt: OutputFormat) -> str:
    """Build ``<output_dir>/<filename>.<extension>``."""
    return os.path.join(output_dir, f"{filename}.{fmt.extension}")
