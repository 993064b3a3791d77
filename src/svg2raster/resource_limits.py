"""Resource limits for untrusted input.

This module provides configurable limits that keep oversized or malicious
input from exhausting memory before any rendering starts.
"""

import logging
import os
from dataclasses import dataclass

from svg2raster.geometry import Dimensions

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 268435456  # 256MB
DEFAULT_MAX_IMAGE_DIMENSION = 65535


@dataclass
class ResourceLimits:
    """Resource limits for export operations.

    These limits constrain:
    - Input file size (prevents memory exhaustion while parsing)
    - Output image dimensions (prevents huge canvas allocations)

    Limits can be configured via environment variables or constructor parameters.
    Constructor parameters take precedence over environment variables.

    Environment variables:
        SVG2RASTER_MAX_FILE_SIZE: Maximum input size in bytes (default: 268435456 = 256MB)
        SVG2RASTER_MAX_IMAGE_DIMENSION: Maximum output width or height in pixels
            (default: 65535)

    Example:
        >>> limits = ResourceLimits.default()
        >>> limits = ResourceLimits(max_file_size=10 * 1024 * 1024, max_image_dimension=8192)
        >>> limits = ResourceLimits(max_file_size=0)  # No file size limit
    """

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_image_dimension: int = DEFAULT_MAX_IMAGE_DIMENSION

    @classmethod
    def default(cls) -> "ResourceLimits":
        """Create ResourceLimits with values from environment variables.

        Raises:
            ValueError: If environment variable contains invalid integer value.

        Note:
            Negative values are treated as 0 (disabled limit) with a warning logged.
        """

        def parse_env_int(key: str, default: int) -> int:
            value_str = os.environ.get(key)
            if value_str is None:
                return default

            try:
                value = int(value_str)
            except ValueError as e:
                raise ValueError(
                    f"Environment variable {key}={value_str!r} is not a valid integer"
                ) from e

            if value < 0:
                logger.warning(
                    f"Environment variable {key}={value} is negative, "
                    f"treating as 0 (disabled limit). "
                    f"Consider using ResourceLimits.unlimited() instead."
                )
                return 0

            return value

        return cls(
            max_file_size=parse_env_int(
                "SVG2RASTER_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE
            ),
            max_image_dimension=parse_env_int(
                "SVG2RASTER_MAX_IMAGE_DIMENSION", DEFAULT_MAX_IMAGE_DIMENSION
            ),
        )

    @classmethod
    def unlimited(cls) -> "ResourceLimits":
        """Create ResourceLimits with all limits disabled.

        Warning:
            Only use this for trusted input files in controlled environments.
        """
        return cls(max_file_size=0, max_image_dimension=0)

    def is_file_size_limited(self) -> bool:
        """Check if file size limit is enabled."""
        return self.max_file_size > 0

    def is_image_dimension_limited(self) -> bool:
        """Check if image dimension limit is enabled."""
        return self.max_image_dimension > 0

    def check_file_size(self, size: int) -> None:
        """Raise ValueError if an input of `size` bytes exceeds the limit."""
        if self.is_file_size_limited() and size > self.max_file_size:
            raise ValueError(
                f"Input size {size} bytes exceeds limit of {self.max_file_size} bytes. "
                f"To process: set SVG2RASTER_MAX_FILE_SIZE={size} environment variable."
            )

    def check_dimensions(self, dimensions: Dimensions) -> None:
        """Raise ValueError if either output axis exceeds the limit."""
        if self.is_image_dimension_limited() and (
            max(dimensions) > self.max_image_dimension
        ):
            raise ValueError(
                f"Output size {dimensions.width}x{dimensions.height} exceeds "
                f"maximum dimension of {self.max_image_dimension} pixels. "
                f"To process: set SVG2RASTER_MAX_IMAGE_DIMENSION={max(dimensions)} "
                f"environment variable."
            )
