import logging
import math
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)


class DegenerateSceneSize(ValueError):
    """Raised when the scene's intrinsic width or height is not positive."""


class DegenerateOutputSize(ValueError):
    """Raised when the resolved output width or height would be zero."""


class Dimensions(NamedTuple):
    width: int
    height: int


class ScaleFactors(NamedTuple):
    """Per-axis scale applied to the scene when rasterizing."""

    scale_x: float
    scale_y: float

    def to_svg_transform(self) -> str:
        return f"matrix({self.scale_x!r} 0 0 {self.scale_y!r} 0 0)"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def resolve_dimensions(
    base_width: int,
    base_height: int,
    width: Optional[int] = None,
    height: Optional[int] = None,
    scale: float = 1.0,
) -> tuple[Dimensions, ScaleFactors]:
    """Compute the output size and the rasterization scale.

    When neither ``width`` nor ``height`` is given, both intrinsic axes are
    multiplied by ``scale`` and rounded. When only one is given, the other is
    derived from the intrinsic aspect ratio and truncated toward zero. When
    both are given they are used as-is and ``scale`` is ignored.

    Args:
        base_width: Intrinsic scene width in pixels.
        base_height: Intrinsic scene height in pixels.
        width: Requested output width in pixels.
        height: Requested output height in pixels.
        scale: Scale factor relative to the intrinsic size.

    Returns:
        Tuple of the output dimensions and the per-axis scale factors.

    Raises:
        DegenerateSceneSize: If the intrinsic size is not positive.
        DegenerateOutputSize: If an output axis resolves to zero or less.
    """
    if base_width <= 0 or base_height <= 0:
        raise DegenerateSceneSize(
            f"Scene has no area: intrinsic size is {base_width}x{base_height}"
        )

    if width is not None and height is not None:
        pass
    elif height is not None:
        # Multiply before dividing so exact ratios do not lose a pixel.
        width = base_width * height // base_height
    elif width is not None:
        height = base_height * width // base_width
    else:
        if not math.isfinite(scale) or scale <= 0:
            raise DegenerateOutputSize(
                f"Scale must be a positive finite number, got {scale!r}"
            )
        width = round_half_away(base_width * scale)
        height = round_half_away(base_height * scale)

    if width <= 0 or height <= 0:
        raise DegenerateOutputSize(
            f"Output size {width}x{height} is empty; "
            f"check --width, --height or --scale"
        )

    logger.debug(
        f"Resolved output size {width}x{height} from intrinsic "
        f"{base_width}x{base_height}"
    )
    return Dimensions(width, height), ScaleFactors(
        width / base_width, height / base_height
    )
