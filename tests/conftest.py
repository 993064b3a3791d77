import logging
import os

import numpy as np
import pytest
from PIL import Image, features

from svg2raster.geometry import Dimensions, ScaleFactors
from svg2raster.rasterizer import BaseRasterizer
from svg2raster.scene import SVGScene

logger = logging.getLogger(__name__)


def get_fixture(name: str) -> str:
    """Get a fixture by name."""
    return os.path.join(os.path.dirname(__file__), "fixtures", name)


def has_avif() -> bool:
    """Check if Pillow was built with AVIF support."""
    try:
        return bool(features.check("avif"))
    except Exception as e:
        logger.debug(f"Error checking AVIF support: {e}")
        return False


requires_avif = pytest.mark.skipif(
    not has_avif(),
    reason="Pillow built without AVIF support",
)


class BoxRasterizer(BaseRasterizer):
    """Rasterizer stub that paints a color over the middle half of the image.

    Avoids depending on resvg for tests that exercise the export pipeline.
    """

    def __init__(self, color: tuple[int, int, int, int] = (255, 0, 0, 255)) -> None:
        self.color = color

    def rasterize(
        self, scene: SVGScene, transform: ScaleFactors, size: Dimensions
    ) -> Image.Image:
        pixels = np.zeros((size.height, size.width, 4), dtype=np.uint8)
        top, left = size.height // 4, size.width // 4
        pixels[top : size.height - top, left : size.width - left] = self.color
        return Image.fromarray(pixels)


@pytest.fixture
def square_svg() -> bytes:
    """64x64 SVG with a red square covering the middle."""
    with open(get_fixture("square.svg"), "rb") as f:
        return f.read()


@pytest.fixture
def square_scene(square_svg: bytes) -> SVGScene:
    return SVGScene.from_bytes(square_svg)
