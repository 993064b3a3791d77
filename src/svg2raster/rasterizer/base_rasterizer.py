import logging
from abc import ABC, abstractmethod

import numpy as np
from PIL import Image

from svg2raster import image_utils
from svg2raster.geometry import Dimensions, ScaleFactors
from svg2raster.scene import SVGScene

logger = logging.getLogger(__name__)


class BaseRasterizer(ABC):
    """Base class for SVG rasterizer implementations.

    Subclasses implement `rasterize`, which turns a scene into a PIL Image of
    the requested size. `render` then composites that image over a canvas
    that already holds the background.

    Rasterizers must be safe to call from several threads at once: they
    receive read-only inputs and only write to the canvas they are given.
    """

    def render(
        self, scene: SVGScene, transform: ScaleFactors, canvas: np.ndarray
    ) -> None:
        """Rasterize the scene under `transform` onto `canvas` in place.

        Args:
            scene: Scene to render.
            transform: Per-axis scale from scene units to canvas pixels.
            canvas: Premultiplied RGBA canvas of shape (H, W, 4).
        """
        height, width = canvas.shape[:2]
        image = self.rasterize(scene, transform, Dimensions(width, height))
        if image.size != (width, height):
            raise ValueError(
                f"Rasterizer returned {image.size[0]}x{image.size[1]}, "
                f"expected {width}x{height}"
            )
        image_utils.composite_over(canvas, image_utils.image_to_premultiplied(image))

    @abstractmethod
    def rasterize(
        self, scene: SVGScene, transform: ScaleFactors, size: Dimensions
    ) -> Image.Image:
        """Rasterize the scene onto a transparent image of the given size.

        Args:
            scene: Scene to render.
            transform: Per-axis scale from scene units to output pixels.
            size: Output image size.

        Returns:
            PIL Image object containing the rasterized scene.
        """
        raise NotImplementedError
