"""Resvg-based rasterizer module.

This module provides SVG rasterization using the resvg library via resvg-py,
offering fast and accurate rendering with no external dependencies.
"""

import logging
import re
import xml.etree.ElementTree as ET
from io import BytesIO

import resvg_py
from PIL import Image

from svg2raster.geometry import Dimensions, ScaleFactors
from svg2raster.scene import NAMESPACE, SVGScene

from .base_rasterizer import BaseRasterizer

logger = logging.getLogger(__name__)


class ResvgRasterizer(BaseRasterizer):
    """SVG rasterizer using resvg.

    The scene is nested inside an outer ``<svg>`` of the output size whose
    group applies the scale transform, so non-uniform scaling is rendered
    exactly instead of being fitted to the output box.

    Note:
        Resvg does not support CSS @font-face rules with embedded fonts (data URIs).
        This implementation extracts font file paths from @font-face
        src: url("file://...") declarations and passes them to resvg's native font
        loading API. System fonts are always loaded.

    Example:
        >>> rasterizer = ResvgRasterizer()
        >>> scene = SVGScene.from_file('input.svg')
        >>> image = rasterizer.rasterize(scene, ScaleFactors(2.0, 2.0), Dimensions(200, 200))
        >>> image.save('output.png')
    """

    @staticmethod
    def _extract_font_file_paths(svg_content: str) -> list[str]:
        """Extract font file paths from @font-face CSS rules in SVG.

        Args:
            svg_content: SVG content as string.

        Returns:
            List of font file paths found in src: url("file://...") declarations.
        """
        # Pattern to match: src: url("file:///path/to/font.ttf")
        pattern = re.compile(r'src:\s*url\(["\']?(file://[^"\')]+)["\']?\)')
        return [match.replace("file://", "") for match in pattern.findall(svg_content)]

    @staticmethod
    def _wrap_scene(
        scene: SVGScene, transform: ScaleFactors, size: Dimensions
    ) -> ET.Element:
        """Build an outer document of `size` that draws the scaled scene."""
        root = ET.Element(
            f"{{{NAMESPACE}}}svg",
            {
                "width": str(size.width),
                "height": str(size.height),
                "viewBox": f"0 0 {size.width} {size.height}",
            },
        )
        group = ET.SubElement(
            root, f"{{{NAMESPACE}}}g", {"transform": transform.to_svg_transform()}
        )
        # Shallow copy of the root so the shared scene is never modified.
        inner = ET.SubElement(group, scene.svg.tag, dict(scene.svg.attrib))
        inner.text = scene.svg.text
        inner.set("x", "0")
        inner.set("y", "0")
        inner.set("width", repr(scene.width))
        inner.set("height", repr(scene.height))
        inner.extend(list(scene.svg))
        return root

    def rasterize(
        self, scene: SVGScene, transform: ScaleFactors, size: Dimensions
    ) -> Image.Image:
        """Rasterize the scene to a PIL Image in RGBA mode.

        Raises:
            ValueError: If resvg rejects the document.
        """
        svg_string = ET.tostring(
            self._wrap_scene(scene, transform, size), encoding="unicode"
        )
        font_files = self._extract_font_file_paths(svg_string)
        if font_files:
            logger.debug(f"Extracted {len(font_files)} font file(s) from SVG")

        png_bytes = resvg_py.svg_to_bytes(svg_string=svg_string, font_files=font_files)
        image = Image.open(BytesIO(bytes(png_bytes)))
        image.load()
        return image.convert("RGBA")
