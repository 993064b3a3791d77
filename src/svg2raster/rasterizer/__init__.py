"""Rasterizer module for converting SVG scenes to pixels.

This module provides the ResvgRasterizer, which renders scenes with the resvg
rendering engine.
"""

from .base_rasterizer import BaseRasterizer
from .resvg_rasterizer import ResvgRasterizer

__all__ = ["BaseRasterizer", "ResvgRasterizer"]
