"""
Media module for docxbuild.

Image inspection and SVG raster fallbacks.
"""

from .converters import MediaConverter
from .rasterizer import CairoSvgRasterizer, FallbackRenderer, Rasterizer, get_rasterizer

__all__ = [
    "MediaConverter",
    "CairoSvgRasterizer",
    "FallbackRenderer",
    "Rasterizer",
    "get_rasterizer",
]
