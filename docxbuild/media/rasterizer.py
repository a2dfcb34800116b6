"""
Raster fallbacks for vector images.

Every SVG embedded in the package ships with a PNG rendering for consumers
that cannot draw SVG. Rendering is the only expensive step of a build, so the
FallbackRenderer may run it on a thread pool; results are returned keyed by
image and are registered later in document order.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Protocol, Sequence, Tuple
import logging

from ..exceptions import AssetError
from ..models.image import VectorImage

logger = logging.getLogger(__name__)

try:
    import cairosvg
    _HAS_CAIROSVG = True
except (ImportError, OSError):  # pragma: no cover - cairo system library missing
    _HAS_CAIROSVG = False
    cairosvg = None  # type: ignore

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


class Rasterizer(Protocol):
    """Renders SVG bytes to PNG bytes of the requested pixel size."""

    def rasterize(self, svg_data: bytes, width: int, height: int) -> bytes:
        ...


class CairoSvgRasterizer:
    """Rasterizer backed by cairosvg."""

    @staticmethod
    def available() -> bool:
        return _HAS_CAIROSVG

    def rasterize(self, svg_data: bytes, width: int, height: int) -> bytes:
        if not _HAS_CAIROSVG:
            raise AssetError("cairosvg is not available for SVG rasterization")
        return cairosvg.svg2png(bytestring=svg_data, output_width=width, output_height=height)


def get_rasterizer(name: str) -> Optional[Rasterizer]:
    """
    Resolve the rasterizer named by the ``svg_rasterizer`` build option.

    Returns None for "none" or when the backend is not installed; a build
    that then meets an SVG fails with AssetError.
    """
    if name == "none":
        return None
    if name == "cairosvg":
        if CairoSvgRasterizer.available():
            return CairoSvgRasterizer()
        logger.warning("cairosvg not available, SVG images cannot be embedded")
        return None
    raise ValueError(f"Unknown rasterizer: {name}")


class FallbackRenderer:
    """
    Produce PNG fallbacks for a batch of vector images.

    Args:
        rasterizer: Backend, or None when no rasterizer is configured
        workers: Thread pool size; 0 or 1 renders sequentially
        scale: Factor applied to the intrinsic size of each image
    """

    def __init__(self, rasterizer: Optional[Rasterizer], workers: int = 4, scale: float = 1.0):
        self.rasterizer = rasterizer
        self.workers = workers
        self.scale = scale

    def _target_size(self, image: VectorImage) -> Tuple[int, int]:
        return (max(1, round(image.width * self.scale)),
                max(1, round(image.height * self.scale)))

    def _render(self, item: Tuple[str, VectorImage]) -> bytes:
        location, image = item
        width, height = self._target_size(image)
        try:
            png = self.rasterizer.rasterize(image.data, width, height)
        except AssetError as e:
            e.location = e.location or location
            raise
        except Exception as e:
            raise AssetError("SVG rasterization failed", details=str(e), location=location) from e
        if not isinstance(png, bytes) or not png.startswith(PNG_SIGNATURE):
            raise AssetError("Rasterizer did not return PNG data", location=location)
        return png

    def render_all(self, items: Sequence[Tuple[str, VectorImage]]) -> Dict[VectorImage, bytes]:
        """
        Render every image once, in the given order.

        Args:
            items: (location, image) pairs in document walk order

        Returns:
            PNG bytes keyed by image instance

        Raises:
            AssetError: If there is no rasterizer or any rendering fails; the
                error of the earliest failing image in walk order is raised
        """
        unique: List[Tuple[str, VectorImage]] = []
        seen = set()
        for location, image in items:
            if image not in seen:
                seen.add(image)
                unique.append((location, image))
        if not unique:
            return {}
        if self.rasterizer is None:
            raise AssetError("No rasterizer available to generate a fallback for an SVG image",
                             location=unique[0][0])

        if self.workers > 1 and len(unique) > 1:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(unique))) as pool:
                rendered = list(pool.map(self._render, unique))
        else:
            rendered = [self._render(item) for item in unique]

        logger.debug(f"Rendered {len(rendered)} SVG fallback(s)")
        return {image: png for (_, image), png in zip(unique, rendered)}
