"""
Image models.

An image is either a RasterImage (PNG, JPEG, GIF, BMP) or a VectorImage (SVG).
Both carry their bytes and intrinsic pixel dimensions; vector images get a
raster fallback generated at build time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import StructureError
from .metadata import check_xml_text


class ImageFormat(str, Enum):
    """Image formats the encoder can embed."""

    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    SVG = "svg"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.lower() in ("jpg", "jpe"):
            return cls.JPEG
        return None

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]

    @property
    def is_vector(self) -> bool:
        return self is ImageFormat.SVG


_CONTENT_TYPES = {
    ImageFormat.PNG: "image/png",
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.GIF: "image/gif",
    ImageFormat.BMP: "image/bmp",
    ImageFormat.SVG: "image/svg+xml",
}


@dataclass(eq=False)
class Image:
    """
    Common fields of embedded images.

    Images compare and hash by identity: the same instance placed twice in a
    document is one image, two instances with equal bytes are two images.
    """

    data: bytes
    width: int
    height: int
    format: Optional[ImageFormat] = None
    description: str = ""
    name: Optional[str] = None

    def __post_init__(self):
        if type(self) is Image:
            raise TypeError("Use RasterImage or VectorImage")
        check_xml_text(self.description, "Image description")
        check_xml_text(self.name, "Image name")
        if not isinstance(self.data, (bytes, bytearray)) or not self.data:
            raise StructureError("Image data must be non-empty bytes", details=self.name)
        self.data = bytes(self.data)
        if self.format is None:
            self.format = self._default_format()
        if not isinstance(self.format, ImageFormat):
            try:
                self.format = ImageFormat(str(self.format).lower())
            except ValueError:
                raise StructureError("Unsupported image format", details=str(self.format)) from None
        for label, value in (("width", self.width), ("height", self.height)):
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise StructureError(f"Image {label} must be a positive integer",
                                     details=f"{self.name or 'image'}: {value!r}")

    def _default_format(self) -> ImageFormat:
        raise StructureError("Image format is required", details=self.name)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(eq=False)
class RasterImage(Image):
    """Bitmap image embedded as-is."""

    def __post_init__(self):
        super().__post_init__()
        if self.format.is_vector:
            raise StructureError("Raster image cannot carry a vector format",
                                 details=self.format.value)


@dataclass(eq=False)
class VectorImage(Image):
    """SVG image; a raster fallback is generated when the package is built."""

    def _default_format(self) -> ImageFormat:
        return ImageFormat.SVG

    def __post_init__(self):
        super().__post_init__()
        if not self.format.is_vector:
            raise StructureError("Vector image must be SVG", details=self.format.value)
