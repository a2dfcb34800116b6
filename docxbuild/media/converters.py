"""
Media inspection for embedded images.

Detects and validates image formats from their signatures, reads intrinsic
dimensions (Pillow for bitmaps, the root attributes for SVG) and turns raw
bytes or files into RasterImage / VectorImage model values.
"""

from typing import Any, Dict, Optional, Tuple, Union
from pathlib import Path
import io
import logging
import re
import xml.etree.ElementTree as ET

from PIL import Image as PILImage, UnidentifiedImageError

from ..exceptions import AssetError
from ..models.image import Image, ImageFormat, RasterImage, VectorImage

logger = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"

# CSS absolute units in pixels (96 px per inch)
_SVG_UNITS = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
}
_LENGTH = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][+-]?[0-9]+)?)\s*([a-z]*)\s*$")

# Size used when an SVG declares neither width/height nor a viewBox
DEFAULT_SVG_SIZE = (300, 150)


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _LENGTH.match(value)
    if not match or match.group(2) not in _SVG_UNITS:
        return None
    return float(match.group(1)) * _SVG_UNITS[match.group(2)]


class MediaConverter:
    """
    Inspects image bytes.

    Handles format detection and validation, image information and loading
    images into the document model.
    """

    def __init__(self):
        self.format_signatures = {
            ImageFormat.PNG: [b'\x89PNG\r\n\x1a\n'],
            ImageFormat.JPEG: [b'\xff\xd8\xff'],
            ImageFormat.GIF: [b'GIF87a', b'GIF89a'],
            ImageFormat.BMP: [b'BM'],
        }
        logger.debug("MediaConverter initialized")

    @staticmethod
    def _parse_svg(data: bytes) -> Optional[ET.Element]:
        head = data[:512].lstrip()
        if not (head.startswith(b'<') and b'<svg' in data[:4096]):
            return None
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            logger.debug(f"SVG parse failed: {e}")
            return None
        if root.tag not in (f"{{{_SVG_NS}}}svg", "svg"):
            return None
        return root

    def detect_format(self, data: bytes) -> Optional[ImageFormat]:
        """
        Detect image format from data.

        Args:
            data: Image bytes

        Returns:
            Detected format or None if unknown
        """
        if not isinstance(data, bytes):
            return None
        for format_type, signatures in self.format_signatures.items():
            if any(data.startswith(signature) for signature in signatures):
                logger.debug(f"Format detected: {format_type.value}")
                return format_type
        if self._parse_svg(data) is not None:
            return ImageFormat.SVG
        logger.debug("Format detection failed: unknown format")
        return None

    def validate_format(self, data: bytes, format_type: Union[ImageFormat, str]) -> bool:
        """
        Check that data really is of format_type.

        Returns:
            True if the signature (or SVG root element) matches
        """
        if not isinstance(data, bytes):
            return False
        try:
            format_type = ImageFormat(format_type)
        except ValueError:
            return False
        if format_type is ImageFormat.SVG:
            return self._parse_svg(data) is not None
        return any(data.startswith(signature) for signature in self.format_signatures[format_type])

    def check_image(self, image: Image, location: Optional[str] = None) -> None:
        """
        Raises:
            AssetError: If the image bytes do not match the declared format or a
                bitmap cannot be decoded by Pillow
        """
        if not self.validate_format(image.data, image.format):
            detected = self.detect_format(image.data)
            raise AssetError(
                f"Image bytes are not valid {image.format.value.upper()}",
                details=f"detected {detected.value}" if detected else "unrecognized data",
                location=location,
            )
        if image.format.is_vector:
            return
        try:
            with PILImage.open(io.BytesIO(image.data)) as bitmap:
                bitmap.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise AssetError(
                f"Image bytes are not a readable {image.format.value.upper()}",
                details=str(e) or type(e).__name__,
                location=location,
            ) from e

    def get_image_info(self, image_data: bytes) -> Optional[Dict[str, Any]]:
        """
        Get bitmap information with Pillow.

        Returns:
            Image information dictionary or None if the data cannot be read
        """
        if not isinstance(image_data, bytes):
            return None
        try:
            with PILImage.open(io.BytesIO(image_data)) as image:
                return {
                    'format': image.format,
                    'mode': image.mode,
                    'size': image.size,
                    'width': image.width,
                    'height': image.height,
                    'has_transparency': image.mode in ('RGBA', 'LA', 'P'),
                    'file_size': len(image_data),
                }
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.debug(f"Image analysis failed: {e}")
            return None

    def svg_dimensions(self, data: bytes) -> Tuple[int, int]:
        """
        Intrinsic pixel size of an SVG.

        Uses width/height when both are absolute lengths, otherwise the
        viewBox, scaling one side when only the other is known.

        Raises:
            AssetError: If data is not an SVG document
        """
        root = self._parse_svg(data)
        if root is None:
            raise AssetError("Data is not an SVG document")
        width = _parse_length(root.get("width"))
        height = _parse_length(root.get("height"))

        view_box = None
        parts = re.split(r"[\s,]+", (root.get("viewBox") or "").strip())
        if len(parts) == 4:
            try:
                vb_width, vb_height = float(parts[2]), float(parts[3])
            except ValueError:
                vb_width = vb_height = 0.0
            if vb_width > 0 and vb_height > 0:
                view_box = (vb_width, vb_height)

        if width and height:
            size = (width, height)
        elif view_box and width:
            size = (width, width * view_box[1] / view_box[0])
        elif view_box and height:
            size = (height * view_box[0] / view_box[1], height)
        elif view_box:
            size = view_box
        else:
            size = DEFAULT_SVG_SIZE
        return max(1, round(size[0])), max(1, round(size[1]))

    def load_image(self, source: Union[bytes, str, Path], description: str = "",
                   name: Optional[str] = None) -> Image:
        """
        Build a model image from bytes or a file path.

        Args:
            source: Image bytes or path to an image file
            description: Alternative text
            name: Display name; defaults to the file name

        Returns:
            RasterImage or VectorImage with intrinsic dimensions filled in

        Raises:
            AssetError: If the file cannot be read or the format is unsupported
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise AssetError("Cannot read image file", details=str(e), location=str(path)) from e
            name = name or path.name
        else:
            data = bytes(source)

        format_type = self.detect_format(data)
        if format_type is None:
            raise AssetError("Unsupported image format", location=name)
        if format_type is ImageFormat.SVG:
            width, height = self.svg_dimensions(data)
            return VectorImage(data, width, height, description=description, name=name)

        info = self.get_image_info(data)
        if info is None:
            raise AssetError("Cannot read image data", details=format_type.value, location=name)
        return RasterImage(data, info['width'], info['height'], format=format_type,
                           description=description, name=name)
