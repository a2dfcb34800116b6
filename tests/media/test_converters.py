"""
Tests for MediaConverter.
"""

import pytest

from docxbuild.exceptions import AssetError
from docxbuild.media import MediaConverter
from docxbuild.media.converters import DEFAULT_SVG_SIZE
from docxbuild.models import ImageFormat, RasterImage, VectorImage


@pytest.fixture
def converter():
    return MediaConverter()


class TestMediaConverter:
    """Test cases for MediaConverter."""

    def test_init(self, converter):
        """Test MediaConverter initialization."""
        assert ImageFormat.PNG in converter.format_signatures
        assert ImageFormat.SVG not in converter.format_signatures

    @pytest.mark.parametrize("fmt, expected", [
        ("PNG", ImageFormat.PNG),
        ("JPEG", ImageFormat.JPEG),
        ("GIF", ImageFormat.GIF),
        ("BMP", ImageFormat.BMP),
    ])
    def test_detect_format(self, converter, image_factory, fmt, expected):
        assert converter.detect_format(image_factory(3, 3, fmt)) == expected

    def test_detect_svg(self, converter, svg_bytes):
        assert converter.detect_format(svg_bytes) == ImageFormat.SVG
        prologue = b'<?xml version="1.0" encoding="UTF-8"?>\n' + svg_bytes
        assert converter.detect_format(prologue) == ImageFormat.SVG

    @pytest.mark.parametrize("data", [b"", b"plain text", b"<html><body/></html>", b"<svg", "<svg/>"])
    def test_detect_unknown(self, converter, data):
        assert converter.detect_format(data) is None

    def test_validate_format(self, converter, png_bytes, jpeg_bytes, svg_bytes):
        assert converter.validate_format(png_bytes, ImageFormat.PNG)
        assert converter.validate_format(jpeg_bytes, "jpg")
        assert converter.validate_format(svg_bytes, "svg")
        assert not converter.validate_format(png_bytes, ImageFormat.JPEG)
        assert not converter.validate_format(png_bytes, "tiff")
        assert not converter.validate_format(None, ImageFormat.PNG)

    def test_check_image(self, converter, raster_image, png_bytes):
        converter.check_image(raster_image)
        mismatched = RasterImage(png_bytes, 4, 2, format="gif")
        with pytest.raises(AssetError) as exc_info:
            converter.check_image(mismatched, "section[0].block[0].image[0]")
        assert exc_info.value.details == "detected png"
        assert exc_info.value.location == "section[0].block[0].image[0]"

    def test_check_image_rejects_garbage_after_signature(self, converter):
        data = b"\x89PNG\r\n\x1a\n" + b"not a png at all"
        assert converter.validate_format(data, "png")
        with pytest.raises(AssetError) as exc_info:
            converter.check_image(RasterImage(data, 4, 2, format="png"),
                                  "section[2].block[1].image[0]")
        assert exc_info.value.location == "section[2].block[1].image[0]"

    def test_check_image_rejects_truncated_png(self, converter, png_bytes):
        with pytest.raises(AssetError):
            converter.check_image(RasterImage(png_bytes[:40], 4, 2, format="png"))

    def test_get_image_info(self, converter, png_bytes):
        info = converter.get_image_info(png_bytes)
        assert info['format'] == 'PNG'
        assert info['size'] == (4, 2)
        assert info['file_size'] == len(png_bytes)

    def test_get_image_info_invalid(self, converter):
        assert converter.get_image_info(b"not an image") is None
        assert converter.get_image_info("not bytes") is None


class TestSvgDimensions:
    """Test cases for MediaConverter.svg_dimensions."""

    def _svg(self, attrs):
        return f'<svg xmlns="http://www.w3.org/2000/svg" {attrs}/>'.encode()

    @pytest.mark.parametrize("attrs, expected", [
        ('width="40" height="20"', (40, 20)),
        ('width="40px" height="20px"', (40, 20)),
        ('width="1in" height="0.5in"', (96, 48)),
        ('width="72pt" height="36pt"', (96, 48)),
        ('viewBox="0 0 200 100"', (200, 100)),
        ('width="50" viewBox="0 0 200 100"', (50, 25)),
        ('height="50" viewBox="0,0,200,100"', (100, 50)),
        ('width="100%" height="100%" viewBox="0 0 64 32"', (64, 32)),
        ('', DEFAULT_SVG_SIZE),
    ])
    def test_dimensions(self, converter, attrs, expected):
        assert converter.svg_dimensions(self._svg(attrs)) == expected

    def test_not_svg(self, converter, png_bytes):
        with pytest.raises(AssetError):
            converter.svg_dimensions(png_bytes)


class TestLoadImage:
    """Test cases for MediaConverter.load_image."""

    def test_load_raster_bytes(self, converter, jpeg_bytes):
        image = converter.load_image(jpeg_bytes, description="Photo")
        assert isinstance(image, RasterImage)
        assert image.format is ImageFormat.JPEG
        assert (image.width, image.height) == (6, 3)
        assert image.description == "Photo"

    def test_load_svg_from_path(self, converter, svg_bytes, temp_dir):
        path = temp_dir / "diagram.svg"
        path.write_bytes(svg_bytes)
        image = converter.load_image(path)
        assert isinstance(image, VectorImage)
        assert (image.width, image.height) == (40, 20)
        assert image.name == "diagram.svg"

    def test_load_from_str_path(self, converter, png_bytes, temp_dir):
        path = temp_dir / "box.png"
        path.write_bytes(png_bytes)
        image = converter.load_image(str(path), name="Box")
        assert image.name == "Box"
        assert image.data == png_bytes

    def test_missing_file(self, converter, temp_dir):
        with pytest.raises(AssetError) as exc_info:
            converter.load_image(temp_dir / "missing.png")
        assert exc_info.value.location.endswith("missing.png")

    def test_unsupported_format(self, converter):
        with pytest.raises(AssetError):
            converter.load_image(b"%PDF-1.7", name="doc.pdf")

    def test_truncated_bitmap(self, converter, png_bytes):
        with pytest.raises(AssetError):
            converter.load_image(png_bytes[:12])
