"""
Pytest configuration for docxbuild
"""

import io
import logging
import sys
import zipfile
from pathlib import Path
from typing import Dict

import pytest
from PIL import Image as PILImage

from docxbuild.models import Document, RasterImage, VectorImage

SVG_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
    'viewBox="0 0 {width} {height}"><rect width="{width}" height="{height}" fill="#3366cc"/></svg>'
)


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    import tempfile
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def make_image_bytes(width: int, height: int, fmt: str = "PNG", color=(200, 30, 30)) -> bytes:
    """Encode a solid-color bitmap with Pillow."""
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_svg_bytes(width: int = 40, height: int = 20) -> bytes:
    return SVG_TEMPLATE.format(width=width, height=height).encode("utf-8")


@pytest.fixture
def image_factory():
    """make_image_bytes(width, height, fmt="PNG")."""
    return make_image_bytes


@pytest.fixture
def svg_factory():
    """make_svg_bytes(width, height)."""
    return make_svg_bytes


@pytest.fixture
def png_bytes():
    """A 4x2 PNG."""
    return make_image_bytes(4, 2)


@pytest.fixture
def jpeg_bytes():
    """A 6x3 JPEG."""
    return make_image_bytes(6, 3, "JPEG")


@pytest.fixture
def svg_bytes():
    """A 40x20 SVG."""
    return make_svg_bytes()


@pytest.fixture
def raster_image(png_bytes):
    return RasterImage(png_bytes, 4, 2, format="png", description="Red box")


@pytest.fixture
def vector_image(svg_bytes):
    return VectorImage(svg_bytes, 40, 20, description="Blue box")


class FakeRasterizer:
    """Rasterizer that paints a PNG of the requested size with Pillow and records calls."""

    def __init__(self):
        self.calls = []

    def rasterize(self, svg_data: bytes, width: int, height: int) -> bytes:
        self.calls.append((svg_data, width, height))
        return make_image_bytes(width, height, color=(51, 102, 204))


@pytest.fixture
def fake_rasterizer():
    return FakeRasterizer()


@pytest.fixture
def simple_document():
    """One section, one paragraph with "Hello, " and bold "world!"."""
    document = Document()
    section = document.add_section()
    paragraph = section.add_paragraph()
    paragraph.add_run("Hello, ")
    paragraph.add_run("world!", bold=True)
    return document


@pytest.fixture
def read_package():
    """Return a function mapping package bytes (or a path) to {entry name: bytes}."""
    def _read(source) -> Dict[str, bytes]:
        data = Path(source).read_bytes() if isinstance(source, (str, Path)) else source
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            return {name: archive.read(name) for name in archive.namelist()}
    return _read


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "cairosvg: marks tests that need a working cairosvg installation"
    )
