"""
Tests for ImageExporter.
"""

import pytest

from docxbuild.config import BuildOptions
from docxbuild.exceptions import AssetError
from docxbuild.export import ImageExporter
from docxbuild.export.image_exporter import SVG_BLIP_EXT_URI
from docxbuild.models import RasterImage, VectorImage
from docxbuild.package import PartRegistry
from docxbuild.package.constants import CT_DOCUMENT_MAIN, RT_IMAGE
from docxbuild.utils.xml_utils import NAMESPACES

W = f"{{{NAMESPACES['w']}}}"
WP = f"{{{NAMESPACES['wp']}}}"
A = f"{{{NAMESPACES['a']}}}"
R = f"{{{NAMESPACES['r']}}}"
ASVG = f"{{{NAMESPACES['asvg']}}}"


@pytest.fixture
def registry():
    return PartRegistry()


@pytest.fixture
def source(registry):
    return registry.reserve_part("word/document.xml", CT_DOCUMENT_MAIN)


def _targets(registry, source):
    return {rel.rel_id: registry.get_part(rel.target_part).path
            for rel in registry.relationships_for(source)}


class TestRasterImages:
    """Test cases for raster image embedding."""

    def test_one_part_one_relationship(self, registry, source, raster_image):
        exporter = ImageExporter(registry, source, BuildOptions())
        run = exporter.export_image(raster_image, "section[0].block[0].image[0]")

        rels = registry.relationships_for(source)
        assert len(rels) == 1 and rels[0].rel_type == RT_IMAGE
        assert _targets(registry, source) == {"rId1": "word/media/image1.png"}
        blip = run.find(f"{W}drawing/{WP}inline").find(f".//{A}blip")
        assert blip.get(f"{R}embed") == "rId1"
        assert blip.find(f"{A}extLst") is None

    def test_extent_in_emu(self, registry, source, raster_image):
        run = ImageExporter(registry, source, BuildOptions()).export_image(raster_image)
        extent = run.find(f".//{WP}extent")
        assert (extent.get("cx"), extent.get("cy")) == (str(4 * 9525), str(2 * 9525))

    def test_extent_respects_dpi(self, registry, source, raster_image):
        exporter = ImageExporter(registry, source, BuildOptions(image_dpi=192))
        assert exporter.extent(raster_image) == (2 * 9525, 9525)

    def test_wide_image_is_fitted_to_text_width(self, registry, source, png_bytes):
        wide = RasterImage(png_bytes, 2000, 1000, format="png")
        exporter = ImageExporter(registry, source, BuildOptions())
        cx, cy = exporter.extent(wide)
        assert cx == 9360 * 635
        assert cy == round(1000 * 9525 * cx / (2000 * 9525))

    def test_fit_can_be_disabled(self, registry, source, png_bytes):
        wide = RasterImage(png_bytes, 2000, 1000, format="png")
        exporter = ImageExporter(registry, source, BuildOptions(fit_images_to_page=False))
        assert exporter.extent(wide) == (2000 * 9525, 1000 * 9525)

    def test_same_image_twice_is_embedded_once(self, registry, source, raster_image):
        exporter = ImageExporter(registry, source, BuildOptions())
        first = exporter.export_image(raster_image)
        second = exporter.export_image(raster_image)
        assert len(registry.parts()) == 2  # document + one media part
        doc_ids = [run.find(f".//{WP}docPr").get("id") for run in (first, second)]
        assert doc_ids == ["1", "2"]

    def test_jpeg_extension(self, registry, source, jpeg_bytes):
        exporter = ImageExporter(registry, source, BuildOptions())
        exporter.export_image(RasterImage(jpeg_bytes, 6, 3, format="jpeg"))
        assert _targets(registry, source) == {"rId1": "word/media/image1.jpg"}

    def test_description_becomes_alt_text(self, registry, source, raster_image):
        run = ImageExporter(registry, source, BuildOptions()).export_image(raster_image)
        assert run.find(f".//{WP}docPr").get("descr") == "Red box"

    def test_mismatched_bytes_raise_asset_error(self, registry, source, jpeg_bytes):
        image = RasterImage(jpeg_bytes, 6, 3, format="png")
        exporter = ImageExporter(registry, source, BuildOptions())
        with pytest.raises(AssetError) as exc_info:
            exporter.export_image(image, "section[1].block[0].image[0]")
        assert exc_info.value.location == "section[1].block[0].image[0]"
        assert len(registry.parts()) == 1


class TestVectorImages:
    """Test cases for SVG embedding with raster fallback."""

    def test_two_parts_and_nested_reference(self, registry, source, vector_image, png_bytes):
        exporter = ImageExporter(registry, source, BuildOptions(), {vector_image: png_bytes})
        run = exporter.export_image(vector_image)

        targets = _targets(registry, source)
        assert sorted(targets.values()) == ["word/media/image1.png", "word/media/image1.svg"]
        blip = run.find(f".//{A}blip")
        assert targets[blip.get(f"{R}embed")] == "word/media/image1.png"
        ext = blip.find(f"{A}extLst/{A}ext")
        assert ext.get("uri") == SVG_BLIP_EXT_URI
        svg_blip = ext.find(f"{ASVG}svgBlip")
        assert targets[svg_blip.get(f"{R}embed")] == "word/media/image1.svg"

    def test_svg_content_type(self, registry, source, vector_image, png_bytes):
        ImageExporter(registry, source, BuildOptions(), {vector_image: png_bytes}) \
            .export_image(vector_image)
        types = {part.path: part.content_type for part in registry.parts()}
        assert types["word/media/image1.svg"] == "image/svg+xml"
        assert types["word/media/image1.png"] == "image/png"

    def test_missing_fallback(self, registry, source, vector_image):
        exporter = ImageExporter(registry, source, BuildOptions())
        with pytest.raises(AssetError):
            exporter.export_image(vector_image, "section[0].block[0].image[0]")

    def test_invalid_svg_bytes(self, registry, source, png_bytes):
        image = VectorImage(b"<html>not svg</html>", 10, 10)
        exporter = ImageExporter(registry, source, BuildOptions(), {image: png_bytes})
        with pytest.raises(AssetError):
            exporter.export_image(image)

    def test_not_an_image(self, registry, source):
        with pytest.raises(TypeError):
            ImageExporter(registry, source, BuildOptions()).export_image("image.png")
