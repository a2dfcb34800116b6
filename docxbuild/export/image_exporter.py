"""
Image serializer - inline DrawingML pictures.

A raster image becomes one media part and one relationship. A vector image
becomes two media parts (the SVG and its PNG fallback) whose relationships
are both referenced from the drawing: the blip embeds the PNG and carries an
SVG extension pointing at the vector part.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Tuple

from ..config import BuildOptions
from ..exceptions import AssetError
from ..media.converters import MediaConverter
from ..models.image import Image, ImageFormat, VectorImage
from ..package.constants import MEDIA_DIR, RT_IMAGE
from ..package.registry import PartId, PartRegistry
from ..utils.units import UnitsConverter
from ..utils.xml_utils import qn, sub_element

logger = logging.getLogger(__name__)

PICTURE_URI = "http://schemas.openxmlformats.org/drawingml/2006/picture"
SVG_BLIP_EXT_URI = "{96DAC541-7B7A-43D3-8B79-37D633B846F1}"


class ImageExporter:
    """
    Registers media for images and emits their drawing runs.

    Args:
        registry: Registry receiving media parts and relationships
        source: Part that owns the image relationships (the main document)
        options: Build options (dpi, page fit)
        fallbacks: PNG fallbacks for vector images, keyed by image
        converter: Format validation helper
    """

    def __init__(self, registry: PartRegistry, source: PartId, options: BuildOptions,
                 fallbacks: Optional[Dict[VectorImage, bytes]] = None,
                 converter: Optional[MediaConverter] = None):
        self.registry = registry
        self.source = source
        self.options = options
        self.fallbacks = fallbacks or {}
        self.converter = converter or MediaConverter()
        self.units = UnitsConverter(options.image_dpi)
        # image -> (blip rel id, svg rel id or None, media file name)
        self._embedded: Dict[Image, Tuple[str, Optional[str], str]] = {}
        self._media_counter = 0
        self._drawing_counter = 0

    def _register_media(self, name: str, fmt: ImageFormat, data: bytes) -> str:
        part_id = self.registry.register_part(f"{MEDIA_DIR}/{name}", fmt.content_type, data)
        return self.registry.add_relationship(self.source, RT_IMAGE, part_id)

    def embed(self, image: Image, location: Optional[str] = None) -> Tuple[str, Optional[str], str]:
        """
        Register the media of an image once and return its relationship ids.

        Returns:
            (blip relationship id, SVG relationship id or None, media name)

        Raises:
            AssetError: If the bytes do not match the format or a vector image
                has no fallback
        """
        if image in self._embedded:
            return self._embedded[image]
        self.converter.check_image(image, location)

        self._media_counter += 1
        stem = f"image{self._media_counter}"
        if isinstance(image, VectorImage):
            fallback = self.fallbacks.get(image)
            if fallback is None:
                raise AssetError("Vector image has no raster fallback", location=location)
            svg_name = f"{stem}.{ImageFormat.SVG.extension}"
            svg_rel = self._register_media(svg_name, ImageFormat.SVG, image.data)
            png_rel = self._register_media(f"{stem}.{ImageFormat.PNG.extension}",
                                           ImageFormat.PNG, fallback)
            embedded = (png_rel, svg_rel, svg_name)
        else:
            name = f"{stem}.{image.format.extension}"
            embedded = (self._register_media(name, image.format, image.data), None, name)

        self._embedded[image] = embedded
        logger.debug(f"Embedded {embedded[2]} at {location}")
        return embedded

    def extent(self, image: Image, max_width_twips: Optional[int] = None) -> Tuple[int, int]:
        """Display size in EMU, scaled down to max_width_twips when page fitting is on."""
        cx = self.units.pixels_to_emu(image.width)
        cy = self.units.pixels_to_emu(image.height)
        if self.options.fit_images_to_page:
            limit = UnitsConverter.twips_to_emu(max_width_twips or self.options.text_width)
            if cx > limit:
                cy = max(1, round(cy * limit / cx))
                cx = limit
        return cx, cy

    def export_image(self, image: Image, location: Optional[str] = None,
                     max_width_twips: Optional[int] = None) -> ET.Element:
        """
        Export an image as a run holding an inline drawing.

        Args:
            image: Raster or vector image
            location: Model path used in error messages
            max_width_twips: Width available to the image

        Returns:
            w:r element
        """
        if not isinstance(image, Image):
            raise TypeError(f"Not an image: {type(image).__name__}")
        blip_rel, svg_rel, media_name = self.embed(image, location)
        cx, cy = self.extent(image, max_width_twips)
        self._drawing_counter += 1
        drawing_id = self._drawing_counter

        run = ET.Element(qn('w:r'))
        drawing = sub_element(run, 'w:drawing')
        inline = sub_element(drawing, 'wp:inline',
                             {'distT': 0, 'distB': 0, 'distL': 0, 'distR': 0})
        sub_element(inline, 'wp:extent', {'cx': cx, 'cy': cy})
        sub_element(inline, 'wp:effectExtent', {'l': 0, 't': 0, 'r': 0, 'b': 0})
        doc_pr = sub_element(inline, 'wp:docPr',
                             {'id': drawing_id, 'name': f"Picture {drawing_id}"})
        if image.description:
            doc_pr.set('descr', image.description)
        frame_pr = sub_element(inline, 'wp:cNvGraphicFramePr')
        sub_element(frame_pr, 'a:graphicFrameLocks', {'noChangeAspect': 1})

        graphic = sub_element(inline, 'a:graphic')
        graphic_data = sub_element(graphic, 'a:graphicData', {'uri': PICTURE_URI})
        pic = sub_element(graphic_data, 'pic:pic')

        nv_pic_pr = sub_element(pic, 'pic:nvPicPr')
        sub_element(nv_pic_pr, 'pic:cNvPr', {'id': 0, 'name': image.name or media_name})
        sub_element(nv_pic_pr, 'pic:cNvPicPr')

        blip_fill = sub_element(pic, 'pic:blipFill')
        blip = sub_element(blip_fill, 'a:blip', {'r:embed': blip_rel})
        if svg_rel is not None:
            ext_lst = sub_element(blip, 'a:extLst')
            ext = sub_element(ext_lst, 'a:ext', {'uri': SVG_BLIP_EXT_URI})
            sub_element(ext, 'asvg:svgBlip', {'r:embed': svg_rel})
        stretch = sub_element(blip_fill, 'a:stretch')
        sub_element(stretch, 'a:fillRect')

        sp_pr = sub_element(pic, 'pic:spPr')
        xfrm = sub_element(sp_pr, 'a:xfrm')
        sub_element(xfrm, 'a:off', {'x': 0, 'y': 0})
        sub_element(xfrm, 'a:ext', {'cx': cx, 'cy': cy})
        geom = sub_element(sp_pr, 'a:prstGeom', {'prst': 'rect'})
        sub_element(geom, 'a:avLst')
        return run
