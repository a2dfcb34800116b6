"""

DOCX exporter - creates DOCX files from document models.

Uses WordMLSerializer to generate the WordML body, registers every part and
relationship in a PartRegistry and hands the registry to PackageAssembler,
which writes the ZIP package with its relationships and [Content_Types].xml.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..config import BuildOptions, resolve_options
from ..exceptions import DocxBuildError, PackagingError
from ..media.converters import MediaConverter
from ..media.rasterizer import FallbackRenderer, Rasterizer, get_rasterizer
from ..models.document import Document
from ..package.assembler import PackageAssembler
from ..package.constants import (
    APP_PROPERTIES_PART,
    CORE_PROPERTIES_PART,
    CT_CORE_PROPERTIES,
    CT_DOCUMENT_MAIN,
    CT_EXTENDED_PROPERTIES,
    CT_STYLES,
    DOCUMENT_PART,
    RT_CORE_PROPERTIES,
    RT_EXTENDED_PROPERTIES,
    RT_OFFICE_DOCUMENT,
    RT_STYLES,
    STYLES_PART,
)
from ..package.registry import PartRegistry
from .image_exporter import ImageExporter
from .properties_exporter import app_properties_xml, core_properties_xml
from .styles_exporter import StylesExporter
from .xml_exporter import WordMLSerializer, collect_vector_images

logger = logging.getLogger(__name__)

# Marker for "use the rasterizer named by BuildOptions.svg_rasterizer"
FROM_OPTIONS: Any = object()

Options = Union[BuildOptions, Mapping[str, Any], None]


@dataclass
class BuildResult:
    """Outcome of build_docx(): the written path on success, the error otherwise."""

    success: bool
    path: Optional[Path] = None
    part_count: int = 0
    error: Optional[DocxBuildError] = None

    def __bool__(self) -> bool:
        return self.success


class DOCXExporter:
    """

    DOCX Exporter - creates DOCX files from document models.

    Each call to export() or to_bytes() runs a fresh build: raster fallbacks
    are rendered, the body is serialized into a new PartRegistry and the
    registry is assembled into a package.

    """

    def __init__(self, document: Document, options: Options = None,
                 rasterizer: Optional[Rasterizer] = FROM_OPTIONS,
                 converter: Optional[MediaConverter] = None):
        """

        Initializes DOCX exporter.

        Args:
            document: Document model to export
            options: BuildOptions or a mapping of option names to values
            rasterizer: SVG rasterizer; None disables SVG support, the
                default resolves the backend named in the options
            converter: Media converter used for format checks

        """
        if document is None:
            raise ValueError("Document cannot be None")
        if not isinstance(document, Document):
            raise ValueError(f"Expected a Document, got {type(document).__name__}")
        self.document = document
        self.options = resolve_options(options)
        self.rasterizer = (get_rasterizer(self.options.svg_rasterizer)
                           if rasterizer is FROM_OPTIONS else rasterizer)
        self.converter = converter or MediaConverter()
        self.registry: Optional[PartRegistry] = None
        logger.debug("DOCXExporter initialized")

    def build_registry(self) -> PartRegistry:
        """
        Serialize the document into a new, fully populated registry.

        Raises:
            AssetError: If an image cannot be embedded
            PackagingError: If parts or relationships conflict
        """
        renderer = FallbackRenderer(self.rasterizer, workers=self.options.rasterize_workers,
                                    scale=self.options.fallback_scale)
        fallbacks = renderer.render_all(collect_vector_images(self.document))

        registry = PartRegistry()
        document_part = registry.reserve_part(DOCUMENT_PART, CT_DOCUMENT_MAIN)
        registry.add_relationship(None, RT_OFFICE_DOCUMENT, document_part)

        styles_part = registry.register_part(STYLES_PART, CT_STYLES,
                                             StylesExporter(self.options).to_xml())
        registry.add_relationship(document_part, RT_STYLES, styles_part)

        images = ImageExporter(registry, document_part, self.options, fallbacks, self.converter)
        serializer = WordMLSerializer(registry, document_part, self.options, images)
        registry.fill_part(document_part, serializer.export_document(self.document))

        core_part = registry.register_part(CORE_PROPERTIES_PART, CT_CORE_PROPERTIES,
                                           core_properties_xml(self.document))
        registry.add_relationship(None, RT_CORE_PROPERTIES, core_part)
        app_part = registry.register_part(
            APP_PROPERTIES_PART, CT_EXTENDED_PROPERTIES,
            app_properties_xml(self.document, self.options.application_name))
        registry.add_relationship(None, RT_EXTENDED_PROPERTIES, app_part)

        self.registry = registry
        return registry

    def _assembler(self) -> PackageAssembler:
        return PackageAssembler(self.build_registry(), compression=self.options.compression)

    def to_bytes(self) -> bytes:
        """Build the package and return its bytes."""
        return self._assembler().to_bytes()

    def export(self, output_path: Union[str, Path]) -> Path:
        """
        Export document to a DOCX file.

        Args:
            output_path: Path to output DOCX file

        Returns:
            The written path

        Raises:
            DocxBuildError: On any failure; nothing is written in that case
        """
        path = self._assembler().write(output_path)
        logger.info(f"Document exported to DOCX: {path}")
        return path


def build_docx(document: Document, destination: Union[str, Path], options: Options = None,
               rasterizer: Optional[Rasterizer] = FROM_OPTIONS) -> BuildResult:
    """
    Build a .docx package from a document model.

    Args:
        document: Document model
        destination: Output file path
        options: BuildOptions or a mapping of option names to values
        rasterizer: SVG rasterizer override (None disables SVG support)

    Returns:
        BuildResult; on failure no file is written and the error is attached
    """
    exporter = DOCXExporter(document, options, rasterizer=rasterizer)
    try:
        path = exporter.export(destination)
    except DocxBuildError as e:
        logger.error(f"Failed to export document to DOCX: {e}")
        return BuildResult(success=False, error=e)
    except Exception as e:
        logger.exception(f"Unexpected error while exporting document to DOCX: {e}")
        error = PackagingError("Unexpected error while building package",
                               details=f"{type(e).__name__}: {e}")
        error.__cause__ = e
        return BuildResult(success=False, error=error)
    part_count = len(exporter.registry) if exporter.registry is not None else 0
    return BuildResult(success=True, path=path, part_count=part_count)
