"""
Export module for docxbuild.

Content serializers for the WordML body, styles and properties parts, and
the DOCX exporter that drives a build.
"""

from .xml_exporter import WordMLSerializer, split_evenly
from .image_exporter import ImageExporter
from .styles_exporter import StylesExporter
from .properties_exporter import app_properties_xml, core_properties_xml
from .docx_exporter import DOCXExporter, BuildResult, build_docx

__all__ = [
    "WordMLSerializer",
    "split_evenly",
    "ImageExporter",
    "StylesExporter",
    "app_properties_xml",
    "core_properties_xml",
    "DOCXExporter",
    "BuildResult",
    "build_docx",
]
