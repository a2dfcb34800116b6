"""
Document model for docxbuild.

Plain validated values describing the document to encode. Construction
rejects invalid states with StructureError; nothing here performs I/O.
"""

from .image import Image, ImageFormat, RasterImage, VectorImage
from .text import Alignment, Hyperlink, Inline, Paragraph, Run, RunProperties
from .table import Table, TableCell, TableRow
from .document import Block, Document, Section
from .metadata import (
    DocumentMetadata,
    Person,
    RevisionHistoryEntry,
    SectionMetadata,
    SectionNumber,
    format_display_date,
)

__all__ = [
    "Image",
    "ImageFormat",
    "RasterImage",
    "VectorImage",
    "Alignment",
    "Hyperlink",
    "Inline",
    "Paragraph",
    "Run",
    "RunProperties",
    "Table",
    "TableCell",
    "TableRow",
    "Block",
    "Document",
    "Section",
    "DocumentMetadata",
    "Person",
    "RevisionHistoryEntry",
    "SectionMetadata",
    "SectionNumber",
    "format_display_date",
]
