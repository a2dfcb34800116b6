"""
docxbuild - OOXML package encoder for WordprocessingML documents.

Compiles an in-memory document model into a schema-valid .docx package:

- Document model: sections, paragraphs, formatted runs, tables, images
- Part registry: every package part and the relationship graph
- Content serializers: WordML body, styles and document properties
- Package assembler: content types, relationship parts, deterministic ZIP

Main entry points:
- build_docx(document, destination): build and report a BuildResult
- DOCXExporter(document, options): export() raises, to_bytes() returns bytes
"""

from .exceptions import (
    DocxBuildError,
    StructureError,
    AssetError,
    PackagingError,
)
from .config import BuildOptions
from .models import (
    Alignment,
    Document,
    DocumentMetadata,
    Hyperlink,
    ImageFormat,
    Paragraph,
    Person,
    RasterImage,
    RevisionHistoryEntry,
    Run,
    RunProperties,
    Section,
    SectionMetadata,
    SectionNumber,
    Table,
    TableCell,
    TableRow,
    VectorImage,
)
from .media import MediaConverter
from .export import BuildResult, DOCXExporter, build_docx

__version__ = "0.1.0"

__all__ = [
    "DocxBuildError",
    "StructureError",
    "AssetError",
    "PackagingError",
    "BuildOptions",
    "Alignment",
    "Document",
    "DocumentMetadata",
    "Hyperlink",
    "ImageFormat",
    "Paragraph",
    "Person",
    "RasterImage",
    "RevisionHistoryEntry",
    "Run",
    "RunProperties",
    "Section",
    "SectionMetadata",
    "SectionNumber",
    "Table",
    "TableCell",
    "TableRow",
    "VectorImage",
    "MediaConverter",
    "BuildResult",
    "DOCXExporter",
    "build_docx",
]
