"""
Document and section models.

A Document is an ordered list of Sections; a Section is an ordered list of
blocks, where a block is either a Paragraph or a Table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

from ..exceptions import StructureError
from .image import Image
from .metadata import DocumentMetadata, SectionMetadata, SectionNumber, check_xml_text
from .table import Table, check_block
from .text import Alignment, Paragraph

Block = Union[Paragraph, Table]

_WORD = re.compile(r"\S+")


def iter_nested_blocks(blocks: List[Block]) -> Iterator[Block]:
    """Yield blocks depth-first, descending into table cells."""
    for block in blocks:
        yield block
        if isinstance(block, Table):
            for cell in block.iter_cells():
                yield from iter_nested_blocks(cell.blocks)


@dataclass(eq=False)
class Section:
    """
    A run of blocks, optionally introduced by a numbered heading.

    Args:
        title: Heading text; no heading is emitted when None
        number: Hierarchical number shown before the title
        blocks: Paragraphs and tables in order
        metadata: Traceability identifiers
        level: Heading depth (0 for top level) when no number is given
    """

    title: Optional[str] = None
    number: Optional[SectionNumber] = None
    blocks: List[Block] = field(default_factory=list)
    metadata: SectionMetadata = field(default_factory=SectionMetadata)
    level: Optional[int] = None

    def __post_init__(self):
        check_xml_text(self.title, "Section title")
        if isinstance(self.number, str):
            parsed = SectionNumber.parse(self.number)
            if parsed is None:
                raise StructureError("Invalid section number", details=self.number)
            self.number = parsed
        if self.level is not None and (not isinstance(self.level, int) or self.level < 0):
            raise StructureError("Section level must be a non-negative integer",
                                 details=repr(self.level))
        blocks = list(self.blocks)
        for block in blocks:
            check_block(block, "section")
        self.blocks = blocks

    @property
    def depth(self) -> int:
        if self.level is not None:
            return self.level
        if self.number is not None:
            return self.number.depth
        return 0

    @property
    def heading_text(self) -> Optional[str]:
        if self.title is None:
            return None
        if self.number is None:
            return self.title
        return f"{self.number} {self.title}"

    def add_paragraph(self, text: Optional[str] = None, bold: bool = False, italic: bool = False,
                      strikethrough: bool = False,
                      alignment: Optional[Alignment] = None) -> Paragraph:
        """Append a paragraph, optionally seeded with one run of text."""
        paragraph = Paragraph(alignment=alignment)
        if text is not None:
            paragraph.add_run(text, bold=bold, italic=italic, strikethrough=strikethrough)
        self.blocks.append(paragraph)
        return paragraph

    def add_block(self, block: Block) -> Block:
        check_block(block, "section")
        self.blocks.append(block)
        return block

    def add_table(self, table: Table) -> Table:
        """
        Append a table.

        Raises:
            StructureError: If the table has no rows
        """
        check_block(table, "section")
        self.blocks.append(table)
        return table


@dataclass(eq=False)
class Document:
    """The root of the model: sections in reading order plus metadata."""

    sections: List[Section] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    def __post_init__(self):
        self.sections = list(self.sections)
        for section in self.sections:
            if not isinstance(section, Section):
                raise StructureError("Document content must be sections",
                                     details=type(section).__name__)

    def add_section(self, title: Optional[str] = None,
                    number: Union[SectionNumber, str, None] = None,
                    metadata: Optional[SectionMetadata] = None) -> Section:
        section = Section(title=title, number=number,
                          metadata=metadata if metadata is not None else SectionMetadata())
        self.sections.append(section)
        return section

    def iter_blocks(self) -> Iterator[Block]:
        """Yield every block of every section, nested table content included."""
        for section in self.sections:
            yield from iter_nested_blocks(section.blocks)

    def iter_images(self) -> Iterator[Image]:
        for block in self.iter_blocks():
            if isinstance(block, Paragraph):
                yield from block.iter_images()

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def table_count(self) -> int:
        return sum(1 for block in self.iter_blocks() if isinstance(block, Table))

    @property
    def image_count(self) -> int:
        return sum(1 for _ in self.iter_images())

    @property
    def paragraph_count(self) -> int:
        return sum(1 for block in self.iter_blocks() if isinstance(block, Paragraph))

    @property
    def word_count(self) -> int:
        words = 0
        for section in self.sections:
            if section.title:
                words += len(_WORD.findall(section.title))
        for block in self.iter_blocks():
            if isinstance(block, Paragraph):
                words += len(_WORD.findall(block.text))
        return words

    @property
    def character_count(self) -> int:
        return sum(len(block.text) for block in self.iter_blocks() if isinstance(block, Paragraph))
