"""
WordML serializer for the document body.

Turns model nodes into WordprocessingML elements: runs, paragraphs,
hyperlinks, tables, section headings and the final section properties.
Images are delegated to ImageExporter; media and hyperlink relationships are
requested from the PartRegistry in document walk order.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Iterator, List, Optional, Tuple

from ..config import BuildOptions
from ..exceptions import StructureError
from ..models.document import Block, Document, Section
from ..models.image import Image, VectorImage
from ..models.metadata import DocumentMetadata, format_display_date
from ..models.table import Table, TableCell
from ..models.text import Hyperlink, Paragraph, Run
from ..models.traceability import build_section_to_traced_table, build_traced_to_section_table
from ..package.constants import RT_HYPERLINK
from ..package.registry import PartId, PartRegistry
from ..utils.xml_utils import needs_space_preserve, qn, sub_element, to_fragment, to_xml_bytes
from .image_exporter import ImageExporter

logger = logging.getLogger(__name__)

MAX_HEADING_LEVEL = 6
_SPECIAL_CHARS = re.compile(r"(\n|\t)")


def split_evenly(total: int, count: int) -> List[int]:
    """
    Split total into count integer widths summing exactly to total.

    The remainder of the integer division goes to the first column.
    """
    base, remainder = divmod(total, count)
    widths = [base] * count
    widths[0] += remainder
    return widths


def heading_style(depth: int) -> str:
    return f"Heading{min(depth + 1, MAX_HEADING_LEVEL)}"


def iter_image_locations(document: Document) -> Iterator[Tuple[str, Image]]:
    """Yield (location, image) for every image in document walk order."""
    for s_index, section in enumerate(document.sections):
        yield from _block_images(section.blocks, f"section[{s_index}]")


def _block_images(blocks: List[Block], prefix: str) -> Iterator[Tuple[str, Image]]:
    for b_index, block in enumerate(blocks):
        location = f"{prefix}.block[{b_index}]"
        if isinstance(block, Paragraph):
            for i_index, image in enumerate(block.iter_images()):
                yield f"{location}.image[{i_index}]", image
        elif isinstance(block, Table):
            for r_index, row in enumerate(block.rows):
                for c_index, cell in enumerate(row.cells):
                    yield from _block_images(cell.blocks,
                                             f"{location}.row[{r_index}].cell[{c_index}]")


def collect_vector_images(document: Document) -> List[Tuple[str, VectorImage]]:
    return [(location, image) for location, image in iter_image_locations(document)
            if isinstance(image, VectorImage)]


class WordMLSerializer:
    """
    Serializes a Document into the main document part.

    Args:
        registry: Registry receiving hyperlink relationships
        source: The main document part
        options: Build options
        images: Image serializer sharing the same registry and source
    """

    def __init__(self, registry: PartRegistry, source: PartId, options: BuildOptions,
                 images: ImageExporter):
        self.registry = registry
        self.source = source
        self.options = options
        self.images = images
        logger.debug("WordML serializer initialized")

    # ------------------------------------------------------------------
    # Runs

    def export_run(self, run: Run, style: Optional[str] = None) -> ET.Element:
        """
        Export a run.

        w:rPr is written only when the run has a character style or at least
        one formatting toggle; toggles follow schema order (b, i, strike).
        Newlines become w:br and tabs w:tab.
        """
        r = ET.Element(qn('w:r'))
        if style or run.properties.has_formatting:
            r_pr = sub_element(r, 'w:rPr')
            if style:
                sub_element(r_pr, 'w:rStyle', {'w:val': style})
            if run.bold:
                sub_element(r_pr, 'w:b')
            if run.italic:
                sub_element(r_pr, 'w:i')
            if run.strikethrough:
                sub_element(r_pr, 'w:strike')

        text = run.text.replace('\r\n', '\n').replace('\r', '\n')
        pieces = [piece for piece in _SPECIAL_CHARS.split(text) if piece]
        if not pieces:
            sub_element(r, 'w:t')
        for piece in pieces:
            if piece == '\n':
                sub_element(r, 'w:br')
            elif piece == '\t':
                sub_element(r, 'w:tab')
            else:
                t = sub_element(r, 'w:t')
                t.text = piece
                if needs_space_preserve(piece):
                    t.set(qn('xml:space'), 'preserve')
        return r

    def export_hyperlink(self, link: Hyperlink) -> ET.Element:
        rel_id = self.registry.add_relationship(self.source, RT_HYPERLINK, link.url)
        element = ET.Element(qn('w:hyperlink'))
        element.set(qn('r:id'), rel_id)
        for run in link.runs:
            element.append(self.export_run(run, style="Hyperlink"))
        return element

    # ------------------------------------------------------------------
    # Paragraphs

    def export_paragraph(self, paragraph: Paragraph, location: str = "",
                         available_width: Optional[int] = None) -> ET.Element:
        """
        Export a paragraph and its inline content.

        Args:
            paragraph: Paragraph to export
            location: Model path of the paragraph, for error messages
            available_width: Width in twips images may occupy

        Returns:
            w:p element
        """
        p = ET.Element(qn('w:p'))
        if paragraph.style or paragraph.alignment:
            p_pr = sub_element(p, 'w:pPr')
            if paragraph.style:
                sub_element(p_pr, 'w:pStyle', {'w:val': paragraph.style})
            if paragraph.alignment:
                sub_element(p_pr, 'w:jc', {'w:val': paragraph.alignment.value})

        image_index = 0
        for child in paragraph.children:
            if isinstance(child, Run):
                p.append(self.export_run(child))
            elif isinstance(child, Hyperlink):
                p.append(self.export_hyperlink(child))
            elif isinstance(child, Image):
                p.append(self.images.export_image(child, f"{location}.image[{image_index}]",
                                                  available_width))
                image_index += 1
            else:
                raise TypeError(f"Unsupported inline content: {type(child).__name__}")
        return p

    def _text_paragraph(self, text: str, style: Optional[str] = None) -> ET.Element:
        paragraph = Paragraph(style=style)
        paragraph.add_run(text)
        return self.export_paragraph(paragraph)

    # ------------------------------------------------------------------
    # Tables

    def column_widths(self, table: Table, available_width: Optional[int] = None,
                      location: Optional[str] = None) -> List[int]:
        """Grid widths in twips: explicit widths, or an even split of the table width."""
        if table.column_widths is not None:
            widths = list(table.column_widths)
            if len(widths) != table.columns:
                raise StructureError(
                    f"Expected {table.columns} column widths, got {len(widths)}", location=location)
            return widths
        total = table.width or available_width or self.options.text_width
        if total < table.columns:
            raise StructureError("Table is narrower than one twip per column",
                                 details=f"{total} twips for {table.columns} columns",
                                 location=location)
        return split_evenly(total, table.columns)

    def export_table(self, table: Table, location: str = "",
                     available_width: Optional[int] = None) -> ET.Element:
        """
        Export a table.

        Layout: w:tblPr, w:tblGrid with one w:gridCol per column, then one
        w:tr per row and one w:tc per cell. Cells recurse into their blocks.
        """
        widths = self.column_widths(table, available_width, location or None)
        for r_index, row in enumerate(table.rows):
            if len(row.cells) != table.columns:
                raise StructureError(
                    f"Row has {len(row.cells)} cells but the table declares {table.columns} columns",
                    location=f"{location}.row[{r_index}]",
                )
        tbl = ET.Element(qn('w:tbl'))

        tbl_pr = sub_element(tbl, 'w:tblPr')
        sub_element(tbl_pr, 'w:tblStyle', {'w:val': 'TableGrid'})
        sub_element(tbl_pr, 'w:tblW', {'w:w': sum(widths), 'w:type': 'dxa'})
        sub_element(tbl_pr, 'w:tblLayout', {'w:type': 'fixed'})

        tbl_grid = sub_element(tbl, 'w:tblGrid')
        for width in widths:
            sub_element(tbl_grid, 'w:gridCol', {'w:w': width})

        for r_index, row in enumerate(table.rows):
            tr = sub_element(tbl, 'w:tr')
            if table.header_row and r_index == 0:
                tr_pr = sub_element(tr, 'w:trPr')
                sub_element(tr_pr, 'w:tblHeader')
            for c_index, cell in enumerate(row.cells):
                tr.append(self.export_cell(cell, widths[c_index],
                                           f"{location}.row[{r_index}].cell[{c_index}]"))
        return tbl

    def export_cell(self, cell: TableCell, width: int, location: str = "") -> ET.Element:
        tc = ET.Element(qn('w:tc'))
        tc_pr = sub_element(tc, 'w:tcPr')
        sub_element(tc_pr, 'w:tcW', {'w:w': width, 'w:type': 'dxa'})
        for element in self.export_blocks(cell.blocks, location, width):
            tc.append(element)
        # A cell must end with a paragraph
        if isinstance(cell.blocks[-1], Table):
            sub_element(tc, 'w:p')
        return tc

    # ------------------------------------------------------------------
    # Blocks and sections

    def export_block(self, block: Block, location: str = "",
                     available_width: Optional[int] = None) -> ET.Element:
        if isinstance(block, Paragraph):
            return self.export_paragraph(block, location, available_width)
        if isinstance(block, Table):
            return self.export_table(block, location, available_width)
        raise TypeError(f"Unsupported block: {type(block).__name__}")

    def export_blocks(self, blocks: List[Block], prefix: str,
                      available_width: Optional[int] = None) -> List[ET.Element]:
        return [self.export_block(block, f"{prefix}.block[{index}]", available_width)
                for index, block in enumerate(blocks)]

    def export_heading(self, section: Section) -> Optional[ET.Element]:
        """Heading paragraph of a section, or None when it has no title."""
        if section.title is None:
            return None
        text = section.heading_text if self.options.number_headings else section.title
        return self._text_paragraph(text, heading_style(section.depth))

    def export_traceability(self, section: Section, document: Document) -> List[ET.Element]:
        meta = section.metadata
        elements = []
        if meta.generate_section_id_to_traced_ids_table:
            elements.append(self.export_table(build_section_to_traced_table(document)))
        if meta.generate_traced_ids_to_section_ids_table:
            elements.append(self.export_table(build_traced_to_section_table(document)))
        return elements

    def export_section(self, section: Section, index: int,
                       document: Optional[Document] = None) -> List[ET.Element]:
        """Heading, generated traceability tables, then the section's blocks."""
        elements = []
        heading = self.export_heading(section)
        if heading is not None:
            elements.append(heading)
        if document is not None and section.metadata.requests_table_generation():
            elements.extend(self.export_traceability(section, document))
        elements.extend(self.export_blocks(section.blocks, f"section[{index}]"))
        return elements

    def export_front_matter(self, metadata: DocumentMetadata) -> List[ET.Element]:
        """Title and revision history that precede the first section."""
        elements = []
        if metadata.title:
            elements.append(self._text_paragraph(metadata.title, "Title"))
        if self.options.include_revision_history and metadata.revision_history:
            elements.append(self._text_paragraph("Revision History", heading_style(0)))
            table = Table(columns=3, header_row=True)
            table.add_row(["Version", "Date", "Description"])
            for entry in metadata.revision_history:
                table.add_row([entry.version, format_display_date(entry.date), entry.description])
            elements.append(self.export_table(table))
        return elements

    def export_sect_pr(self) -> ET.Element:
        """Final section properties: page size and margins."""
        opts = self.options
        sect_pr = ET.Element(qn('w:sectPr'))
        sub_element(sect_pr, 'w:pgSz', {'w:w': opts.page_width, 'w:h': opts.page_height})
        sub_element(sect_pr, 'w:pgMar', {
            'w:top': opts.margin_top,
            'w:right': opts.margin_right,
            'w:bottom': opts.margin_bottom,
            'w:left': opts.margin_left,
            'w:header': opts.margin_header,
            'w:footer': opts.margin_footer,
            'w:gutter': 0,
        })
        return sect_pr

    def export_document(self, document: Document) -> bytes:
        """
        Serialize the whole document body.

        Returns:
            Bytes of word/document.xml
        """
        root = ET.Element(qn('w:document'))
        body = sub_element(root, 'w:body')
        for element in self.export_front_matter(document.metadata):
            body.append(element)
        for index, section in enumerate(document.sections):
            for element in self.export_section(section, index, document):
                body.append(element)
        body.append(self.export_sect_pr())
        logger.debug(f"Serialized {document.section_count} section(s)")
        return to_xml_bytes(root)

    # ------------------------------------------------------------------
    # String variants

    def export_run_xml(self, run: Run) -> str:
        return to_fragment(self.export_run(run))
