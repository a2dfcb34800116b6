"""
Table models.

A table declares its column count up front; every row must match it exactly.
Cells hold blocks (paragraphs or nested tables) and always contain at least
one block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Union

from ..exceptions import StructureError
from .text import Paragraph

if TYPE_CHECKING:
    from .document import Block


CellContent = Union["TableCell", Paragraph, str, None]


def check_block(block, owner: str) -> None:
    """Reject anything that is not a paragraph or a non-empty table."""
    if isinstance(block, Table):
        if not block.rows:
            raise StructureError(f"Cannot add a table without rows to a {owner}")
    elif not isinstance(block, Paragraph):
        raise StructureError(f"{owner.capitalize()} blocks must be paragraphs or tables",
                             details=type(block).__name__)


@dataclass(eq=False)
class TableCell:
    """A table cell; holds at least one block."""

    blocks: List["Block"] = field(default_factory=lambda: [Paragraph()])

    def __post_init__(self):
        blocks = list(self.blocks)
        if not blocks:
            raise StructureError("A table cell needs at least one block")
        for block in blocks:
            check_block(block, "cell")
        self.blocks = blocks

    @classmethod
    def from_text(cls, text: str, bold: bool = False) -> "TableCell":
        paragraph = Paragraph()
        if text:
            paragraph.add_run(text, bold=bold)
        return cls([paragraph])

    def add_paragraph(self, paragraph: Optional[Paragraph] = None) -> Paragraph:
        paragraph = paragraph if paragraph is not None else Paragraph()
        check_block(paragraph, "cell")
        self.blocks.append(paragraph)
        return paragraph

    def add_table(self, table: "Table") -> "Table":
        check_block(table, "cell")
        self.blocks.append(table)
        return table

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.blocks if isinstance(block, Paragraph))


def _coerce_cell(content: CellContent) -> TableCell:
    if isinstance(content, TableCell):
        return content
    if content is None:
        return TableCell()
    if isinstance(content, Paragraph):
        return TableCell([content])
    if isinstance(content, str):
        return TableCell.from_text(content)
    raise StructureError("Table cell content must be a TableCell, Paragraph or string",
                         details=type(content).__name__)


@dataclass(eq=False)
class TableRow:
    cells: List[TableCell] = field(default_factory=list)

    def __post_init__(self):
        self.cells = [_coerce_cell(cell) for cell in self.cells]

    def __len__(self) -> int:
        return len(self.cells)


@dataclass(eq=False)
class Table:
    """
    A grid of cells with a fixed column count.

    Args:
        columns: Declared number of columns
        rows: Initial rows; each must have exactly ``columns`` cells
        column_widths: Optional width per column, in twips
        width: Optional total width in twips; defaults to the page text width
        header_row: Whether the first row repeats as a header
    """

    columns: int
    rows: List[TableRow] = field(default_factory=list)
    column_widths: Optional[List[int]] = None
    width: Optional[int] = None
    header_row: bool = False

    def __post_init__(self):
        if not isinstance(self.columns, int) or isinstance(self.columns, bool) or self.columns < 1:
            raise StructureError("A table needs at least one column", details=repr(self.columns))
        if self.width is not None and not _is_positive_int(self.width):
            raise StructureError("Table width must be a positive integer", details=repr(self.width))
        if self.width is not None and self.width < self.columns:
            raise StructureError("Table width must allow at least one twip per column",
                                 details=f"{self.width} twips for {self.columns} columns")
        if self.column_widths is not None:
            widths = list(self.column_widths)
            if len(widths) != self.columns:
                raise StructureError(
                    f"Expected {self.columns} column widths, got {len(widths)}")
            if not all(_is_positive_int(w) for w in widths):
                raise StructureError("Column widths must be positive integers",
                                     details=str(widths))
            if self.width is not None and sum(widths) != self.width:
                raise StructureError("Column widths do not add up to the table width",
                                     details=f"{sum(widths)} != {self.width}")
            self.column_widths = widths
        rows = list(self.rows)
        self.rows = []
        for row in rows:
            self._check_row(row if isinstance(row, TableRow) else TableRow(list(row)))

    def _check_row(self, row: TableRow) -> TableRow:
        if len(row) != self.columns:
            raise StructureError(
                f"Row has {len(row)} cells but the table declares {self.columns} columns",
                location=f"row[{len(self.rows)}]",
            )
        self.rows.append(row)
        return row

    def add_row(self, cells: Iterable[CellContent]) -> TableRow:
        """
        Append a row.

        Raises:
            StructureError: If the number of cells differs from the column count
        """
        return self._check_row(TableRow(list(cells)))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def iter_cells(self) -> Iterator[TableCell]:
        for row in self.rows:
            yield from row.cells


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
