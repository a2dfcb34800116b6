"""
Tests for traceability table builders.
"""

from docxbuild.models import Document, SectionMetadata
from docxbuild.models.traceability import (
    build_section_to_traced_table,
    build_traced_to_section_table,
    collect_traceability,
)


def _rows(table):
    return [[cell.text for cell in row.cells] for row in table.rows]


def _document():
    document = Document()
    document.add_section("Overview", "1", SectionMetadata(section_id="SDD-2",
                                                          traced_ids=["SRS-002", "SRS-001"]))
    document.add_section("Design", "2", SectionMetadata(section_id="SDD-1",
                                                        traced_ids=["SRS-001"]))
    document.add_section("Notes", "3")
    return document


class TestTraceability:
    """Test cases for traceability tables."""

    def test_collect(self):
        assert collect_traceability(_document()) == {
            "SDD-2": {"SRS-001", "SRS-002"},
            "SDD-1": {"SRS-001"},
        }

    def test_forward_table_is_sorted(self):
        table = build_section_to_traced_table(_document())
        assert table.header_row
        assert _rows(table) == [
            ["Section ID", "Traced IDs"],
            ["SDD-1", "SRS-001"],
            ["SDD-2", "SRS-001, SRS-002"],
        ]

    def test_reverse_table_is_sorted(self):
        table = build_traced_to_section_table(_document())
        assert _rows(table) == [
            ["Traced ID", "Section IDs"],
            ["SRS-001", "SDD-1, SDD-2"],
            ["SRS-002", "SDD-2"],
        ]

    def test_document_without_ids_yields_header_only(self):
        document = Document()
        document.add_section("Plain")
        assert _rows(build_section_to_traced_table(document)) == [["Section ID", "Traced IDs"]]
