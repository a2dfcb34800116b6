"""
Tests for WordMLSerializer.
"""

import xml.etree.ElementTree as ET

import pytest

from docxbuild.config import BuildOptions
from docxbuild.exceptions import StructureError
from docxbuild.export import ImageExporter, WordMLSerializer, split_evenly
from docxbuild.export.xml_exporter import heading_style, iter_image_locations
from docxbuild.models import (
    Alignment,
    Document,
    DocumentMetadata,
    Hyperlink,
    Paragraph,
    RevisionHistoryEntry,
    Run,
    RunProperties,
    Section,
    SectionMetadata,
    Table,
    TableCell,
)
from docxbuild.package import PartRegistry
from docxbuild.package.constants import CT_DOCUMENT_MAIN, RT_HYPERLINK
from docxbuild.utils.xml_utils import NAMESPACES

W = f"{{{NAMESPACES['w']}}}"
R = f"{{{NAMESPACES['r']}}}"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"


@pytest.fixture
def registry():
    return PartRegistry()


@pytest.fixture
def serializer(registry):
    options = BuildOptions()
    source = registry.reserve_part("word/document.xml", CT_DOCUMENT_MAIN)
    images = ImageExporter(registry, source, options)
    return WordMLSerializer(registry, source, options, images)


def _texts(element):
    return "".join(t.text or "" for t in element.iter(f"{W}t"))


class TestSplitEvenly:
    """Test cases for split_evenly."""

    @pytest.mark.parametrize("total, count", [(9360, 2), (9360, 7), (100, 3), (5, 5), (7, 1)])
    def test_sums_to_total(self, total, count):
        widths = split_evenly(total, count)
        assert len(widths) == count
        assert sum(widths) == total

    def test_remainder_goes_to_first_column(self):
        assert split_evenly(100, 3) == [34, 33, 33]


class TestRuns:
    """Test cases for run serialization."""

    def test_plain_run_has_no_properties(self, serializer):
        r = serializer.export_run(Run("plain"))
        assert r.find(f"{W}rPr") is None
        assert _texts(r) == "plain"

    def test_bold_only_has_exactly_one_toggle(self, serializer):
        r = serializer.export_run(Run("bold", RunProperties(bold=True)))
        r_pr = r.find(f"{W}rPr")
        assert [child.tag for child in r_pr] == [f"{W}b"]

    def test_toggles_in_schema_order(self, serializer):
        r = serializer.export_run(Run("all", RunProperties(True, True, True)))
        assert [child.tag for child in r.find(f"{W}rPr")] == [f"{W}b", f"{W}i", f"{W}strike"]

    @pytest.mark.parametrize("text, preserved", [
        ("Hello, ", True), (" lead", True), ("tail ", True), ("inner space", False),
    ])
    def test_space_preservation(self, serializer, text, preserved):
        t = serializer.export_run(Run(text)).find(f"{W}t")
        assert (t.get(XML_SPACE) == "preserve") is preserved

    def test_special_characters_are_escaped(self, serializer):
        xml = serializer.export_run_xml(Run('a < b & c > "d" \'e\''))
        assert "&lt;" in xml and "&amp;" in xml and "&gt;" in xml
        round_trip = ET.fromstring(xml)
        assert _texts(round_trip) == 'a < b & c > "d" \'e\''

    def test_newlines_and_tabs(self, serializer):
        r = serializer.export_run(Run("one\ntwo\tthree\r\nfour"))
        tags = [child.tag.split("}")[1] for child in r]
        assert tags == ["t", "br", "t", "tab", "t", "br", "t"]

    def test_empty_run(self, serializer):
        r = serializer.export_run(Run(""))
        assert [child.tag for child in r] == [f"{W}t"]


class TestParagraphs:
    """Test cases for paragraph serialization."""

    def test_hello_world(self, serializer):
        paragraph = Paragraph()
        paragraph.add_run("Hello, ")
        paragraph.add_run("world!", bold=True)
        p = serializer.export_paragraph(paragraph)
        runs = p.findall(f"{W}r")
        assert len(runs) == 2
        assert runs[0].find(f"{W}rPr") is None
        assert runs[1].find(f"{W}rPr/{W}b") is not None
        assert _texts(p) == "Hello, world!"

    def test_properties(self, serializer):
        p = serializer.export_paragraph(Paragraph(alignment=Alignment.CENTER, style="Title"))
        p_pr = p.find(f"{W}pPr")
        assert [child.tag for child in p_pr] == [f"{W}pStyle", f"{W}jc"]
        assert p_pr.find(f"{W}jc").get(f"{W}val") == "center"

    def test_empty_paragraph(self, serializer):
        assert list(serializer.export_paragraph(Paragraph())) == []

    def test_hyperlink(self, serializer, registry):
        paragraph = Paragraph([Hyperlink("https://example.com", [Run("site", RunProperties(bold=True))])])
        p = serializer.export_paragraph(paragraph)
        link = p.find(f"{W}hyperlink")
        rel_id = link.get(f"{R}id")
        rel = registry.relationships_for(serializer.source)[0]
        assert rel.rel_id == rel_id
        assert rel.rel_type == RT_HYPERLINK
        r_pr = link.find(f"{W}r/{W}rPr")
        assert [child.tag for child in r_pr] == [f"{W}rStyle", f"{W}b"]


class TestTables:
    """Test cases for table serialization."""

    def test_empty_two_by_three(self, serializer):
        table = Table(columns=2)
        for _ in range(3):
            table.add_row([None, None])
        tbl = serializer.export_table(table)
        rows = tbl.findall(f"{W}tr")
        assert len(rows) == 3
        assert all(len(row.findall(f"{W}tc")) == 2 for row in rows)
        grid = [int(col.get(f"{W}w")) for col in tbl.findall(f"{W}tblGrid/{W}gridCol")]
        assert len(grid) == 2
        assert sum(grid) == BuildOptions().text_width
        assert int(tbl.find(f"{W}tblPr/{W}tblW").get(f"{W}w")) == sum(grid)
        for cell in tbl.iter(f"{W}tc"):
            assert len(cell.findall(f"{W}p")) == 1

    def test_element_order(self, serializer):
        table = Table(columns=1)
        table.add_row(["x"])
        tags = [child.tag for child in serializer.export_table(table)]
        assert tags == [f"{W}tblPr", f"{W}tblGrid", f"{W}tr"]

    def test_explicit_widths(self, serializer):
        table = Table(columns=3, column_widths=[1000, 2000, 3000])
        table.add_row(["a", "b", "c"])
        tbl = serializer.export_table(table)
        assert [col.get(f"{W}w") for col in tbl.iter(f"{W}gridCol")] == ["1000", "2000", "3000"]
        assert [tc.find(f"{W}tcPr/{W}tcW").get(f"{W}w") for tc in tbl.iter(f"{W}tc")] == \
            ["1000", "2000", "3000"]

    def test_total_width_split(self, serializer):
        table = Table(columns=3, width=1000)
        table.add_row(["a", "b", "c"])
        widths = [col.get(f"{W}w") for col in serializer.export_table(table).iter(f"{W}gridCol")]
        assert widths == ["334", "333", "333"]

    def test_header_row(self, serializer):
        table = Table(columns=1, header_row=True)
        table.add_row(["Head"])
        table.add_row(["Body"])
        rows = serializer.export_table(table).findall(f"{W}tr")
        assert rows[0].find(f"{W}trPr/{W}tblHeader") is not None
        assert rows[1].find(f"{W}trPr") is None

    def test_nested_table_gets_trailing_paragraph(self, serializer):
        inner = Table(columns=2)
        inner.add_row(["x", "y"])
        cell = TableCell([inner])
        outer = Table(columns=1, width=4000)
        outer.add_row([cell])
        tc = serializer.export_table(outer).find(f"{W}tr/{W}tc")
        children = [child.tag for child in tc]
        assert children == [f"{W}tcPr", f"{W}tbl", f"{W}p"]
        inner_grid = [int(col.get(f"{W}w")) for col in tc.find(f"{W}tbl").iter(f"{W}gridCol")]
        assert sum(inner_grid) == 4000

    @pytest.mark.parametrize("extra", [1, -1])
    def test_row_changed_after_add_row(self, serializer, extra):
        table = Table(columns=2)
        table.add_row(["a", "b"])
        row = table.add_row(["c", "d"])
        if extra > 0:
            row.cells.append(TableCell())
        else:
            row.cells.pop()
        with pytest.raises(StructureError) as excinfo:
            serializer.export_table(table, "section[0].block[1]")
        assert excinfo.value.location == "section[0].block[1].row[1]"

    def test_column_widths_changed_after_construction(self, serializer):
        table = Table(columns=2, column_widths=[1000, 1000])
        table.add_row(["a", "b"])
        table.column_widths.append(500)
        with pytest.raises(StructureError) as excinfo:
            serializer.export_table(table, "section[0].block[0]")
        assert excinfo.value.location == "section[0].block[0]"

    def test_nested_table_wider_than_its_cell(self, serializer):
        inner = Table(columns=3)
        inner.add_row(["x", "y", "z"])
        outer = Table(columns=2, width=2)
        outer.add_row([TableCell([inner]), None])
        with pytest.raises(StructureError, match="one twip per column"):
            serializer.export_table(outer, "section[0].block[0]")


class TestSections:
    """Test cases for headings, front matter and the body."""

    def test_heading_style_clamps(self):
        assert heading_style(0) == "Heading1"
        assert heading_style(5) == "Heading6"
        assert heading_style(9) == "Heading6"

    def test_numbered_heading(self, serializer):
        heading = serializer.export_heading(Section(title="Scope", number="2.1"))
        assert heading.find(f"{W}pPr/{W}pStyle").get(f"{W}val") == "Heading2"
        assert _texts(heading) == "2.1 Scope"

    def test_unnumbered_heading_option(self, registry):
        options = BuildOptions(number_headings=False)
        source = registry.reserve_part("word/document.xml", CT_DOCUMENT_MAIN)
        serializer = WordMLSerializer(registry, source, options,
                                      ImageExporter(registry, source, options))
        assert _texts(serializer.export_heading(Section(title="Scope", number="2.1"))) == "Scope"

    def test_no_heading_without_title(self, serializer):
        assert serializer.export_heading(Section()) is None

    def test_traceability_tables_follow_heading(self, serializer):
        document = Document()
        section = document.add_section("Trace", "1", SectionMetadata(
            section_id="SDD-1", traced_ids=["SRS-1"],
            generate_section_id_to_traced_ids_table=True,
            generate_traced_ids_to_section_ids_table=True))
        section.add_paragraph("after")
        elements = serializer.export_section(section, 0, document)
        assert [el.tag for el in elements] == [f"{W}p", f"{W}tbl", f"{W}tbl", f"{W}p"]

    def test_front_matter(self, serializer):
        metadata = DocumentMetadata(title="Design Doc", revision_history=[
            RevisionHistoryEntry("1.0", "2026-07-06T12:34:56+00:00", "Initial release")])
        elements = serializer.export_front_matter(metadata)
        assert [el.tag for el in elements] == [f"{W}p", f"{W}p", f"{W}tbl"]
        assert elements[0].find(f"{W}pPr/{W}pStyle").get(f"{W}val") == "Title"
        assert "6 Jul 2026" in _texts(elements[2])

    def test_document_body_ends_with_sect_pr(self, serializer, simple_document):
        root = ET.fromstring(serializer.export_document(simple_document))
        body = root.find(f"{W}body")
        assert body[-1].tag == f"{W}sectPr"
        pg_mar = body[-1].find(f"{W}pgMar")
        assert set(key.split("}")[1] for key in pg_mar.attrib) == {
            "top", "right", "bottom", "left", "header", "footer", "gutter"}

    def test_unknown_block_type(self, serializer):
        with pytest.raises(TypeError):
            serializer.export_block("not a block")


class TestImageLocations:
    """Test cases for iter_image_locations."""

    def test_locations(self, raster_image, vector_image):
        document = Document()
        section = document.add_section()
        section.add_paragraph("text")
        section.add_paragraph().add_image(raster_image)
        table = Table(columns=2)
        table.add_row([None, None])
        table.rows[0].cells[1].blocks[0].add_image(vector_image)
        section.add_table(table)
        assert list(iter_image_locations(document)) == [
            ("section[0].block[1].image[0]", raster_image),
            ("section[0].block[2].row[0].cell[1].block[0].image[0]", vector_image),
        ]
