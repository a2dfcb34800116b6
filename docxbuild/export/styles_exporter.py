"""
Styles part (word/styles.xml).

Only the styles the serializers reference: document defaults, Normal, the
default character and table styles, TableGrid, Heading1-6, Title and the
Hyperlink character style.
"""

import logging
import xml.etree.ElementTree as ET

from ..config import BuildOptions
from ..utils.units import UnitsConverter
from ..utils.xml_utils import qn, sub_element, to_xml_bytes

logger = logging.getLogger(__name__)

# Heading font sizes in points, Heading1 first
HEADING_SIZES = (16, 13, 12, 11, 11, 11)
TITLE_SIZE = 28
HYPERLINK_COLOR = "0563C1"


class StylesExporter:
    """Builds the styles part from the build options."""

    def __init__(self, options: BuildOptions):
        self.options = options

    def _style(self, parent: ET.Element, style_type: str, style_id: str, name: str,
               default: bool = False, based_on: str = None, next_style: str = None,
               ui_priority: int = None, semi_hidden: bool = False,
               q_format: bool = False) -> ET.Element:
        attrs = {'w:type': style_type, 'w:styleId': style_id}
        if default:
            attrs['w:default'] = 1
        style = sub_element(parent, 'w:style', attrs)
        sub_element(style, 'w:name', {'w:val': name})
        if based_on:
            sub_element(style, 'w:basedOn', {'w:val': based_on})
        if next_style:
            sub_element(style, 'w:next', {'w:val': next_style})
        if ui_priority is not None:
            sub_element(style, 'w:uiPriority', {'w:val': ui_priority})
        if semi_hidden:
            sub_element(style, 'w:semiHidden')
            sub_element(style, 'w:unhideWhenUsed')
        if q_format:
            sub_element(style, 'w:qFormat')
        return style

    @staticmethod
    def _size(r_pr: ET.Element, points: float) -> None:
        half_points = UnitsConverter.points_to_half_points(points)
        sub_element(r_pr, 'w:sz', {'w:val': half_points})
        sub_element(r_pr, 'w:szCs', {'w:val': half_points})

    def _doc_defaults(self, root: ET.Element) -> None:
        defaults = sub_element(root, 'w:docDefaults')
        r_pr = sub_element(sub_element(defaults, 'w:rPrDefault'), 'w:rPr')
        font = self.options.default_font
        sub_element(r_pr, 'w:rFonts',
                    {'w:ascii': font, 'w:hAnsi': font, 'w:eastAsia': font, 'w:cs': font})
        self._size(r_pr, self.options.default_font_size)
        p_pr = sub_element(sub_element(defaults, 'w:pPrDefault'), 'w:pPr')
        sub_element(p_pr, 'w:spacing', {'w:after': 160, 'w:line': 259, 'w:lineRule': 'auto'})

    def _table_styles(self, root: ET.Element) -> None:
        normal = self._style(root, 'table', 'TableNormal', 'Normal Table', default=True,
                             ui_priority=99, semi_hidden=True)
        tbl_pr = sub_element(normal, 'w:tblPr')
        sub_element(tbl_pr, 'w:tblInd', {'w:w': 0, 'w:type': 'dxa'})
        margins = sub_element(tbl_pr, 'w:tblCellMar')
        for side, width in (('top', 0), ('left', 108), ('bottom', 0), ('right', 108)):
            sub_element(margins, f'w:{side}', {'w:w': width, 'w:type': 'dxa'})

        grid = self._style(root, 'table', 'TableGrid', 'Table Grid', based_on='TableNormal',
                           ui_priority=39)
        p_pr = sub_element(grid, 'w:pPr')
        sub_element(p_pr, 'w:spacing', {'w:after': 0, 'w:line': 240, 'w:lineRule': 'auto'})
        tbl_pr = sub_element(grid, 'w:tblPr')
        borders = sub_element(tbl_pr, 'w:tblBorders')
        for side in ('top', 'left', 'bottom', 'right', 'insideH', 'insideV'):
            sub_element(borders, f'w:{side}',
                        {'w:val': 'single', 'w:sz': 4, 'w:space': 0, 'w:color': 'auto'})

    def _headings(self, root: ET.Element) -> None:
        for level, size in enumerate(HEADING_SIZES, start=1):
            style = self._style(root, 'paragraph', f'Heading{level}', f'heading {level}',
                                based_on='Normal', next_style='Normal', ui_priority=9,
                                q_format=True)
            p_pr = sub_element(style, 'w:pPr')
            sub_element(p_pr, 'w:keepNext')
            sub_element(p_pr, 'w:keepLines')
            sub_element(p_pr, 'w:spacing', {'w:before': 240 if level == 1 else 40, 'w:after': 0})
            sub_element(p_pr, 'w:outlineLvl', {'w:val': level - 1})
            r_pr = sub_element(style, 'w:rPr')
            sub_element(r_pr, 'w:b')
            self._size(r_pr, size)

    def build(self) -> ET.Element:
        root = ET.Element(qn('w:styles'))
        self._doc_defaults(root)

        self._style(root, 'paragraph', 'Normal', 'Normal', default=True, q_format=True)
        self._style(root, 'character', 'DefaultParagraphFont', 'Default Paragraph Font',
                    default=True, ui_priority=1, semi_hidden=True)
        self._table_styles(root)
        self._headings(root)

        title = self._style(root, 'paragraph', 'Title', 'Title', based_on='Normal',
                            next_style='Normal', ui_priority=10, q_format=True)
        p_pr = sub_element(title, 'w:pPr')
        sub_element(p_pr, 'w:spacing', {'w:after': 0, 'w:line': 240, 'w:lineRule': 'auto'})
        self._size(sub_element(title, 'w:rPr'), TITLE_SIZE)

        link = self._style(root, 'character', 'Hyperlink', 'Hyperlink',
                           based_on='DefaultParagraphFont', ui_priority=99)
        r_pr = sub_element(link, 'w:rPr')
        sub_element(r_pr, 'w:color', {'w:val': HYPERLINK_COLOR})
        sub_element(r_pr, 'w:u', {'w:val': 'single'})
        return root

    def to_xml(self) -> bytes:
        logger.debug("Generating styles.xml")
        return to_xml_bytes(self.build())
