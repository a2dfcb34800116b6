"""
Document properties parts: docProps/core.xml and docProps/app.xml.

Timestamps are written only when the metadata supplies one, so builds from
the same model stay byte-identical.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from ..models.document import Document
from ..utils.xml_utils import NAMESPACES, qn, sub_element, to_xml_bytes

logger = logging.getLogger(__name__)

_EP_NS = NAMESPACES['ep']


def _text(parent: ET.Element, tag: str, value: Optional[str]) -> None:
    if value:
        sub_element(parent, tag).text = value


def core_properties_xml(document: Document) -> bytes:
    """Dublin Core properties from the document metadata."""
    meta = document.metadata
    root = ET.Element(qn('cp:coreProperties'))
    _text(root, 'dc:title', meta.title)
    _text(root, 'dc:subject', meta.subtitle)
    _text(root, 'dc:description', meta.description)
    _text(root, 'dc:creator', meta.owner.name if meta.owner else None)
    _text(root, 'cp:lastModifiedBy', meta.approver.name if meta.approver else None)
    _text(root, 'dc:identifier', meta.document_id)
    _text(root, 'cp:category', meta.doc_type)
    _text(root, 'cp:version', meta.version)
    if meta.modified:
        for tag in ('dcterms:created', 'dcterms:modified'):
            stamp = sub_element(root, tag, {'xsi:type': 'dcterms:W3CDTF'})
            stamp.text = meta.modified
    return to_xml_bytes(root, indent=True)


def app_properties_xml(document: Document, application: str) -> bytes:
    """Extended properties: producing application and document statistics."""
    root = ET.Element(f"{{{_EP_NS}}}Properties")
    values = (
        ("Application", application),
        ("DocSecurity", 0),
        ("Words", document.word_count),
        ("Characters", document.character_count),
        ("Paragraphs", document.paragraph_count),
    )
    for name, value in values:
        ET.SubElement(root, f"{{{_EP_NS}}}{name}").text = str(value)
    logger.debug(f"Document statistics: {document.word_count} words, "
                 f"{document.table_count} tables, {document.image_count} images")
    return to_xml_bytes(root, default_namespace=_EP_NS, indent=True)
