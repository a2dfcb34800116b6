"""
XML utilities for WordprocessingML parts.

Namespace registry, qualified-name helpers and serialization shared by every
serializer that builds ElementTree trees.
"""

import re
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

NAMESPACES: Dict[str, str] = {
    'w': 'http://schemas.openxmlformats.org/wordprocessingml/2006/main',
    'r': 'http://schemas.openxmlformats.org/officeDocument/2006/relationships',
    'wp': 'http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing',
    'a': 'http://schemas.openxmlformats.org/drawingml/2006/main',
    'pic': 'http://schemas.openxmlformats.org/drawingml/2006/picture',
    'asvg': 'http://schemas.microsoft.com/office/drawing/2016/SVG/main',
    'cp': 'http://schemas.openxmlformats.org/package/2006/metadata/core-properties',
    'dc': 'http://purl.org/dc/elements/1.1/',
    'dcterms': 'http://purl.org/dc/terms/',
    'xsi': 'http://www.w3.org/2001/XMLSchema-instance',
    'ep': 'http://schemas.openxmlformats.org/officeDocument/2006/extended-properties',
    'vt': 'http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes',
    'rels': 'http://schemas.openxmlformats.org/package/2006/relationships',
    'ct': 'http://schemas.openxmlformats.org/package/2006/content-types',
    'xml': 'http://www.w3.org/XML/1998/namespace',
}

# Prefixes written into parts; 'rels', 'ct' and 'ep' are serialized as default namespaces.
_PREFIXED = ('w', 'r', 'wp', 'a', 'pic', 'asvg', 'cp', 'dc', 'dcterms', 'xsi', 'vt')

# Characters XML 1.0 cannot carry, even escaped.
_ILLEGAL_XML_CHARS = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]')


def register_namespaces() -> None:
    """Register the OOXML prefixes so ElementTree writes w:, r:, a: ... instead of ns0:."""
    for prefix in _PREFIXED:
        ET.register_namespace(prefix, NAMESPACES[prefix])


def qn(tag: str) -> str:
    """
    Turn a prefixed name like ``w:p`` into ElementTree's Clark notation.

    Args:
        tag: Prefixed name

    Returns:
        ``{namespace}local`` string
    """
    prefix, _, local = tag.partition(':')
    if not local:
        raise ValueError(f"Tag must be prefixed: {tag}")
    try:
        return f"{{{NAMESPACES[prefix]}}}{local}"
    except KeyError:
        raise ValueError(f"Unknown namespace prefix: {prefix}") from None


def sub_element(parent: ET.Element, tag: str, attrs: Optional[Dict[str, object]] = None) -> ET.Element:
    """Append a child built from prefixed tag and attribute names."""
    element = ET.SubElement(parent, qn(tag))
    if attrs:
        for key, value in attrs.items():
            element.set(qn(key) if ':' in key else key, str(value))
    return element


def find_illegal_xml_chars(text: str) -> Optional[str]:
    """Return the first character in text that XML 1.0 cannot represent, if any."""
    match = _ILLEGAL_XML_CHARS.search(text)
    return match.group(0) if match else None


def needs_space_preserve(text: str) -> bool:
    """Whether consumers would collapse leading or trailing whitespace of text."""
    return bool(text) and (text[0].isspace() or text[-1].isspace())


def to_xml_bytes(root: ET.Element, default_namespace: Optional[str] = None, indent: bool = False) -> bytes:
    """
    Serialize a part root with an XML declaration.

    Args:
        root: Root element of the part
        default_namespace: Namespace to write without a prefix
        indent: Pretty-print the tree (only for parts without mixed content)

    Returns:
        UTF-8 encoded XML
    """
    register_namespaces()
    if default_namespace:
        root = _in_default_namespace(root, default_namespace)
    if indent:
        ET.indent(root, space='  ')
    return ET.tostring(root, encoding='utf-8', xml_declaration=True)


def _in_default_namespace(root: ET.Element, namespace: str) -> ET.Element:
    """
    Copy of root with tags of namespace written unprefixed under an xmlns declaration.

    Attribute names stay unqualified.
    """
    prefix = f"{{{namespace}}}"

    def convert(element: ET.Element) -> ET.Element:
        tag = element.tag
        if tag.startswith(prefix):
            tag = tag[len(prefix):]
        copy = ET.Element(tag, dict(element.attrib))
        copy.text, copy.tail = element.text, element.tail
        copy.extend(convert(child) for child in element)
        return copy

    converted = convert(root)
    converted.attrib = {'xmlns': namespace, **converted.attrib}
    return converted


def to_fragment(element: ET.Element) -> str:
    """Serialize an element as a standalone fragment string."""
    register_namespaces()
    return ET.tostring(element, encoding='unicode')


def iter_attribute_values(root: ET.Element, namespace: str) -> Iterable[str]:
    """Yield every attribute value in the tree whose attribute name lives in namespace."""
    prefix = f"{{{namespace}}}"
    for element in root.iter():
        for key, value in element.attrib.items():
            if key.startswith(prefix):
                yield value
