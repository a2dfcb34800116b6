"""
[Content_Types].xml manifest.

Derived from the complete set of registered parts just before assembly:
one Default per extension present, plus Overrides for parts whose content
type differs from their extension's default.
"""

from __future__ import annotations

import logging
import posixpath
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, Optional

from ..exceptions import PackagingError
from ..utils.xml_utils import NAMESPACES, to_xml_bytes
from .constants import CT_RELATIONSHIPS, CT_XML, RELS_EXTENSION
from .registry import Part

logger = logging.getLogger(__name__)

_CT_NS = NAMESPACES['ct']


def _extension(path: str) -> str:
    name = posixpath.basename(path)
    return name.rpartition(".")[2].lower() if "." in name else ""


class ContentTypesManifest:
    """Extension defaults and per-part overrides."""

    def __init__(self):
        self.defaults: Dict[str, str] = {}
        self.overrides: Dict[str, str] = {}

    @classmethod
    def from_parts(cls, parts: Iterable[Part]) -> "ContentTypesManifest":
        """
        Compute the manifest for a set of parts.

        Relationship parts are generated by the assembler and covered by the
        ``rels`` default. For other extensions the first part (in path order)
        decides the default; parts that disagree get an override.
        """
        manifest = cls()
        manifest.defaults[RELS_EXTENSION] = CT_RELATIONSHIPS
        manifest.defaults["xml"] = CT_XML
        for part in sorted(parts, key=lambda p: p.path):
            ext = _extension(part.path)
            if not ext:
                manifest.overrides[part.path] = part.content_type
                continue
            default = manifest.defaults.setdefault(ext, part.content_type)
            if default != part.content_type:
                manifest.overrides[part.path] = part.content_type
        return manifest

    def content_type_for(self, path: str) -> Optional[str]:
        if path in self.overrides:
            return self.overrides[path]
        return self.defaults.get(_extension(path))

    def check_complete(self, paths: Iterable[str]) -> None:
        """
        Raises:
            PackagingError: If any path has neither an override nor a default
        """
        for path in paths:
            if self.content_type_for(path) is None:
                raise PackagingError("No content type declared for part", part_name=path)

    def to_xml(self) -> bytes:
        root = ET.Element(f"{{{_CT_NS}}}Types")
        for ext in sorted(self.defaults):
            ET.SubElement(root, f"{{{_CT_NS}}}Default",
                          {"Extension": ext, "ContentType": self.defaults[ext]})
        for path in sorted(self.overrides):
            ET.SubElement(root, f"{{{_CT_NS}}}Override",
                          {"PartName": f"/{path}", "ContentType": self.overrides[path]})
        logger.debug(f"Content types: {len(self.defaults)} defaults, "
                     f"{len(self.overrides)} overrides")
        return to_xml_bytes(root, default_namespace=_CT_NS, indent=True)
