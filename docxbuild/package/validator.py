"""
Structural checks run on a populated registry before anything is written.

- Referential closure: every r:id / r:embed / r:link attribute in an XML part
  names a relationship of that part.
- Reachability: every part can be reached from the package root through
  internal relationships.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Set

from ..exceptions import PackagingError
from ..utils.xml_utils import NAMESPACES, iter_attribute_values
from .constants import RT_OFFICE_DOCUMENT
from .registry import PartId, PartRegistry

logger = logging.getLogger(__name__)


def _is_xml(content_type: str) -> bool:
    return content_type.endswith("+xml") or content_type.endswith("/xml")


def check_referential_closure(registry: PartRegistry) -> None:
    """
    Raises:
        PackagingError: If an XML part references an undefined relationship id
    """
    for part_id in registry.part_ids():
        part = registry.get_part(part_id)
        if not _is_xml(part.content_type):
            continue
        try:
            root = ET.fromstring(part.data)
        except ET.ParseError as e:
            raise PackagingError("Part is not well-formed XML", details=str(e),
                                 part_name=part.path) from e
        defined = {rel.rel_id for rel in registry.relationships_for(part_id)}
        for rel_id in iter_attribute_values(root, NAMESPACES['r']):
            if rel_id not in defined:
                raise PackagingError("Relationship id is referenced but not defined",
                                     details=rel_id, part_name=part.path)


def unreachable_parts(registry: PartRegistry) -> List[str]:
    """Paths of parts no chain of internal relationships from the root leads to."""
    seen: Set[PartId] = set()
    pending: List[Optional[PartId]] = [None]
    while pending:
        source = pending.pop()
        for rel in registry.relationships_for(source):
            if rel.is_external or rel.target_part in seen:
                continue
            seen.add(rel.target_part)
            pending.append(rel.target_part)
    return [registry.get_part(pid).path for pid in registry.part_ids() if pid not in seen]


def check_reachability(registry: PartRegistry) -> None:
    """
    Raises:
        PackagingError: If the root lacks a main document relationship or a
            part is orphaned
    """
    if not any(rel.rel_type == RT_OFFICE_DOCUMENT for rel in registry.relationships_for(None)):
        raise PackagingError("Package has no main document relationship")
    orphans = unreachable_parts(registry)
    if orphans:
        raise PackagingError("Part is not reachable from the package root",
                             details=", ".join(orphans), part_name=orphans[0])


def validate_registry(registry: PartRegistry) -> None:
    check_referential_closure(registry)
    check_reachability(registry)
    logger.debug(f"Validated {len(registry)} parts")
