"""
Traceability tables built from section metadata.

The forward table maps each section id to the ids it traces; the reverse table
maps each traced id back to the sections that reference it. Rows and the ids
inside each cell are sorted lexically.
"""

from __future__ import annotations

from typing import Dict, List, Set

from .document import Document
from .table import Table


def collect_traceability(document: Document) -> Dict[str, Set[str]]:
    """Map section id to its traced ids, across all sections of the document."""
    mapping: Dict[str, Set[str]] = {}
    for section in document.sections:
        meta = section.metadata
        if meta.section_id is None:
            continue
        mapping.setdefault(meta.section_id, set()).update(meta.traced_ids or [])
    return mapping


def invert_traceability(mapping: Dict[str, Set[str]]) -> Dict[str, Set[str]]:
    reverse: Dict[str, Set[str]] = {}
    for section_id, traced in mapping.items():
        for traced_id in traced:
            reverse.setdefault(traced_id, set()).add(section_id)
    return reverse


def _mapping_table(headers: List[str], mapping: Dict[str, Set[str]]) -> Table:
    table = Table(columns=2, header_row=True)
    table.add_row(headers)
    for key in sorted(mapping):
        table.add_row([key, ", ".join(sorted(mapping[key]))])
    return table


def build_section_to_traced_table(document: Document) -> Table:
    """Section ID -> Traced IDs."""
    return _mapping_table(["Section ID", "Traced IDs"], collect_traceability(document))


def build_traced_to_section_table(document: Document) -> Table:
    """Traced ID -> Section IDs."""
    return _mapping_table(["Traced ID", "Section IDs"],
                          invert_traceability(collect_traceability(document)))
