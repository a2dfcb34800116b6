"""
Document and section metadata.

Covers the package-level properties written to docProps, the revision history
table, section numbering and section traceability identifiers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..exceptions import StructureError
from ..utils.xml_utils import find_illegal_xml_chars

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# W3CDTF forms accepted by dcterms:created/modified
_W3CDTF = re.compile(
    r"^\d{4}(-\d{2}(-\d{2}(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2}))?)?)?$"
)


def format_display_date(iso_date: str) -> str:
    """
    Format an ISO 8601 date for display, e.g. ``2026-07-06T12:34:56+00:00`` -> ``6 Jul 2026``.

    Strings that cannot be parsed are returned unchanged.
    """
    date_part = iso_date.split("T", 1)[0]
    parts = date_part.split("-")
    if len(parts) >= 3:
        try:
            year, month, day = int(parts[0]), int(parts[1]), int(parts[2])
        except ValueError:
            return iso_date
        if 1 <= month <= 12:
            return f"{day} {_MONTHS[month - 1]} {year}"
    return iso_date


def is_w3cdtf(value: str) -> bool:
    """Whether value is a date/time string acceptable to dcterms:W3CDTF."""
    return bool(_W3CDTF.match(value))


def check_xml_text(value: Optional[str], label: str) -> None:
    """
    Reject text that cannot be written into an XML part.

    None is accepted; anything else must be a string free of characters
    outside the XML 1.0 Char production.

    Raises:
        StructureError: If value is not a string or holds an illegal character
    """
    if value is None:
        return
    if not isinstance(value, str):
        raise StructureError(f"{label} must be a string", details=repr(value))
    bad = find_illegal_xml_chars(value)
    if bad is not None:
        raise StructureError(f"{label} contains a character XML cannot carry",
                             details=f"U+{ord(bad):04X}")


@dataclass(frozen=True)
class Person:
    name: str
    email: str = ""

    def __post_init__(self):
        check_xml_text(self.name, "Person name")
        check_xml_text(self.email, "Person email")


@dataclass(frozen=True)
class RevisionHistoryEntry:
    """One row of the revision history table."""

    version: str
    date: str
    description: str

    def __post_init__(self):
        check_xml_text(self.version, "Revision version")
        check_xml_text(self.date, "Revision date")
        check_xml_text(self.description, "Revision description")


@dataclass
class DocumentMetadata:
    """Descriptive properties of the document, written to docProps/core.xml."""

    title: str = ""
    subtitle: Optional[str] = None
    description: Optional[str] = None
    document_id: Optional[str] = None
    doc_type: Optional[str] = None
    owner: Optional[Person] = None
    approver: Optional[Person] = None
    version: Optional[str] = None
    modified: Optional[str] = None
    revision_history: List[RevisionHistoryEntry] = field(default_factory=list)

    def __post_init__(self):
        for name in ("title", "subtitle", "description", "document_id", "doc_type", "version"):
            check_xml_text(getattr(self, name), f"Metadata {name}")
        for name in ("owner", "approver"):
            person = getattr(self, name)
            if person is not None and not isinstance(person, Person):
                raise StructureError(f"Metadata {name} must be a Person", details=repr(person))
        for entry in self.revision_history:
            if not isinstance(entry, RevisionHistoryEntry):
                raise StructureError("Revision history rows must be RevisionHistoryEntry values",
                                     details=repr(entry))
        if self.modified is not None and not is_w3cdtf(self.modified):
            raise StructureError(
                "Modified date must be an ISO 8601 date or date-time with timezone",
                details=self.modified,
            )


@dataclass(frozen=True, order=True)
class SectionNumber:
    """Hierarchical section number such as 1.2.3."""

    parts: Tuple[int, ...]

    def __post_init__(self):
        if not self.parts:
            raise StructureError("Section number must have at least one component")
        if any(part < 0 for part in self.parts):
            raise StructureError("Section number components must be non-negative",
                                 details=str(self.parts))

    @classmethod
    def parse(cls, text: str) -> Optional["SectionNumber"]:
        """
        Parse a dotted prefix like ``01.02`` into a section number.

        Returns None when any component is not a number.
        """
        try:
            parts = tuple(int(part) for part in text.split("."))
        except ValueError:
            return None
        if any(part < 0 for part in parts):
            return None
        return cls(parts)

    @property
    def depth(self) -> int:
        """Nesting level: 0 for top-level sections."""
        return len(self.parts) - 1

    def __str__(self) -> str:
        return ".".join(str(part) for part in self.parts)


@dataclass
class SectionMetadata:
    """Traceability identifiers attached to a section."""

    section_id: Optional[str] = None
    traced_ids: Optional[List[str]] = None
    generate_section_id_to_traced_ids_table: bool = False
    generate_traced_ids_to_section_ids_table: bool = False

    def __post_init__(self):
        check_xml_text(self.section_id, "Section id")
        if self.traced_ids is not None:
            self.traced_ids = list(self.traced_ids)
            for index, traced_id in enumerate(self.traced_ids):
                check_xml_text(traced_id, f"Traced id [{index}]")

    def has_traceability(self) -> bool:
        return self.section_id is not None or self.traced_ids is not None

    def requests_table_generation(self) -> bool:
        return (self.generate_section_id_to_traced_ids_table
                or self.generate_traced_ids_to_section_ids_table)
