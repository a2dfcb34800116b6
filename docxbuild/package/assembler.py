"""
Package assembler - turns a populated PartRegistry into the ZIP container.

Entries are written in a fixed order with fixed timestamps and attributes so
identical input yields byte-identical archives. The final file is written
next to the destination and moved into place only once complete.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import List, Tuple, Union

from ..exceptions import PackagingError
from ..utils.xml_utils import NAMESPACES, to_xml_bytes
from .constants import CONTENT_TYPES_PART, DOCUMENT_PART, MEDIA_DIR, ROOT_RELS_PART
from .content_types import ContentTypesManifest
from .registry import PartRegistry
from .validator import validate_registry

logger = logging.getLogger(__name__)

# Earliest timestamp a ZIP entry can carry
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

_RELS_NS = NAMESPACES['rels']
_COMPRESSION = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}


def relationships_xml(registry: PartRegistry, source) -> bytes:
    """Serialize the relationships of one source part."""
    root = ET.Element(f"{{{_RELS_NS}}}Relationships")
    for rel in registry.relationships_for(source):
        attrs = {
            "Id": rel.rel_id,
            "Type": rel.rel_type,
            "Target": registry.relationship_target(source, rel),
        }
        if rel.is_external:
            attrs["TargetMode"] = "External"
        ET.SubElement(root, f"{{{_RELS_NS}}}Relationship", attrs)
    return to_xml_bytes(root, default_namespace=_RELS_NS, indent=True)


def _default_file_mode() -> int:
    """Mode a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class PackageAssembler:
    """
    Serialize a registry into a .docx archive.

    Args:
        registry: Fully populated registry; frozen when assembly starts
        compression: "deflated" or "stored"
        main_part: Path written as the first entry
    """

    def __init__(self, registry: PartRegistry, compression: str = "deflated",
                 main_part: str = DOCUMENT_PART):
        if compression not in _COMPRESSION:
            raise ValueError(f"Unsupported compression: {compression}")
        self.registry = registry
        self.compression = _COMPRESSION[compression]
        self.main_part = main_part

    def build_entries(self) -> List[Tuple[str, bytes]]:
        """
        Compute every archive entry in write order.

        Order: main part, content types, relationship parts (root first),
        remaining non-media parts by path, media parts by path.

        Raises:
            PackagingError: If the registry fails closure or reachability checks
        """
        self.registry.freeze()
        validate_registry(self.registry)

        parts = self.registry.parts()
        manifest = ContentTypesManifest.from_parts(parts)

        rels_entries = [(self.registry.rels_path(source), relationships_xml(self.registry, source))
                        for source in self.registry.sources()]
        rels_entries.sort(key=lambda entry: (entry[0] != ROOT_RELS_PART, entry[0]))

        main, other, media = [], [], []
        for part in parts:
            if part.path == self.main_part:
                main.append((part.path, part.data))
            elif part.path.startswith(MEDIA_DIR + "/"):
                media.append((part.path, part.data))
            else:
                other.append((part.path, part.data))
        if not main:
            raise PackagingError("Main document part is not registered", part_name=self.main_part)

        entries = (main
                   + [(CONTENT_TYPES_PART, manifest.to_xml())]
                   + rels_entries
                   + sorted(other)
                   + sorted(media))
        manifest.check_complete(path for path, _ in entries if path != CONTENT_TYPES_PART)
        return entries

    def _entry_info(self, name: str) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
        info.compress_type = self.compression
        info.create_system = 3
        info.external_attr = 0o644 << 16
        return info

    def to_bytes(self) -> bytes:
        """Return the complete archive as bytes."""
        entries = self.build_entries()
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, data in entries:
                archive.writestr(self._entry_info(name), data)
        logger.debug(f"Assembled package with {len(entries)} entries")
        return buffer.getvalue()

    def write(self, destination: Union[str, Path]) -> Path:
        """
        Write the archive to destination atomically.

        Raises:
            PackagingError: On any I/O failure; the destination is left untouched
        """
        destination = Path(destination)
        payload = self.to_bytes()
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(dir=destination.parent or ".",
                                             prefix=f".{destination.name}.",
                                             suffix=".tmp", delete=False) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_path, _default_file_mode())
            os.replace(tmp_path, destination)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise PackagingError("Failed to write package", details=str(e),
                                 location=str(destination)) from e
        logger.info(f"Wrote package {destination} ({len(payload)} bytes)")
        return destination
