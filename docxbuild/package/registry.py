"""
Part registry - the single source of truth for package parts and relationships.

Parts and relationships are referenced through opaque PartId values rather
than object references, so serializers never hold on to registry internals.
Relationship ids are allocated per source part, sequentially from rId1, in
the order relationships are requested.
"""

from __future__ import annotations

import logging
import posixpath
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, NewType, Optional, Union

from ..exceptions import PackagingError, StructureError
from ..models.text import validate_external_uri
from .constants import CONTENT_TYPES_PART, RELS_EXTENSION, ROOT_RELS_PART

logger = logging.getLogger(__name__)

PartId = NewType("PartId", int)


@dataclass(frozen=True)
class Part:
    """
    One package entry: path inside the archive, content type and bytes.

    data is None only while a reserved part waits for its content.
    """

    path: str
    content_type: str
    data: Optional[bytes]

    @property
    def extension(self) -> str:
        name = posixpath.basename(self.path)
        return name.rpartition(".")[2].lower() if "." in name else ""


@dataclass(frozen=True)
class Relationship:
    """
    A typed reference from a source part (or the package root) to a target.

    Exactly one of target_part and target_uri is set.
    """

    rel_id: str
    rel_type: str
    target_part: Optional[PartId] = None
    target_uri: Optional[str] = None

    @property
    def is_external(self) -> bool:
        return self.target_uri is not None


def rels_path_for(part_path: Optional[str]) -> str:
    """
    Return the relationship part that holds relationships of part_path.

    ``word/document.xml`` -> ``word/_rels/document.xml.rels``; None (the
    package root) -> ``_rels/.rels``.
    """
    if part_path is None:
        return ROOT_RELS_PART
    directory, name = posixpath.split(part_path)
    if directory:
        return f"{directory}/_rels/{name}.rels"
    return f"_rels/{name}.rels"


def _check_part_path(path: str) -> None:
    if not isinstance(path, str) or not path:
        raise PackagingError("Part path must be a non-empty string", details=repr(path))
    if path.startswith("/") or "\\" in path or path.endswith("/"):
        raise PackagingError("Part path must be a relative POSIX file path", part_name=path)
    if any(segment in ("", ".", "..") for segment in path.split("/")):
        raise PackagingError("Part path contains an empty or relative segment", part_name=path)
    if path == CONTENT_TYPES_PART or path.lower().endswith("." + RELS_EXTENSION):
        raise PackagingError("Part path is reserved for generated package parts", part_name=path)


class PartRegistry:
    """
    Arena of parts and relationships for one package build.

    The first thread to register a part or relationship becomes the owner;
    mutation from any other thread raises PackagingError, since relationship
    id allocation order is part of the output. After freeze() the registry is
    read-only.
    """

    def __init__(self):
        self._parts: List[Part] = []
        self._by_path: Dict[str, PartId] = {}
        self._by_folded_path: Dict[str, str] = {}
        self._relationships: Dict[Optional[PartId], List[Relationship]] = {}
        self._owner: Optional[int] = None
        self._owner_lock = threading.Lock()
        self._frozen = False

    # ------------------------------------------------------------------
    # Mutation

    def _check_writable(self) -> None:
        if self._frozen:
            raise PackagingError("Part registry is frozen; assembly has already started")
        ident = threading.get_ident()
        with self._owner_lock:
            if self._owner is None:
                self._owner = ident
            elif self._owner != ident:
                raise PackagingError("Part registry is owned by another thread")

    def register_part(self, path: str, content_type: str, data: bytes) -> PartId:
        """
        Register a part and return its id.

        Registering the same path again with identical content type and bytes
        returns the existing id.

        Raises:
            PackagingError: If the path is already registered with different
                content, or differs only in case from a registered path
        """
        self._check_writable()
        _check_part_path(path)
        if not content_type:
            raise PackagingError("Part content type is required", part_name=path)
        if not isinstance(data, (bytes, bytearray)):
            raise PackagingError("Part data must be bytes", part_name=path)
        data = bytes(data)

        existing = self._by_path.get(path)
        if existing is not None:
            part = self._parts[existing]
            if part.data == data and part.content_type == content_type:
                logger.debug(f"Part {path} already registered with identical content")
                return existing
            raise PackagingError("Part path registered twice with different content",
                                 part_name=path)
        part_id = self._add(Part(path, content_type, data))
        logger.debug(f"Registered part {path} ({content_type}, {len(data)} bytes)")
        return part_id

    def reserve_part(self, path: str, content_type: str) -> PartId:
        """
        Register a part whose bytes are supplied later with fill_part().

        Lets a part own relationships before its content exists, as the main
        document does while its body is serialized.
        """
        self._check_writable()
        _check_part_path(path)
        if not content_type:
            raise PackagingError("Part content type is required", part_name=path)
        if path in self._by_path:
            raise PackagingError("Part path is already registered", part_name=path)
        part_id = self._add(Part(path, content_type, None))
        logger.debug(f"Reserved part {path}")
        return part_id

    def fill_part(self, part_id: PartId, data: bytes) -> None:
        """
        Raises:
            PackagingError: If the part is not reserved or already has content
        """
        self._check_writable()
        part = self._require_part(part_id)
        if part.data is not None:
            raise PackagingError("Part content is already set", part_name=part.path)
        if not isinstance(data, (bytes, bytearray)):
            raise PackagingError("Part data must be bytes", part_name=part.path)
        self._parts[part_id] = replace(part, data=bytes(data))
        logger.debug(f"Filled part {part.path} ({len(data)} bytes)")

    def _add(self, part: Part) -> PartId:
        folded = part.path.lower()
        if folded in self._by_folded_path:
            raise PackagingError("Part path collides with an existing part name",
                                 details=self._by_folded_path[folded], part_name=part.path)
        part_id = PartId(len(self._parts))
        self._parts.append(part)
        self._by_path[part.path] = part_id
        self._by_folded_path[folded] = part.path
        return part_id

    def add_relationship(self, source: Optional[PartId], rel_type: str,
                         target: Union[PartId, str]) -> str:
        """
        Add a relationship and return its id (``rId<n>``).

        Args:
            source: Source part, or None for the package root
            rel_type: Relationship type URI
            target: A registered PartId, or an absolute external URI

        Raises:
            PackagingError: If source or target is unknown or the URI is malformed
        """
        self._check_writable()
        if source is not None:
            self._require_part(source)
        if not rel_type:
            raise PackagingError("Relationship type is required")

        if isinstance(target, str):
            try:
                validate_external_uri(target)
            except StructureError as e:
                raise PackagingError("Invalid external relationship target",
                                     details=target) from e
            target_part, target_uri = None, target
        else:
            self._require_part(target)
            target_part, target_uri = target, None

        rels = self._relationships.setdefault(source, [])
        rel_id = f"rId{len(rels) + 1}"
        rels.append(Relationship(rel_id, rel_type, target_part, target_uri))
        logger.debug(f"Added relationship {rel_id} from {self._describe(source)} "
                     f"to {target_uri or self._parts[target_part].path}")
        return rel_id

    def freeze(self) -> None:
        """
        Make the registry read-only.

        Raises:
            PackagingError: If a reserved part never received its content
        """
        for part in self._parts:
            if part.data is None:
                raise PackagingError("Reserved part has no content", part_name=part.path)
        self._frozen = True

    # ------------------------------------------------------------------
    # Queries

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _require_part(self, part_id) -> Part:
        if not isinstance(part_id, int) or isinstance(part_id, bool) \
                or not 0 <= part_id < len(self._parts):
            raise PackagingError("Unknown part id", details=repr(part_id))
        return self._parts[part_id]

    def _describe(self, source: Optional[PartId]) -> str:
        return "package root" if source is None else self._parts[source].path

    def get_part(self, part_id: PartId) -> Part:
        return self._require_part(part_id)

    def part_id_for(self, path: str) -> Optional[PartId]:
        return self._by_path.get(path)

    def parts(self) -> List[Part]:
        """All parts in registration order."""
        return list(self._parts)

    def part_ids(self) -> List[PartId]:
        return [PartId(index) for index in range(len(self._parts))]

    def relationships_for(self, source: Optional[PartId]) -> List[Relationship]:
        """Relationships of source (None for the package root) in creation order."""
        if source is not None:
            self._require_part(source)
        return list(self._relationships.get(source, []))

    def sources(self) -> List[Optional[PartId]]:
        """Sources that own at least one relationship: the root first, then by part id."""
        owners = [source for source, rels in self._relationships.items() if rels]
        return sorted(owners, key=lambda source: -1 if source is None else source)

    def rels_path(self, source: Optional[PartId]) -> str:
        return rels_path_for(None if source is None else self._require_part(source).path)

    def relationship_target(self, source: Optional[PartId], relationship: Relationship) -> str:
        """The Target attribute value: a URI, or a path relative to the source part's folder."""
        if relationship.is_external:
            return relationship.target_uri
        target_path = self._parts[relationship.target_part].path
        if source is None:
            return target_path
        base = posixpath.dirname(self._parts[source].path)
        return posixpath.relpath(target_path, base) if base else target_path

    def __len__(self) -> int:
        return len(self._parts)

    def __contains__(self, path: str) -> bool:
        return path in self._by_path
