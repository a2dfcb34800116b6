"""
OPC package layer: part registry, content-type manifest and ZIP assembly.
"""

from .registry import Part, PartId, PartRegistry, Relationship, rels_path_for
from .content_types import ContentTypesManifest
from .assembler import PackageAssembler
from .validator import check_reachability, check_referential_closure, validate_registry

__all__ = [
    "Part",
    "PartId",
    "PartRegistry",
    "Relationship",
    "rels_path_for",
    "ContentTypesManifest",
    "PackageAssembler",
    "check_reachability",
    "check_referential_closure",
    "validate_registry",
]
