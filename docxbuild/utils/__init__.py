"""
Utils module for docxbuild.

Unit conversion, XML helpers and logging setup shared across the encoder.
"""

from .units import UnitsConverter, EMU_PER_INCH, TWIPS_PER_INCH
from .xml_utils import NAMESPACES, qn, sub_element, register_namespaces
from .logger import get_logger, configure_logging, setup_rich_logging

__all__ = [
    "UnitsConverter",
    "EMU_PER_INCH",
    "TWIPS_PER_INCH",
    "NAMESPACES",
    "qn",
    "sub_element",
    "register_namespaces",
    "get_logger",
    "configure_logging",
    "setup_rich_logging",
]
