"""
Units converter for WordprocessingML packages.

Drawings are sized in EMU, page and table geometry in twips and font sizes in
half-points. Every value that ends up in an XML attribute is an integer.
"""

from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

EMU_PER_INCH = 914400
TWIPS_PER_INCH = 1440
EMU_PER_TWIP = EMU_PER_INCH // TWIPS_PER_INCH  # 635

Number = Union[int, float]


def _number(value: Number, label: str) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} value must be a number, got {value!r}")
    return value


class UnitsConverter:
    """
    Converts between the length units used in DOCX packages.

    Args:
        dpi: Resolution used for pixel conversions (96 unless the build
            options say otherwise)
    """

    def __init__(self, dpi: int = 96):
        if not isinstance(dpi, int) or isinstance(dpi, bool) or dpi <= 0:
            raise ValueError(f"DPI must be a positive integer, got {dpi!r}")
        self.dpi = dpi

    def pixels_to_emu(self, pixels: Number, dpi: Optional[int] = None) -> int:
        """Image pixels to drawing extent, at dpi or the converter's DPI."""
        return int(round(_number(pixels, "Pixel") * EMU_PER_INCH / (dpi or self.dpi)))

    def emu_to_pixels(self, emu: Number, dpi: Optional[int] = None) -> float:
        return _number(emu, "EMU") * (dpi or self.dpi) / EMU_PER_INCH

    @staticmethod
    def twips_to_emu(twips: Number) -> int:
        """Twentieths of a point to EMU (635 EMU per twip)."""
        return int(round(_number(twips, "TWIP") * EMU_PER_TWIP))

    @staticmethod
    def emu_to_twips(emu: Number) -> int:
        return int(round(_number(emu, "EMU") / EMU_PER_TWIP))

    @staticmethod
    def points_to_half_points(points: Number) -> int:
        """Font size for w:sz / w:szCs."""
        return int(round(_number(points, "Point") * 2))

    @staticmethod
    def inches_to_twips(inches: Number) -> int:
        return int(round(_number(inches, "Inch") * TWIPS_PER_INCH))
