"""
Build options for the DOCX encoder.

Options can be passed either as a BuildOptions instance or as a plain mapping
of option names to values (the way exporters receive export options).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Union

SVG_RASTERIZERS = ("cairosvg", "none")
COMPRESSION_MODES = ("deflated", "stored")


@dataclass(frozen=True)
class BuildOptions:
    """Page geometry, media handling and package settings for one build."""

    # Page geometry in twips (US Letter, 1" margins)
    page_width: int = 12240
    page_height: int = 15840
    margin_top: int = 1440
    margin_right: int = 1440
    margin_bottom: int = 1440
    margin_left: int = 1440
    margin_header: int = 720
    margin_footer: int = 720

    # Media
    image_dpi: int = 96
    fit_images_to_page: bool = True
    svg_rasterizer: str = "cairosvg"
    fallback_scale: float = 1.0
    rasterize_workers: int = 4

    # Package
    compression: str = "deflated"
    application_name: str = "docxbuild"

    # Content
    default_font: str = "Calibri"
    default_font_size: float = 11
    number_headings: bool = True
    include_revision_history: bool = True

    def __post_init__(self):
        for name in ("page_width", "page_height", "image_dpi"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        for name in ("margin_top", "margin_right", "margin_bottom", "margin_left",
                     "margin_header", "margin_footer"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if self.text_width <= 0:
            raise ValueError("Margins leave no room for text")
        if self.svg_rasterizer not in SVG_RASTERIZERS:
            raise ValueError(f"Unsupported svg_rasterizer: {self.svg_rasterizer}")
        if self.compression not in COMPRESSION_MODES:
            raise ValueError(f"Unsupported compression: {self.compression}")
        if not isinstance(self.rasterize_workers, int) or self.rasterize_workers < 0:
            raise ValueError("rasterize_workers must be a non-negative integer")
        if not isinstance(self.fallback_scale, (int, float)) or self.fallback_scale <= 0:
            raise ValueError("fallback_scale must be positive")
        if not isinstance(self.default_font_size, (int, float)) or self.default_font_size <= 0:
            raise ValueError("default_font_size must be positive")
        if not self.default_font:
            raise ValueError("default_font must be a non-empty string")

    @property
    def text_width(self) -> int:
        """Width between the left and right margins, in twips."""
        return self.page_width - self.margin_left - self.margin_right

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "BuildOptions":
        """
        Create options from a mapping.

        Args:
            options: Option names and values

        Returns:
            BuildOptions with defaults for every missing key

        Raises:
            ValueError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown build options: {', '.join(unknown)}")
        return cls(**dict(options))

    def with_overrides(self, **overrides: Any) -> "BuildOptions":
        """Return a copy with some options replaced."""
        return replace(self, **overrides)


def resolve_options(options: Union[BuildOptions, Mapping[str, Any], None]) -> BuildOptions:
    """Normalize the accepted option forms into a BuildOptions instance."""
    if options is None:
        return BuildOptions()
    if isinstance(options, BuildOptions):
        return options
    if isinstance(options, Mapping):
        return BuildOptions.from_mapping(options)
    raise ValueError(f"Options must be BuildOptions or a mapping, got {type(options).__name__}")
