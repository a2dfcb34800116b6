"""
Text models: runs, hyperlinks and paragraphs.

A paragraph holds inline content in author order. Runs are the unit of
formatting and are never merged, even when neighbours share properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Union
from urllib.parse import urlparse

from ..exceptions import StructureError
from ..utils.xml_utils import find_illegal_xml_chars
from .image import Image


class Alignment(str, Enum):
    """Paragraph alignment, written to w:jc."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "both"


@dataclass(frozen=True)
class RunProperties:
    """Character formatting toggles of a run."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False

    @property
    def has_formatting(self) -> bool:
        return self.bold or self.italic or self.strikethrough


@dataclass(eq=False)
class Run:
    """A span of text sharing one set of run properties."""

    text: str
    properties: RunProperties = field(default_factory=RunProperties)

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise StructureError("Run text must be a string", details=repr(self.text))
        bad = find_illegal_xml_chars(self.text)
        if bad is not None:
            raise StructureError("Run text contains a character XML cannot carry",
                                 details=f"U+{ord(bad):04X}")

    @property
    def bold(self) -> bool:
        return self.properties.bold

    @property
    def italic(self) -> bool:
        return self.properties.italic

    @property
    def strikethrough(self) -> bool:
        return self.properties.strikethrough


def validate_external_uri(uri: str) -> str:
    """Return uri if it is an absolute URI usable as an external relationship target."""
    if not isinstance(uri, str) or not uri or uri != uri.strip():
        raise StructureError("External URI must be a non-empty string without surrounding spaces",
                             details=repr(uri))
    parsed = urlparse(uri)
    if parsed.scheme == "mailto" and parsed.path:
        return uri
    if not parsed.scheme or not parsed.netloc or any(ch.isspace() for ch in uri):
        raise StructureError("External URI must be absolute", details=uri)
    return uri


@dataclass(eq=False)
class Hyperlink:
    """Runs linking to an external URI."""

    url: str
    runs: List[Run] = field(default_factory=list)

    def __post_init__(self):
        validate_external_uri(self.url)
        self.runs = list(self.runs)
        if any(not isinstance(run, Run) for run in self.runs):
            raise StructureError("Hyperlink content must be runs", details=self.url)
        if not self.runs:
            raise StructureError("Hyperlink needs at least one run", details=self.url)
        if len({id(run) for run in self.runs}) != len(self.runs):
            raise StructureError("The same run appears twice in a hyperlink", details=self.url)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


Inline = Union[Run, Image, Hyperlink]


@dataclass(eq=False)
class Paragraph:
    """
    Ordered inline content plus paragraph-level properties.

    Args:
        children: Runs, images and hyperlinks in reading order
        alignment: Optional w:jc value
        style: Optional paragraph style id (e.g. "Heading1")
    """

    children: List[Inline] = field(default_factory=list)
    alignment: Optional[Alignment] = None
    style: Optional[str] = None

    def __post_init__(self):
        if self.alignment is not None and not isinstance(self.alignment, Alignment):
            try:
                self.alignment = Alignment(self.alignment)
            except ValueError:
                raise StructureError("Unknown paragraph alignment", details=str(self.alignment)) from None
        items = list(self.children)
        self.children = []
        for item in items:
            self._append(item)

    def _append(self, item: Inline) -> None:
        if not isinstance(item, (Run, Image, Hyperlink)):
            raise StructureError("Paragraph content must be a Run, Image or Hyperlink",
                                 details=type(item).__name__)
        if isinstance(item, (Run, Hyperlink)):
            claimed = {id(run) for run in self.iter_runs()}
            new_runs = [item] if isinstance(item, Run) else item.runs
            if any(id(run) in claimed for run in new_runs):
                raise StructureError("The same run cannot appear twice in a paragraph")
        self.children.append(item)

    def add_run(self, text: str, bold: bool = False, italic: bool = False,
                strikethrough: bool = False) -> Run:
        """Append a new run and return it."""
        run = Run(text, RunProperties(bold=bold, italic=italic, strikethrough=strikethrough))
        self._append(run)
        return run

    def append(self, item: Inline) -> Inline:
        """Append an existing run, image or hyperlink."""
        self._append(item)
        return item

    def add_image(self, image: Image) -> Image:
        self._append(image)
        return image

    def add_hyperlink(self, url: str, text: str, **formatting: bool) -> Hyperlink:
        link = Hyperlink(url, [Run(text, RunProperties(**formatting))])
        self._append(link)
        return link

    def iter_runs(self) -> Iterator[Run]:
        """Yield every run, including those inside hyperlinks."""
        for child in self.children:
            if isinstance(child, Run):
                yield child
            elif isinstance(child, Hyperlink):
                yield from child.runs

    def iter_images(self) -> Iterator[Image]:
        for child in self.children:
            if isinstance(child, Image):
                yield child

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.iter_runs())
