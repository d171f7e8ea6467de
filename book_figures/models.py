"""Data model for figure numbering.

Holds the host-facing input record (:class:`ImageNode`), the numbered
image identity (:class:`ImageReference`) and the derived registry view
(:class:`RegistryEntry`).  All records are frozen: an image reference is
created once when its node is visited and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

PageLevel = tuple[int, ...]
"""Hierarchical page position, e.g. ``(1, 2, 1)`` for page ``1.2.1``."""


def format_level(level: Sequence[int]) -> str:
    """Join a page level into its dotted form.

    >>> format_level((1, 2, 1))
    '1.2.1'
    """
    return ".".join(str(part) for part in level)


def parse_level(text: str) -> PageLevel | None:
    """Parse a dotted page level, returning ``None`` when malformed.

    >>> parse_level("1.2")
    (1, 2)
    >>> parse_level("1.x") is None
    True
    """
    parts = text.strip().split(".")
    if not all(p.isascii() and p.isdigit() for p in parts):
        return None
    level = tuple(int(p) for p in parts)
    if any(p < 1 for p in level):
        return None
    return level


# ---------------------------------------------------------------------------
# Host input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LinkWrapper:
    """A link whose only content is the image being rendered.

    The figure is emitted inside this link instead of the bare image.
    """

    attributes: dict[str, str] = field(default_factory=dict)
    """Link attributes in source order (``href``, ``title``, ...)."""

    @property
    def href(self) -> str:
        return self.attributes.get("href", "")


@dataclass(frozen=True)
class ImageNode:
    """One image node as handed over by the host, in visit order."""

    url: str
    alt_text: str = ""
    title_text: str = ""
    page_level: PageLevel = (1, 1)
    is_inline: bool = False
    link: LinkWrapper | None = None
    """Set when the image sits alone inside a link."""
    page_url: str | None = None
    """URL of the page holding the image (used for registry backlinks)."""

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Image node without a URL")

    @property
    def is_inside_link_wrapper(self) -> bool:
        return self.link is not None

    @property
    def caption_text(self) -> str:
        """Caption body: the title, falling back to the alt text."""
        return self.title_text or self.alt_text

    @property
    def is_hard_skip(self) -> bool:
        """True when neither alt nor title text is available."""
        return not self.caption_text


# ---------------------------------------------------------------------------
# Numbered images
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImageReference:
    """A numbered image: identity, resolved caption and render settings."""

    source_url: str
    alt_text: str
    title_text: str
    page_level: PageLevel
    page_image_number: int
    book_image_number: int
    rendered_caption: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    alignment: str | None = None
    list_caption: str = ""
    """Caption rendered with the list template (used by registries)."""
    page_url: str | None = None

    @property
    def caption_text(self) -> str:
        return self.title_text or self.alt_text

    @property
    def key(self) -> str:
        """Override lookup key, e.g. ``"1.1.2"``."""
        return f"{format_level(self.page_level)}.{self.page_image_number}"

    @property
    def figure_id(self) -> str:
        return f"fig{self.key}"

    @property
    def backlink(self) -> str:
        """Link target of this figure, relative to the book root."""
        return f"{self.page_url or ''}#{self.figure_id}"


@dataclass(frozen=True)
class RegistryEntry:
    """Registry view of one :class:`ImageReference`."""

    book_image_number: int
    page_level: PageLevel
    page_image_number: int
    alt_or_title: str
    list_caption: str
    figure_id: str
    backlink: str

    @classmethod
    def from_reference(cls, ref: ImageReference) -> RegistryEntry:
        return cls(
            book_image_number=ref.book_image_number,
            page_level=ref.page_level,
            page_image_number=ref.page_image_number,
            alt_or_title=ref.caption_text,
            list_caption=ref.list_caption,
            figure_id=ref.figure_id,
            backlink=ref.backlink,
        )
