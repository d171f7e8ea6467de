"""Figure markup.

Every visited image ends up as one of two render outcomes:

- :class:`Bare`: a plain ``<img>`` tag (inline images, images without
  caption text, images skipped by configuration or whose caption renders
  empty).
- :class:`Figure`: ``<figure id=...><img ...><figcaption>...</figcaption>
  </figure>``, optionally inside the link that wrapped the image.

Both outcomes expose :attr:`markup`, which is a pure function of their
fields, so rendering the same outcome twice gives identical output.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, replace
from typing import Mapping, Union

from book_figures.caption import render_caption
from book_figures.config import EffectiveSettings
from book_figures.models import ImageNode, ImageReference, LinkWrapper
from book_figures.position import Position


def _attr_string(attrs: Mapping[str, str]) -> str:
    return "".join(
        f' {name}="{html.escape(value, quote=True)}"' for name, value in attrs.items()
    )


def img_tag(
    src: str,
    alt: str,
    title: str = "",
    attributes: Mapping[str, str] | None = None,
) -> str:
    """Render a self-contained ``<img>`` tag.

    ``title`` is omitted when empty.  Extra *attributes* follow the core
    ones; an extra attribute with a core name replaces the core value.
    """
    attrs = {"src": src, "alt": alt}
    if title:
        attrs["title"] = title
    if attributes:
        attrs.update(attributes)
    return f"<img{_attr_string(attrs)}>"


def _wrap_in_link(markup: str, link: LinkWrapper | None) -> str:
    if link is None:
        return markup
    return f"<a{_attr_string(link.attributes)}>{markup}</a>"


# ---------------------------------------------------------------------------
# Render outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bare:
    """An image rendered as-is, without number or caption."""

    node: ImageNode

    @property
    def markup(self) -> str:
        n = self.node
        return img_tag(n.url, n.alt_text, n.title_text)

    @property
    def reference(self) -> None:
        return None


@dataclass(frozen=True)
class Figure:
    """A numbered, captioned image."""

    reference: ImageReference
    link: LinkWrapper | None = None

    @property
    def figure_id(self) -> str:
        return self.reference.figure_id

    @property
    def markup(self) -> str:
        ref = self.reference
        cls = f' class="{html.escape(ref.alignment, quote=True)}"' if ref.alignment else ""
        markup = (
            f'<figure id="{html.escape(ref.figure_id, quote=True)}">'
            f"{img_tag(ref.source_url, ref.alt_text, ref.title_text, ref.attributes)}"
            f"<figcaption{cls}>{html.escape(ref.rendered_caption, quote=False)}</figcaption>"
            "</figure>"
        )
        return _wrap_in_link(markup, self.link)


RenderOutcome = Union[Bare, Figure]


def build_figure(
    node: ImageNode,
    position: Position,
    settings: EffectiveSettings,
) -> Figure:
    """Create the figure for *node* at a committed *position*."""
    ref = ImageReference(
        source_url=node.url,
        alt_text=node.alt_text,
        title_text=node.title_text,
        page_level=position.page_level,
        page_image_number=position.page_image_number,
        book_image_number=position.book_image_number,
        attributes=dict(settings.attributes),
        alignment=settings.alignment,
        page_url=node.page_url,
    )
    # Captions refer to the final numbers, so render them from the
    # otherwise complete reference.
    ref = replace(
        ref,
        rendered_caption=render_caption(settings.caption_template, ref),
        list_caption=render_caption(settings.list_caption_template, ref),
    )
    return Figure(reference=ref, link=node.link)
