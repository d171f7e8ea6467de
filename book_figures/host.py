"""Markdown host: feeds parsed pages through the numbering engine.

Pages are parsed with markdown-it-py and walked in build order.  Every
image in an inline container becomes an :class:`~book_figures.models.ImageNode`:

- it is *inline* when the container holds other non-whitespace content,
  unless that content is a link whose only child is the image;
- a link around a lone image is handed over as a
  :class:`~book_figures.models.LinkWrapper`, so the figure ends up inside
  the link.

Only paragraphs can hold figures: an image in a heading or a table cell
is handed over as inline and stays a bare, unnumbered ``<img>``.

A paragraph whose only content became a figure is replaced by the figure
markup; bare images stay in their paragraph.  A paragraph consisting of
``{{ <variable_name> }}`` is a registry placeholder: during the walk it is
recorded as a pending block, and :meth:`BookRenderer.finish` fills every
such block with the complete registry before the pages are rendered.

Only markdown image syntax is numbered.  Raw HTML (``<img src=...>``
written directly into a page) reaches the output untouched and takes no
figure number.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.token import Token

from book_figures.config import CaptionsConfig
from book_figures.engine import BuildState, render_image, render_placeholder
from book_figures.figure import Figure
from book_figures.models import ImageNode, LinkWrapper
from book_figures.registry import PendingSlot
from book_figures.summary import PageEntry

_log = logging.getLogger("host")


def create_parser() -> MarkdownIt:
    """CommonMark parser emitting HTML5 (``<img>``, not ``<img />``)."""
    return MarkdownIt("commonmark", {"xhtmlOut": False})


def placeholder_re(variable_name: str) -> re.Pattern[str]:
    """Regex matching a registry placeholder paragraph.

    Both ``{{ pictures }}`` and the GitBook variable form
    ``{{ book.pictures }}`` are accepted.
    """
    name = re.escape(variable_name)
    return re.compile(rf"^\{{\{{\s*(?:book\.)?{name}\s*\}}\}}$")


# ---------------------------------------------------------------------------
# Inline analysis
# ---------------------------------------------------------------------------


def _is_blank(tok: Token) -> bool:
    if tok.type in ("softbreak", "hardbreak"):
        return True
    return tok.type == "text" and not tok.content.strip()


def find_solo_image(children: list[Token]) -> int | None:
    """Index of the image that is the only content of *children*.

    The image may be wrapped in a link that holds nothing else.  Returns
    ``None`` when the container holds anything besides that image.
    """
    significant = [i for i, tok in enumerate(children) if not _is_blank(tok)]
    types = [children[i].type for i in significant]
    if types == ["image"]:
        return significant[0]
    if types == ["link_open", "image", "link_close"]:
        return significant[1]
    return None


def _link_around(children: list[Token], image_index: int) -> LinkWrapper | None:
    for tok in reversed(children[:image_index]):
        if tok.type == "link_open":
            attrs = {str(k): str(v) for k, v in tok.attrs.items()}
            return LinkWrapper(attributes=attrs)
        if not _is_blank(tok):
            break
    return None


# ---------------------------------------------------------------------------
# Book renderer
# ---------------------------------------------------------------------------


@dataclass
class _ParsedPage:
    page: PageEntry
    tokens: list[Token]
    env: dict[str, Any] = field(default_factory=dict)


class BookRenderer:
    """Two-phase renderer for the pages of one book.

    Call :meth:`visit_page` for every page in build order, then
    :meth:`finish` once to obtain the HTML of every page.
    """

    def __init__(
        self,
        config: CaptionsConfig | None = None,
        md: MarkdownIt | None = None,
    ) -> None:
        self.md = md or create_parser()
        self.state = BuildState.create(config)
        self._pages: list[_ParsedPage] = []
        self._placeholders: list[tuple[PendingSlot, Token]] = []
        variable = self.state.config.variable_name
        self._placeholder_re = placeholder_re(variable) if variable else None

    @property
    def config(self) -> CaptionsConfig:
        return self.state.config

    def visit_page(self, page: PageEntry, markdown: str) -> None:
        """Parse *page* and number its images (phase 1)."""
        env: dict[str, Any] = {}
        tokens = self.md.parse(markdown, env)
        out: list[Token] = []
        i = 0
        while i < len(tokens):
            tok = tokens[i]
            if (
                tok.type == "paragraph_open"
                and i + 2 < len(tokens)
                and tokens[i + 1].type == "inline"
                and tokens[i + 2].type == "paragraph_close"
            ):
                block = self._visit_paragraph(page, tokens[i + 1], env)
                if block is not None:
                    out.append(block)
                    i += 3
                    continue
                out.extend(tokens[i:i + 3])
                i += 3
                continue
            if tok.type == "inline":
                self._visit_inline(page, tok, env, in_paragraph=False)
            out.append(tok)
            i += 1

        self._pages.append(_ParsedPage(page=page, tokens=out, env=env))
        _log.debug("Visited %s (level %s)", page.path, page.level_str)

    def finish(self) -> dict[str, str]:
        """Resolve registry placeholders and render every page (phase 2).

        Returns page HTML keyed by page URL, in build order.
        """
        resolved = self.state.finish()
        for slot, token in self._placeholders:
            token.content = resolved[slot.index] + "\n"

        rendered: dict[str, str] = {}
        for parsed in self._pages:
            html = self.md.renderer.render(parsed.tokens, self.md.options, parsed.env)
            rendered[parsed.page.url] = html.rstrip("\n")
        return rendered

    # -- internals -----------------------------------------------------------

    def _visit_paragraph(
        self,
        page: PageEntry,
        inline: Token,
        env: dict[str, Any],
    ) -> Token | None:
        """Visit a paragraph; return a block replacing it, if any."""
        if self._placeholder_re and self._placeholder_re.match(inline.content.strip()):
            slot = render_placeholder(self.state, page.url)
            block = _html_block("")
            self._placeholders.append((slot, block))
            return block

        markup = self._visit_inline(page, inline, env)
        if markup is None:
            return None
        return _html_block(markup + "\n")

    def _visit_inline(
        self,
        page: PageEntry,
        inline: Token,
        env: dict[str, Any],
        in_paragraph: bool = True,
    ) -> str | None:
        """Render every image of *inline*; return figure markup for a lone figure.

        Bare images are replaced in place.  When the paragraph's only
        content became a figure, its markup is returned and the caller
        replaces the whole paragraph.  Images in other containers
        (headings, table cells) are always handed over as inline.
        """
        children = inline.children or []
        solo = find_solo_image(children) if in_paragraph else None
        new_children: list[Token] = []

        for idx, child in enumerate(children):
            if child.type != "image":
                new_children.append(child)
                continue

            node = ImageNode(
                url=str(child.attrGet("src") or ""),
                alt_text=self.md.renderer.renderInlineAsText(
                    child.children or [], self.md.options, env,
                ),
                title_text=str(child.attrGet("title") or ""),
                page_level=page.level,
                is_inline=idx != solo,
                link=_link_around(children, idx) if idx == solo else None,
                page_url=page.url,
            )
            outcome = render_image(self.state, node)
            if isinstance(outcome, Figure):
                return outcome.markup
            new_children.append(_html_inline(outcome.markup))

        inline.children = new_children
        return None


def _html_inline(content: str) -> Token:
    return Token("html_inline", "", 0, content=content)


def _html_block(content: str) -> Token:
    return Token("html_block", "", 0, content=content, block=True)
