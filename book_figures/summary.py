"""Book page tree from a GitBook ``SUMMARY.md``.

The summary is a nested markdown bullet list of links::

    # Summary

    * [Introduction](README.md)
    * [Second](second.md)
        * [Second A](second_a.md)
    * [Third](third.md)

    ## Appendix

    * [Glossary](glossary.md)

Pages are numbered the GitBook way: every part gets a number, articles
are numbered inside their part and nested articles extend the level of
their parent.  The introduction (``README.md``) is chapter ``1.1`` and
is prepended when the summary does not list it, so the listing above
yields ``1.1``, ``1.2``, ``1.2.1``, ``1.3`` and ``2.1``.  A heading
starts a new part once at least one article has been seen.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass

from markdown_it import MarkdownIt

from book_figures.models import PageLevel, format_level

_log = logging.getLogger("summary")

README = "README.md"
"""Source file of the book introduction."""

SUMMARY = "SUMMARY.md"


def page_url(path: str) -> str:
    """Output URL for a markdown source path.

    >>> page_url("README.md")
    'index.html'
    >>> page_url("guide/setup.md")
    'guide/setup.html'
    """
    head, tail = posixpath.split(path)
    if tail.lower() == README.lower():
        name = "index.html"
    else:
        stem, _ = posixpath.splitext(tail)
        name = f"{stem}.html"
    return posixpath.join(head, name) if head else name


@dataclass(frozen=True)
class PageEntry:
    """One page of the book, in build order."""

    path: str
    """Source path relative to the book root (POSIX separators)."""
    title: str
    level: PageLevel

    @property
    def url(self) -> str:
        return page_url(self.path)

    @property
    def level_str(self) -> str:
        return format_level(self.level)


@dataclass(frozen=True)
class _Article:
    part: int
    depth: int
    title: str
    href: str | None


def _is_local_page(href: str | None) -> bool:
    if not href:
        return False
    if "://" in href or href.startswith(("mailto:", "#")):
        return False
    return href.split("#", 1)[0].lower().endswith(".md")


def _normalize(href: str) -> str:
    return posixpath.normpath(href.split("#", 1)[0]).lstrip("/")


def _collect_articles(text: str) -> list[_Article]:
    tokens = MarkdownIt("commonmark").parse(text)
    articles: list[_Article] = []
    part = 1
    depth = 0
    in_item = False

    for tok in tokens:
        if tok.type in ("bullet_list_open", "ordered_list_open"):
            depth += 1
        elif tok.type in ("bullet_list_close", "ordered_list_close"):
            depth -= 1
        elif tok.type == "list_item_open":
            in_item = True
        elif tok.type == "heading_open" and depth == 0 and articles:
            part += 1
        elif tok.type == "inline" and in_item and depth > 0:
            # Only the first paragraph of a list item names the article.
            in_item = False
            title = ""
            href = None
            for child in tok.children or []:
                if child.type == "link_open" and href is None:
                    href = str(child.attrGet("href") or "")
                elif child.type in ("text", "code_inline"):
                    title += child.content
            articles.append(_Article(part, depth, title.strip(), href))

    return articles


def parse_summary(text: str) -> list[PageEntry]:
    """Parse ``SUMMARY.md`` content into numbered pages, introduction first."""
    articles = _collect_articles(text)
    listed = {_normalize(a.href) for a in articles if _is_local_page(a.href)}

    pages: list[PageEntry] = []
    counters: dict[int, list[int]] = {}
    if README not in listed:
        pages.append(PageEntry(path=README, title="Introduction", level=(1, 1)))
        counters[1] = [1]

    seen: set[str] = set()
    for article in articles:
        chain = counters.setdefault(article.part, [])
        del chain[article.depth:]
        while len(chain) < article.depth:
            chain.append(0)
        chain[-1] += 1
        level = (article.part, *chain)

        if not _is_local_page(article.href):
            _log.debug("Summary entry %r has no local page", article.title)
            continue
        path = _normalize(article.href or "")
        if path in seen:
            _log.debug("Summary lists %s more than once", path)
            continue
        seen.add(path)
        pages.append(PageEntry(path=path, title=article.title, level=level))

    return pages
