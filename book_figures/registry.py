"""Book-wide figure registry.

Collects every numbered image in visit order and renders them as an
ordered list wherever the host finds a registry placeholder.

A placeholder may sit on a page visited before the pages holding most of
the figures, so placeholders are not rendered on sight.  Instead:

1. **Collect**: while pages are visited, :meth:`RegistryCollector.record`
   appends entries and :meth:`RegistryCollector.defer` hands out a
   :class:`PendingSlot` per placeholder.  Each slot remembers the registry
   version (number of entries) at the moment it was met.
2. **Resolve**: after the last page, :meth:`RegistryCollector.freeze`
   closes the registry and :meth:`RegistryCollector.resolve` renders every
   pending slot against the complete list.

:meth:`RegistryCollector.render` can be called at any time; before the
freeze it returns the partial list known so far.

Backlinks are stored relative to the book root and rewritten relative to
the page the list is inserted into, so a registry on ``guide/index.html``
links to ``../index.html#fig1.1.1``.
"""

from __future__ import annotations

import html
import logging
import posixpath
from dataclasses import dataclass

from book_figures.models import ImageReference, RegistryEntry

_log = logging.getLogger("registry")

REGISTRY_CLASS = "figure-registry"
"""CSS class of the rendered ``<ol>`` element."""


@dataclass(frozen=True)
class PendingSlot:
    """A registry placeholder waiting for the complete registry."""

    index: int
    """0-based position among the placeholders of this build."""
    version: int
    """Number of registry entries known when the placeholder was met."""
    page_url: str | None = None


def relative_href(backlink: str, from_page: str | None) -> str:
    """Rewrite a book-root *backlink* for use on the page at *from_page*.

    >>> relative_href("index.html#fig1.1.1", "guide/index.html")
    '../index.html#fig1.1.1'
    >>> relative_href("guide/a.html#fig1.2.1", "guide/index.html")
    'a.html#fig1.2.1'
    """
    target, sep, fragment = backlink.partition("#")
    if not from_page or not target:
        return backlink
    start = posixpath.dirname(from_page) or "."
    return posixpath.relpath(target, start) + sep + fragment


def render_entries(entries: list[RegistryEntry], page_url: str | None = None) -> str:
    """Render *entries* as an ordered HTML list for the page at *page_url*."""
    lines = [f'<ol class="{REGISTRY_CLASS}">']
    for entry in entries:
        href = html.escape(relative_href(entry.backlink, page_url), quote=True)
        text = html.escape(entry.list_caption or entry.alt_or_title, quote=False)
        lines.append(f'<li><a href="{href}">{text}</a></li>')
    lines.append("</ol>")
    return "\n".join(lines)


class RegistryCollector:
    """Ordered collection of numbered images for one build."""

    def __init__(self) -> None:
        self._references: list[ImageReference] = []
        self._pending: list[PendingSlot] = []
        self._frozen = False

    @property
    def references(self) -> list[ImageReference]:
        """Recorded figures in visit order."""
        return list(self._references)

    @property
    def entries(self) -> list[RegistryEntry]:
        return [RegistryEntry.from_reference(ref) for ref in self._references]

    @property
    def version(self) -> int:
        """Registry snapshot version: the number of entries recorded."""
        return len(self._references)

    @property
    def pending(self) -> list[PendingSlot]:
        return list(self._pending)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def record(self, ref: ImageReference) -> RegistryEntry:
        """Append the registry entry for *ref*."""
        self._ensure_open("record a figure")
        expected = self.version + 1
        if ref.book_image_number != expected:
            raise ValueError(
                f"Figure {ref.figure_id} has book number {ref.book_image_number}, "
                f"expected {expected}"
            )
        self._references.append(ref)
        return RegistryEntry.from_reference(ref)

    def defer(self, page_url: str | None = None) -> PendingSlot:
        """Register a placeholder to be rendered once the registry is complete."""
        self._ensure_open("defer a placeholder")
        slot = PendingSlot(index=len(self._pending), version=self.version, page_url=page_url)
        self._pending.append(slot)
        _log.debug(
            "Deferred registry placeholder #%d (%d figure(s) known)",
            slot.index, slot.version,
        )
        return slot

    def render(self, version: int | None = None, page_url: str | None = None) -> str:
        """Render the registry as known now, or as of snapshot *version*.

        Links are made relative to *page_url* when given.
        """
        refs = self._references if version is None else self._references[:version]
        return render_entries([RegistryEntry.from_reference(r) for r in refs], page_url)

    def freeze(self) -> None:
        """Close the registry; no further figures or placeholders are accepted."""
        self._frozen = True

    def resolve(self) -> list[tuple[PendingSlot, str]]:
        """Render every pending placeholder against the complete registry."""
        if not self._frozen:
            raise RuntimeError("Registry must be frozen before placeholders are resolved")
        _log.debug(
            "Resolving %d registry placeholder(s) with %d figure(s)",
            len(self._pending), len(self._references),
        )
        return [(slot, self.render(page_url=slot.page_url)) for slot in self._pending]

    def _ensure_open(self, action: str) -> None:
        if self._frozen:
            raise RuntimeError(f"Cannot {action}: the registry is frozen")
