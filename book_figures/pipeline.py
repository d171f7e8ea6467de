"""Whole-book build: configuration, page discovery, rendering, output.

A book directory holds ``README.md``, an optional ``SUMMARY.md`` listing
the other pages and an optional ``book.json`` whose
``pluginsConfig["image-captions"]`` entry configures captions.

:class:`BookBuild` reads every page in summary order, runs both rendering
phases through :class:`~book_figures.host.BookRenderer` and writes one
HTML fragment per page.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from book_figures.config import CaptionsConfig
from book_figures.host import BookRenderer
from book_figures.models import ImageReference, RegistryEntry
from book_figures.summary import README, SUMMARY, PageEntry, parse_summary

_log = logging.getLogger("pipeline")

BOOK_CONFIG_FILENAME = "book.json"
"""Configuration file looked up in the book directory."""

PLUGIN_NAME = "image-captions"
"""Key of the caption settings under ``pluginsConfig``."""

DEFAULT_OUTPUT_DIRNAME = "_book"
"""Output directory created inside the book directory by default."""


# ---------------------------------------------------------------------------
# Configuration and page discovery
# ---------------------------------------------------------------------------


def load_book_config(path: Path) -> CaptionsConfig:
    """Load caption settings from a ``book.json`` file.

    Accepts a full ``book.json`` (settings under
    ``pluginsConfig["image-captions"]``) or a file holding only the caption
    settings.  A missing file yields the defaults.

    Raises
    ------
    ValueError
        If the file exists but is not valid JSON.
    """
    if not path.is_file():
        _log.debug("No configuration file at %s, using defaults", path)
        return CaptionsConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(raw, dict) and "pluginsConfig" in raw:
        plugins = raw.get("pluginsConfig")
        raw = plugins.get(PLUGIN_NAME) if isinstance(plugins, dict) else None
    return CaptionsConfig.from_mapping(raw)


def discover_pages(book_dir: Path) -> list[PageEntry]:
    """List the pages of the book in build order."""
    summary_file = book_dir / SUMMARY
    if summary_file.is_file():
        return parse_summary(summary_file.read_text(encoding="utf-8"))
    return [PageEntry(path=README, title="Introduction", level=(1, 1))]


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


@dataclass
class BookResult:
    """Rendered pages and the figure registry of one build."""

    pages: dict[str, str] = field(default_factory=dict)
    """Page HTML keyed by page URL, in build order."""
    figures: list[ImageReference] = field(default_factory=list)
    registry: list[RegistryEntry] = field(default_factory=list)
    placeholders: int = 0


def render_pages(
    pages: Iterable[tuple[PageEntry, str]],
    config: CaptionsConfig | None = None,
) -> BookResult:
    """Render in-memory ``(page, markdown)`` pairs, given in build order."""
    renderer = BookRenderer(config)
    for page, markdown in pages:
        renderer.visit_page(page, markdown)
    html_pages = renderer.finish()
    state = renderer.state
    return BookResult(
        pages=html_pages,
        figures=list(state.references),
        registry=state.registry.entries,
        placeholders=len(state.registry.pending),
    )


class BookBuild:
    """Build one book directory."""

    def __init__(
        self,
        book_dir: Path,
        config: CaptionsConfig | None = None,
        config_path: Path | None = None,
    ) -> None:
        self.book_dir = book_dir
        if config is None:
            config = load_book_config(config_path or book_dir / BOOK_CONFIG_FILENAME)
        self.config = config

    def pages(self) -> list[PageEntry]:
        return discover_pages(self.book_dir)

    def run(self) -> BookResult:
        """Read and render every page of the book."""
        t0 = time.monotonic()
        pages = self.pages()
        _log.info("Rendering %d page(s) from %s", len(pages), self.book_dir)

        def _read() -> Iterable[tuple[PageEntry, str]]:
            for page in pages:
                source = self.book_dir / page.path
                yield page, source.read_text(encoding="utf-8")

        result = render_pages(_read(), self.config)
        _log.info(
            "Numbered %d figure(s), resolved %d registry placeholder(s) in %.2fs",
            len(result.figures), result.placeholders, time.monotonic() - t0,
        )
        return result

    def write(self, result: BookResult, output_dir: Path | None = None) -> list[Path]:
        """Write every rendered page below *output_dir*."""
        out = output_dir or self.book_dir / DEFAULT_OUTPUT_DIRNAME
        written: list[Path] = []
        for url, html in result.pages.items():
            target = out / url
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(html + "\n", encoding="utf-8")
            _log.debug("Wrote %s", target)
            written.append(target)
        _log.info("Wrote %d page(s) to %s", len(written), out)
        return written
