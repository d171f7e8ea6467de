"""Shared test fixtures and helpers for book-figures tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from book_figures.models import ImageNode


def make_node(
    alt: str = "bar",
    url: str = "foo.jpg",
    title: str = "",
    level: tuple[int, ...] = (1, 1),
    **kwargs,
) -> ImageNode:
    """Build an image node as a host would hand it over.

    Args:
        alt: Alt text.
        url: Image source.
        title: Title text (empty means none).
        level: Page level of the page holding the image.
        **kwargs: Further :class:`ImageNode` fields (``is_inline``, ``link``, ...).
    """
    return ImageNode(url=url, alt_text=alt, title_text=title, page_level=level, **kwargs)


@pytest.fixture
def node_factory() -> Callable[..., ImageNode]:
    """The :func:`make_node` helper as a fixture."""
    return make_node


@pytest.fixture
def make_book(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Return a function writing ``{relative path: content}`` into a book dir.

    The book directory is ``tmp_path / "book"``; parent directories are
    created as needed.
    """

    def _write(files: dict[str, str]) -> Path:
        book = tmp_path / "book"
        for rel, content in files.items():
            target = book / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        book.mkdir(exist_ok=True)
        return book

    return _write
