"""Running figure counters for one build.

Two counters are kept: a per-page counter that restarts whenever the page
level changes, and a book-wide counter that only ever grows.

Advancing is split in two steps so that a tentative position can be
inspected (e.g. to look up a per-image override) before it is taken:

1. :meth:`PositionTracker.peek_next` returns the next position without
   changing any state.
2. :meth:`PositionTracker.commit` takes that position (both counters
   advance), or :meth:`PositionTracker.release` gives the book number back
   while still occupying the page slot (the image is skipped by
   configuration).

Not calling either method leaves the tracker untouched, which is how
inline images and images without caption text are handled.
"""

from __future__ import annotations

from dataclasses import dataclass

from book_figures.models import PageLevel, format_level


@dataclass(frozen=True)
class Position:
    """Tentative or committed position of one image."""

    page_level: PageLevel
    page_image_number: int
    book_image_number: int

    @property
    def key(self) -> str:
        """Override lookup key: ``"<page level>.<page image number>"``."""
        return f"{format_level(self.page_level)}.{self.page_image_number}"


class PositionTracker:
    """Page-local and book-wide image counters.

    Counters of pages left behind are never revisited: moving to another
    page level starts page-local numbering from 1 again.
    """

    def __init__(self) -> None:
        self._page_level: PageLevel | None = None
        self._page_count = 0
        self._book_count = 0

    @property
    def page_level(self) -> PageLevel | None:
        """Level of the page the page-local counter belongs to."""
        return self._page_level

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def book_count(self) -> int:
        return self._book_count

    def peek_next(self, page_level: PageLevel) -> Position:
        """Return the position the next image on *page_level* would take."""
        level = tuple(page_level)
        page_count = self._page_count if level == self._page_level else 0
        return Position(
            page_level=level,
            page_image_number=page_count + 1,
            book_image_number=self._book_count + 1,
        )

    def commit(self, position: Position) -> Position:
        """Take *position*: both counters advance to it."""
        self._check_next(position)
        self._occupy_page_slot(position)
        self._book_count = position.book_image_number
        return position

    def release(self, position: Position) -> None:
        """Occupy the page slot of *position* without taking a book number.

        Used for images skipped by configuration: the page-local number is
        consumed (later images keep their keys), the book-wide number is
        handed to the next numbered image.
        """
        self._check_next(position)
        self._occupy_page_slot(position)

    def _occupy_page_slot(self, position: Position) -> None:
        self._page_level = position.page_level
        self._page_count = position.page_image_number

    def _check_next(self, position: Position) -> None:
        expected = self.peek_next(position.page_level)
        if position != expected:
            raise ValueError(
                f"Stale position {position.key} (book #{position.book_image_number}); "
                f"next is {expected.key} (book #{expected.book_image_number})"
            )
