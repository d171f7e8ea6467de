"""Caption template expansion.

Templates are plain strings with four placeholder tokens::

    _CAPTION_              title text, falling back to alt text
    _PAGE_LEVEL_           dotted page level, e.g. 1.2
    _PAGE_IMAGE_NUMBER_    number of the image on its page
    _BOOK_IMAGE_NUMBER_    number of the image in the whole book

Substitution is a single left-to-right pass, so text inserted for one
token is never scanned for further tokens.  Unknown text (including
misspelled tokens) is kept verbatim.
"""

from __future__ import annotations

import re
from typing import Protocol

from book_figures.models import PageLevel, format_level

DEFAULT_CAPTION = "Figure: _CAPTION_"
"""Caption template used when none is configured."""

CAPTION_TOKEN = "_CAPTION_"
PAGE_LEVEL_TOKEN = "_PAGE_LEVEL_"
PAGE_IMAGE_NUMBER_TOKEN = "_PAGE_IMAGE_NUMBER_"
BOOK_IMAGE_NUMBER_TOKEN = "_BOOK_IMAGE_NUMBER_"

_TOKEN_RE = re.compile(
    "|".join(
        re.escape(t)
        for t in (
            CAPTION_TOKEN,
            PAGE_LEVEL_TOKEN,
            PAGE_IMAGE_NUMBER_TOKEN,
            BOOK_IMAGE_NUMBER_TOKEN,
        )
    )
)


class CaptionSubject(Protocol):
    """Anything that carries the values a caption template refers to."""

    @property
    def caption_text(self) -> str: ...

    @property
    def page_level(self) -> PageLevel: ...

    @property
    def page_image_number(self) -> int: ...

    @property
    def book_image_number(self) -> int: ...


def render_caption(template: str, subject: CaptionSubject) -> str:
    """Expand *template* for *subject*.

    An empty template yields an empty string, which callers treat as
    "no caption".
    """
    if not template:
        return ""
    values = {
        CAPTION_TOKEN: subject.caption_text,
        PAGE_LEVEL_TOKEN: format_level(subject.page_level),
        PAGE_IMAGE_NUMBER_TOKEN: str(subject.page_image_number),
        BOOK_IMAGE_NUMBER_TOKEN: str(subject.book_image_number),
    }
    return _TOKEN_RE.sub(lambda m: values[m.group(0)], template)
