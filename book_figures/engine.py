"""Per-build numbering engine.

A host creates one :class:`BuildState` per build and passes it to
:func:`render_image` for every image node and to
:func:`render_placeholder` for every registry placeholder, strictly in
document order across all pages.  After the last page the host calls
:meth:`BuildState.finish` and substitutes the returned registry markup for
each pending placeholder.

Decision flow for one image:

1. Inline images and images without alt and title text are rendered bare
   and leave the counters alone.
2. Otherwise the next position is peeked and the per-image override is
   looked up by its key (``"1.2.3"``).
3. An override with ``skip`` releases the position: the page slot is used
   up, the book number is not, and the image is rendered bare.
4. The figure is built at the peeked position.  An empty rendered caption
   means "no caption": the position is released as for ``skip`` and the
   image is rendered bare.
5. Otherwise the position is committed and the figure is recorded in the
   registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from book_figures.config import CaptionsConfig, resolve_settings
from book_figures.figure import Bare, RenderOutcome, build_figure
from book_figures.models import ImageNode, ImageReference
from book_figures.position import PositionTracker
from book_figures.registry import PendingSlot, RegistryCollector

_log = logging.getLogger("engine")


@dataclass
class BuildState:
    """All ordered state of one build: counters and registry.

    Created at build start, frozen by :meth:`finish`, discarded with the
    build.  Never shared between builds.
    """

    config: CaptionsConfig = field(default_factory=CaptionsConfig)
    tracker: PositionTracker = field(default_factory=PositionTracker)
    registry: RegistryCollector = field(default_factory=RegistryCollector)

    @classmethod
    def create(cls, config: CaptionsConfig | None = None) -> BuildState:
        return cls(config=config or CaptionsConfig())

    @property
    def references(self) -> list[ImageReference]:
        """Numbered images in visit order, as recorded in the registry."""
        return self.registry.references

    @property
    def finished(self) -> bool:
        return self.registry.frozen

    def finish(self) -> dict[int, str]:
        """Freeze the build and render every pending placeholder.

        Returns the registry markup keyed by :attr:`PendingSlot.index`.
        """
        self.registry.freeze()
        return {slot.index: markup for slot, markup in self.registry.resolve()}


def render_image(state: BuildState, node: ImageNode) -> RenderOutcome:
    """Number and render one image node."""
    if state.finished:
        raise RuntimeError("Cannot render images after the build has finished")

    if node.is_inline:
        _log.debug("Inline image %s: not numbered", node.url)
        return Bare(node)
    if node.is_hard_skip:
        _log.debug("Image %s has no alt or title text: not numbered", node.url)
        return Bare(node)

    position = state.tracker.peek_next(node.page_level)
    settings = resolve_settings(state.config, position.key)
    if settings.skip:
        state.tracker.release(position)
        _log.debug("Image %s (%s) skipped by configuration", node.url, position.key)
        return Bare(node)

    figure = build_figure(node, position, settings)
    if not figure.reference.rendered_caption:
        state.tracker.release(position)
        _log.debug("Image %s (%s) has an empty caption: not numbered", node.url, position.key)
        return Bare(node)

    state.tracker.commit(position)
    state.registry.record(figure.reference)
    _log.debug(
        "Figure %s (book #%d): %s",
        figure.figure_id, position.book_image_number, node.url,
    )
    return figure


def render_placeholder(state: BuildState, page_url: str | None = None) -> PendingSlot:
    """Register a registry placeholder met on the page at *page_url*.

    The returned slot is filled by :meth:`BuildState.finish`.  Hosts that
    want the partial list right away can use
    ``state.registry.render(slot.version)``.
    """
    if state.finished:
        raise RuntimeError("Cannot render placeholders after the build has finished")
    return state.registry.defer(page_url)
