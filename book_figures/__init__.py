"""Figure numbering and captions for multi-page markdown books.

Assigns every captionable image of a book a stable figure id and number,
wraps it in a ``<figure>`` with a configurable caption, and renders figure
registries (lists of all figures) wherever a placeholder asks for one.

Key features:
- Page-hierarchical ids (``fig1.2.1``) and book-wide sequential numbers
- Caption templates with ``_CAPTION_``, ``_PAGE_LEVEL_``,
  ``_PAGE_IMAGE_NUMBER_`` and ``_BOOK_IMAGE_NUMBER_`` tokens
- Per-image overrides: custom caption, attributes, alignment, skip
- Two-phase registry rendering, so a registry may precede its figures
- A markdown-it-py based host that builds GitBook style book directories

Note: Imports are deferred so that the numbering core can be used without
importing the markdown host (and ``markdown_it``).  Use explicit imports
from submodules (e.g., ``from book_figures.engine import BuildState``) or
access via this package.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("book-figures")
except PackageNotFoundError:
    __version__ = "0.0.0"  # fallback for uninstalled dev usage


def __getattr__(name: str):
    """Lazy imports to avoid requiring markdown_it at package import time."""
    # Map attribute names to their source modules.
    _lazy_imports = {
        # book_figures.caption
        "DEFAULT_CAPTION": "book_figures.caption",
        "render_caption": "book_figures.caption",
        # book_figures.config
        "CaptionsConfig": "book_figures.config",
        "EffectiveSettings": "book_figures.config",
        "ImageOverride": "book_figures.config",
        "resolve_settings": "book_figures.config",
        # book_figures.engine
        "BuildState": "book_figures.engine",
        "render_image": "book_figures.engine",
        "render_placeholder": "book_figures.engine",
        # book_figures.figure
        "Bare": "book_figures.figure",
        "Figure": "book_figures.figure",
        # book_figures.models
        "ImageNode": "book_figures.models",
        "ImageReference": "book_figures.models",
        "LinkWrapper": "book_figures.models",
        "RegistryEntry": "book_figures.models",
        # book_figures.position
        "Position": "book_figures.position",
        "PositionTracker": "book_figures.position",
        # book_figures.registry
        "PendingSlot": "book_figures.registry",
        "RegistryCollector": "book_figures.registry",
        # book_figures.host
        "BookRenderer": "book_figures.host",
        # book_figures.pipeline
        "BookBuild": "book_figures.pipeline",
        "BookResult": "book_figures.pipeline",
        "load_book_config": "book_figures.pipeline",
        "render_pages": "book_figures.pipeline",
        # book_figures.summary
        "PageEntry": "book_figures.summary",
        "parse_summary": "book_figures.summary",
    }

    if name in _lazy_imports:
        import importlib
        module = importlib.import_module(_lazy_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'book_figures' has no attribute {name!r}")


__all__ = [
    "Bare",
    "BookBuild",
    "BookRenderer",
    "BookResult",
    "BuildState",
    "CaptionsConfig",
    "DEFAULT_CAPTION",
    "EffectiveSettings",
    "Figure",
    "ImageNode",
    "ImageOverride",
    "ImageReference",
    "LinkWrapper",
    "load_book_config",
    "PageEntry",
    "parse_summary",
    "PendingSlot",
    "Position",
    "PositionTracker",
    "RegistryCollector",
    "RegistryEntry",
    "render_caption",
    "render_image",
    "render_pages",
    "render_placeholder",
    "resolve_settings",
]
