"""CLI entry point for book-figures.

Number and caption the images of a markdown book.

Usage::

    book-figures build my-book/
    book-figures build my-book/ -o site/ -c captions.json
    book-figures list my-book/
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import colorlog

from book_figures import __version__
from book_figures.models import format_level
from book_figures.pipeline import (
    BOOK_CONFIG_FILENAME,
    DEFAULT_OUTPUT_DIRNAME,
    BookBuild,
)


_log = logging.getLogger("book-figures")

_SUMMARY_SEP = "=" * 78
"""Separator line for the build summary block."""


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_colorized_logging():
    """Configure colorized logging output."""
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(name)-9s%(reset)s: "
            "%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

    # Suppress noisy libraries
    logging.getLogger("markdown_it").setLevel(logging.WARNING)


def _setup_logging(verbose: bool) -> None:
    """Initialize colorized logging and optionally enable debug level."""
    setup_colorized_logging()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands."""
    # -- Parent parsers for shared argument groups -----------------------------
    verbose_parent = argparse.ArgumentParser(add_help=False)
    verbose_parent.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    book_parent = argparse.ArgumentParser(add_help=False)
    book_parent.add_argument(
        "book_dir",
        type=Path,
        help="Book directory (README.md, optional SUMMARY.md and book.json)",
    )
    book_parent.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Caption configuration file "
             f"(default: {BOOK_CONFIG_FILENAME} in the book directory)",
    )

    # -- Main parser -----------------------------------------------------------
    parser = argparse.ArgumentParser(
        prog="book-figures",
        description="Number and caption the images of a markdown book",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  build         Render every page with numbered, captioned figures
  list          Print the figure registry of a book

Examples:
  %(prog)s build my-book/                    Render to my-book/_book/
  %(prog)s build my-book/ -o site/           Custom output directory
  %(prog)s list my-book/                     Show every numbered figure

Run '%(prog)s COMMAND --help' for command-specific options.
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # -- build -----------------------------------------------------------------
    p_build = subparsers.add_parser(
        "build",
        parents=[verbose_parent, book_parent],
        help="Render every page with numbered, captioned figures",
        description="Render the pages of a book to HTML fragments with "
                    "numbered figures and resolved figure registries.",
    )
    p_build.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Output directory for HTML files "
             f"(default: {DEFAULT_OUTPUT_DIRNAME}/ inside the book directory)",
    )

    # -- list ------------------------------------------------------------------
    subparsers.add_parser(
        "list",
        parents=[verbose_parent, book_parent],
        help="Print the figure registry of a book",
        description="Print one line per numbered figure: book number, "
                    "figure id, page and list caption.",
    )

    return parser


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


def _open_book(args: argparse.Namespace) -> BookBuild | None:
    """Create the build for ``args.book_dir`` (``None`` after logging an error)."""
    book_dir: Path = args.book_dir
    if not book_dir.is_dir():
        _log.error("Book directory not found: %s", book_dir)
        return None
    return BookBuild(book_dir.resolve(), config_path=args.config)


def _cmd_build(args: argparse.Namespace) -> int:
    """Handle the ``build`` command."""
    _setup_logging(args.verbose)
    _log.info("book-figures %s", __version__)

    try:
        t0 = time.monotonic()
        build = _open_book(args)
        if build is None:
            return 1
        result = build.run()
        written = build.write(
            result,
            args.output_dir.resolve() if args.output_dir else None,
        )
    except Exception as e:
        _log.error("Fatal error: %s: %s", type(e).__name__, e)
        return 1

    _log.info(_SUMMARY_SEP)
    _log.info(
        "Pages: %d, figures: %d, registries: %d",
        len(written), len(result.figures), result.placeholders,
    )
    _log.info("Total time: %.1fs", time.monotonic() - t0)
    _log.info(_SUMMARY_SEP)
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    """Handle the ``list`` command."""
    _setup_logging(args.verbose)

    try:
        build = _open_book(args)
        if build is None:
            return 1
        result = build.run()
    except Exception as e:
        _log.error("Fatal error: %s: %s", type(e).__name__, e)
        return 1

    for entry in result.registry:
        print(
            f"{entry.book_image_number:>4}  {entry.figure_id:<14} "
            f"{format_level(entry.page_level):<8} {entry.list_caption}"
        )
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> int:
    """Main entry point."""
    parser = _build_parser()

    # Show help if no arguments provided.
    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    handlers = {
        "build": _cmd_build,
        "list": _cmd_list,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
