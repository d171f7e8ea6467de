"""Tests for CLI argument parsing and subcommand dispatch."""

from __future__ import annotations

import pytest

from book_figures.cli import _build_parser, main


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse(argv: list[str]):
    """Parse *argv* using the CLI parser and return the namespace."""
    parser = _build_parser()
    return parser.parse_args(argv)


def _parse_fails(argv: list[str]):
    """Assert that parsing *argv* raises SystemExit (argparse error)."""
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(argv)


# ---------------------------------------------------------------------------
# build subcommand
# ---------------------------------------------------------------------------


class TestBuildArgs:
    """Argument parsing for the ``build`` subcommand."""

    def test_minimal(self):
        args = _parse(["build", "book"])
        assert args.command == "build"
        assert str(args.book_dir) == "book"

    def test_defaults(self):
        args = _parse(["build", "book"])
        assert args.verbose is False
        assert args.output_dir is None
        assert args.config is None

    def test_all_options(self):
        args = _parse(["build", "book", "-v", "-o", "/tmp/out", "-c", "cfg.json"])
        assert args.verbose is True
        assert str(args.output_dir) == "/tmp/out"
        assert str(args.config) == "cfg.json"

    def test_requires_book_dir(self):
        _parse_fails(["build"])


class TestListArgs:
    """Argument parsing for the ``list`` subcommand."""

    def test_minimal(self):
        args = _parse(["list", "book"])
        assert args.command == "list"

    def test_rejects_output_dir(self):
        _parse_fails(["list", "book", "-o", "out"])


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:

    def test_no_args_returns_zero(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["book-figures"])
        assert main() == 0

    def test_version(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["book-figures", "--version"])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 0
        assert "book-figures" in capsys.readouterr().out

    def test_build_writes_pages(self, monkeypatch, make_book, tmp_path):
        book = make_book({"README.md": "![bar](foo.jpg)\n"})
        out = tmp_path / "out"
        monkeypatch.setattr("sys.argv", ["book-figures", "build", str(book), "-o", str(out)])
        assert main() == 0
        assert (out / "index.html").read_text(encoding="utf-8") == (
            '<figure id="fig1.1.1"><img src="foo.jpg" alt="bar">'
            "<figcaption>Figure: bar</figcaption></figure>\n"
        )

    def test_build_missing_book_dir(self, monkeypatch, tmp_path):
        monkeypatch.setattr("sys.argv", ["book-figures", "build", str(tmp_path / "nope")])
        assert main() == 1

    def test_build_invalid_config(self, monkeypatch, make_book):
        book = make_book({"README.md": "", "book.json": "{oops"})
        monkeypatch.setattr("sys.argv", ["book-figures", "build", str(book)])
        assert main() == 1

    def test_list_prints_registry(self, monkeypatch, capsys, make_book):
        book = make_book({
            "README.md": "![first](a.jpg)\n\n![second](b.jpg)\n",
            "book.json": '{"list_caption": "L_BOOK_IMAGE_NUMBER_ _CAPTION_"}',
        })
        monkeypatch.setattr("sys.argv", ["book-figures", "list", str(book)])
        assert main() == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[0].split() == ["1", "fig1.1.1", "1.1", "L1", "first"]
        assert lines[1].split() == ["2", "fig1.1.2", "1.1", "L2", "second"]
