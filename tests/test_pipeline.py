"""Tests for the whole-book build: config loading, discovery, output."""

from __future__ import annotations

import json

import pytest

from book_figures.caption import DEFAULT_CAPTION
from book_figures.config import CaptionsConfig
from book_figures.pipeline import (
    BookBuild,
    discover_pages,
    load_book_config,
)


# ---------------------------------------------------------------------------
# load_book_config
# ---------------------------------------------------------------------------


class TestLoadBookConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_book_config(tmp_path / "book.json") == CaptionsConfig()

    def test_plugins_config(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text(json.dumps({
            "plugins": ["image-captions"],
            "pluginsConfig": {"image-captions": {"caption": "Image - _CAPTION_"}},
        }))
        assert load_book_config(path).caption == "Image - _CAPTION_"

    def test_book_json_without_plugin_entry(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text(json.dumps({"pluginsConfig": {"other": {}}}))
        assert load_book_config(path).caption == DEFAULT_CAPTION

    def test_bare_plugin_mapping(self, tmp_path):
        path = tmp_path / "captions.json"
        path.write_text(json.dumps({"align": "left", "variable_name": "pictures"}))
        cfg = load_book_config(path)
        assert cfg.align == "left"
        assert cfg.variable_name == "pictures"

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "book.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_book_config(path)


# ---------------------------------------------------------------------------
# discover_pages
# ---------------------------------------------------------------------------


class TestDiscoverPages:

    def test_readme_only(self, make_book):
        book = make_book({"README.md": "# Intro"})
        pages = discover_pages(book)
        assert [(p.path, p.level) for p in pages] == [("README.md", (1, 1))]

    def test_summary(self, make_book):
        book = make_book({
            "README.md": "",
            "SUMMARY.md": "* [Second](second.md)\n",
            "second.md": "",
        })
        assert [p.path for p in discover_pages(book)] == ["README.md", "second.md"]


# ---------------------------------------------------------------------------
# BookBuild
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_book(make_book):
    return make_book({
        "README.md": "# Figures\n\n{{ pictures }}\n\n![first](first.jpg)\n",
        "SUMMARY.md": (
            "# Summary\n\n"
            "* [Second](second.md)\n"
            "    * [Second A](chapter/second_a.md)\n"
            "* [Third](third.md)\n"
        ),
        "second.md": "![second](second.jpg)\n",
        "chapter/second_a.md": "Text with ![inline](x.jpg) image.\n\n![second a](second_a.jpg)\n",
        "third.md": "![third](third.jpg)\n\n![fourth](fourth.jpg)\n",
        "book.json": json.dumps({
            "pluginsConfig": {"image-captions": {
                "variable_name": "pictures",
                "caption": "Image _BOOK_IMAGE_NUMBER_. - _CAPTION_",
            }},
        }),
    })


class TestBookBuild:

    def test_run(self, sample_book):
        result = BookBuild(sample_book).run()
        assert list(result.pages) == [
            "index.html", "second.html", "chapter/second_a.html", "third.html",
        ]
        assert [f.figure_id for f in result.figures] == [
            "fig1.1.1", "fig1.2.1", "fig1.2.1.1", "fig1.3.1", "fig1.3.2",
        ]
        assert [f.book_image_number for f in result.figures] == [1, 2, 3, 4, 5]
        assert result.placeholders == 1

    def test_registry_lists_all_pages(self, sample_book):
        index = BookBuild(sample_book).run().pages["index.html"]
        assert index.count("<li>") == 5
        assert '<a href="chapter/second_a.html#fig1.2.1.1">Image 3. - second a</a>' in index
        assert '<a href="third.html#fig1.3.2">Image 5. - fourth</a>' in index

    def test_inline_image_left_alone(self, sample_book):
        page = BookBuild(sample_book).run().pages["chapter/second_a.html"]
        assert '<p>Text with <img src="x.jpg" alt="inline"> image.</p>' in page

    def test_explicit_config_wins(self, sample_book):
        result = BookBuild(sample_book, config=CaptionsConfig()).run()
        assert "Figure: first" in result.pages["index.html"]
        assert result.placeholders == 0

    def test_config_path(self, sample_book, tmp_path):
        cfg = tmp_path / "captions.json"
        cfg.write_text(json.dumps({"caption": "Pic _CAPTION_"}))
        result = BookBuild(sample_book, config_path=cfg).run()
        assert "<figcaption>Pic first</figcaption>" in result.pages["index.html"]

    def test_write(self, sample_book, tmp_path):
        build = BookBuild(sample_book)
        out = tmp_path / "site"
        written = build.write(build.run(), out)
        assert out / "chapter" / "second_a.html" in written
        text = (out / "third.html").read_text(encoding="utf-8")
        assert text.startswith('<figure id="fig1.3.1">')
        assert text.endswith("</figure>\n")

    def test_write_default_output_dir(self, sample_book):
        build = BookBuild(sample_book)
        build.write(build.run())
        assert (sample_book / "_book" / "index.html").is_file()

    def test_missing_page_propagates(self, make_book):
        book = make_book({"README.md": "", "SUMMARY.md": "* [Gone](gone.md)\n"})
        with pytest.raises(FileNotFoundError):
            BookBuild(book).run()

    def test_image_without_url_propagates(self, make_book):
        book = make_book({"README.md": "![alt]()\n"})
        with pytest.raises(ValueError, match="URL"):
            BookBuild(book).run()
