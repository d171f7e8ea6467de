"""Unit tests for SUMMARY.md parsing and page level assignment."""

from book_figures.summary import PageEntry, page_url, parse_summary


def _levels(pages: list[PageEntry]) -> dict[str, str]:
    return {p.path: p.level_str for p in pages}


class TestPageUrl:

    def test_readme_is_index(self):
        assert page_url("README.md") == "index.html"
        assert page_url("part/README.md") == "part/index.html"

    def test_markdown_page(self):
        assert page_url("second.md") == "second.html"
        assert page_url("a/b/c.md") == "a/b/c.html"


class TestParseSummary:

    def test_readme_prepended(self):
        pages = parse_summary(
            "# Summary\n\n"
            "* [Second](second.md)\n"
            "    * [Second A](second_a.md)\n"
            "* [Third](third.md)\n"
        )
        assert [p.path for p in pages] == ["README.md", "second.md", "second_a.md", "third.md"]
        assert _levels(pages) == {
            "README.md": "1.1",
            "second.md": "1.2",
            "second_a.md": "1.2.1",
            "third.md": "1.3",
        }

    def test_readme_listed(self):
        pages = parse_summary(
            "* [Intro](README.md)\n"
            "* [Second](second.md)\n"
        )
        assert _levels(pages) == {"README.md": "1.1", "second.md": "1.2"}
        assert pages[0].title == "Intro"

    def test_titles_and_urls(self):
        pages = parse_summary("* [The `Second` page](dir/second.md)\n")
        assert pages[1].title == "The Second page"
        assert pages[1].url == "dir/second.html"

    def test_deep_nesting_and_return(self):
        pages = parse_summary(
            "* [A](a.md)\n"
            "    * [A1](a1.md)\n"
            "        * [A1x](a1x.md)\n"
            "    * [A2](a2.md)\n"
            "* [B](b.md)\n"
        )
        assert _levels(pages) == {
            "README.md": "1.1",
            "a.md": "1.2",
            "a1.md": "1.2.1",
            "a1x.md": "1.2.1.1",
            "a2.md": "1.2.2",
            "b.md": "1.3",
        }

    def test_heading_starts_new_part(self):
        pages = parse_summary(
            "# Summary\n\n"
            "* [A](a.md)\n\n"
            "## Appendix\n\n"
            "* [G](glossary.md)\n"
            "    * [G1](g1.md)\n"
        )
        assert _levels(pages) == {
            "README.md": "1.1",
            "a.md": "1.2",
            "glossary.md": "2.1",
            "g1.md": "2.1.1",
        }

    def test_entries_without_pages_keep_their_number(self):
        pages = parse_summary(
            "* [Home](http://example.com)\n"
            "* Draft chapter\n"
            "* [C](c.md)\n"
        )
        assert _levels(pages) == {"README.md": "1.1", "c.md": "1.4"}

    def test_anchor_and_duplicates(self):
        pages = parse_summary(
            "* [A](a.md)\n"
            "* [A again](a.md#part)\n"
        )
        assert [p.path for p in pages] == ["README.md", "a.md"]

    def test_empty_summary(self):
        assert parse_summary("") == [PageEntry("README.md", "Introduction", (1, 1))]
