"""
Unit Tests for Feed Normalizer
==============================

Tests for RSS/Atom entry extraction, field fallbacks and HTML stripping.
"""

from html import escape

import pytest

from hatena_mcp.ingestion.feed_cache import parse_document
from hatena_mcp.ingestion.feed_normalizer import (
    Post,
    SUMMARY_MAX_LENGTH,
    extract_post,
    extract_posts,
    matches_keyword,
    resolve_entries,
    strip_html,
)
from tests.conftest import (
    EMPTY_RSS_FEED,
    NOTES_POST_URL,
    PYTHON_POST_URL,
    RUST_POST_URL,
    SAMPLE_ATOM_FEED,
    SAMPLE_RSS_FEED,
)


class TestStripHtml:
    """Tag removal and truncation."""

    def test_strips_tags_and_truncates(self):
        text = "<p>Hello <b>World</b></p>" + "x" * 600

        result = strip_html(text)

        assert len(result) == SUMMARY_MAX_LENGTH == 500
        assert "<" not in result and ">" not in result
        assert result.startswith("Hello World")

    def test_short_text_is_not_padded_or_marked(self):
        assert strip_html("<i>short</i>") == "short"

    def test_plain_text_unchanged(self):
        assert strip_html("no markup at all") == "no markup at all"


def rss_with_description(description: str) -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Embeds</title>'
        "<link>https://example.hatenablog.com/</link><description>d</description>"
        "<item><title>Embedded</title>"
        "<link>https://example.hatenablog.com/entry/embed</link>"
        f"<description>{escape(description)}</description></item>"
        "</channel></rss>"
    ).encode("utf-8")


class TestParsedMarkup:
    """Entry markup passes through parsing untouched."""

    def test_embeds_and_scripts_kept_in_content(self):
        raw = (
            "<p>x</p>"
            '<iframe src="https://hatenablog-parts.com/embed?url=a"></iframe>'
            "<script>s()</script>"
        )

        post = extract_posts(parse_document(rss_with_description(raw)))[0]

        assert post.content == raw
        assert post.summary == "xs()"

    def test_long_html_description_stripped_and_truncated(self):
        raw = "<p>Hello <b>World</b></p>" + "x" * 600

        post = extract_posts(parse_document(rss_with_description(raw)))[0]

        assert len(post.summary) == SUMMARY_MAX_LENGTH
        assert "<" not in post.summary and ">" not in post.summary
        assert post.summary.startswith("Hello World")
        assert post.content == raw


class TestRssExtraction:
    """Extraction from a parsed RSS 2.0 document."""

    def setup_method(self):
        self.document = parse_document(SAMPLE_RSS_FEED.encode("utf-8"))
        self.posts = extract_posts(self.document)

    def test_feed_order_preserved(self):
        assert [post.link for post in self.posts] == [
            RUST_POST_URL,
            PYTHON_POST_URL,
            NOTES_POST_URL,
        ]

    def test_fields_of_first_item(self):
        post = self.posts[0]

        assert post.title == "Learning rust programming"
        assert post.published == "Thu, 05 Sep 2024 12:00:00 +0900"
        assert post.summary == "Ownership and borrowing"
        assert "<b>borrowing</b>" in post.content
        assert post.categories == ("Rust", "Programming")

    def test_dublin_core_date_fallback(self):
        post = self.posts[1]

        assert post.published == "2024-09-01T09:00:00+09:00"
        assert post.updated == "2024-09-01T09:00:00+09:00"

    def test_item_without_categories(self):
        assert self.posts[2].categories == ()

    def test_resolved_as_rss(self):
        resolved = resolve_entries(self.document)

        assert resolved.is_atom is False
        assert len(resolved.entries) == 3


class TestAtomExtraction:
    """Extraction from a parsed Atom document."""

    def setup_method(self):
        self.document = parse_document(SAMPLE_ATOM_FEED.encode("utf-8"))
        self.posts = extract_posts(self.document)

    def test_resolved_as_atom(self):
        assert resolve_entries(self.document).is_atom is True

    def test_missing_title_and_summary_preferred_over_content(self):
        post = self.posts[0]

        assert post.title == ""
        assert post.summary == "Short summary"
        assert post.content == "Short summary"

    def test_href_link_and_dates(self):
        post = self.posts[0]

        assert post.link == "https://example.hatenablog.com/entry/atom-untitled"
        assert post.published == "2024-09-05T12:00:00+09:00"
        assert post.updated == "2024-09-06T08:00:00+09:00"

    def test_category_terms(self):
        assert self.posts[0].categories == ("Rust", "Tooling")

    def test_content_used_when_summary_missing(self):
        post = self.posts[1]

        assert post.title == "Second entry"
        assert post.summary == "Only content here"
        assert "<em>content</em>" in post.content


class TestFieldFallbacks:
    """Candidate ordering on hand-built entries."""

    def test_every_field_defaults_to_empty(self):
        post = extract_post({})

        assert post == Post()
        assert post.to_dict() == {
            "title": "",
            "link": "",
            "published": "",
            "updated": "",
            "summary": "",
            "categories": [],
            "content": "",
        }

    def test_href_preferred_over_plain_link(self):
        entry = {
            "links": [{"href": "https://example.hatenablog.com/a"}],
            "link": "https://example.hatenablog.com/b",
        }
        assert extract_post(entry).link == "https://example.hatenablog.com/a"

    def test_plain_link_when_no_href(self):
        entry = {"links": [], "link": "https://example.hatenablog.com/b"}
        assert extract_post(entry).link == "https://example.hatenablog.com/b"

    def test_summary_preferred_over_content(self):
        entry = {"summary": "from summary", "content": [{"value": "from content"}]}
        post = extract_post(entry)

        assert post.summary == "from summary"
        assert post.content == "from summary"

    def test_content_value_fallback(self):
        entry = {"content": [{"value": "<p>body</p>"}]}
        post = extract_post(entry)

        assert post.summary == "body"
        assert post.content == "<p>body</p>"

    def test_atom_published_does_not_fall_back_to_updated(self):
        entry = {"updated": "2024-09-06T08:00:00+09:00"}

        assert extract_post(entry, is_atom=True).published == ""
        assert extract_post(entry, is_atom=False).published == "2024-09-06T08:00:00+09:00"

    def test_categories_prefer_term_and_drop_empty(self):
        entry = {"tags": [{"term": "Rust"}, {"term": ""}, "Raw", None, {"term": None, "label": "Label"}]}

        assert extract_post(entry).categories == ("Rust", "Raw", "Label")


class TestResolveEntries:
    """Malformed or empty documents degrade to no posts."""

    @pytest.mark.parametrize(
        "document",
        [
            {},
            {"version": "rss20"},
            {"version": "rss20", "entries": None},
            {"version": "atom10", "entries": {"not": "a list"}},
            {"entries": "string"},
            None,
            "not a document",
        ],
    )
    def test_degrades_to_empty(self, document):
        assert extract_posts(document) == []

    def test_non_mapping_entries_skipped(self):
        document = {"version": "rss20", "entries": ["junk", {"title": "Kept"}]}

        assert [post.title for post in extract_posts(document)] == ["Kept"]

    def test_empty_feed(self):
        assert extract_posts(parse_document(EMPTY_RSS_FEED.encode("utf-8"))) == []


class TestDeterminism:
    def test_repeated_extraction_is_equal(self):
        document = parse_document(SAMPLE_RSS_FEED.encode("utf-8"))

        assert extract_posts(document) == extract_posts(document)


class TestKeywordMatching:
    def test_case_insensitive(self):
        post = Post(title="Learning rust programming")

        assert matches_keyword(post, "RUST")

    def test_matches_categories(self):
        post = Post(title="Tips", categories=("Python", "Testing"))

        assert matches_keyword(post, "python")
        assert not matches_keyword(post, "rust")

    def test_substring_not_token(self):
        post = Post(summary="Decorators explained")

        assert matches_keyword(post, "orators exp")
