"""Tests for the asset URL adapter.

WHY: The archiver relies on extract_tag_urls() to find every image on a
page and on rewrite_tag_urls() to point the page at local copies
without disturbing any other text.

HOW: Runs both helpers on the shared page body and on small edge cases.
"""

from bbmarkup.adapters.assets import extract_tag_urls, rewrite_tag_urls
from bbmarkup.core.bracketizer import DEFAULT_MAX_DEPTH


class TestExtractTagUrls:
    """URLs come out in document order."""

    def test_page_body(self, page_body):
        assert extract_tag_urls(page_body) == ["http://example.com/panels/01.gif"]

    def test_order_and_duplicates(self):
        body = "[img]a.gif[/img] x [img=10x10] b.gif [/img][IMG]a.gif[/IMG]"
        assert extract_tag_urls(body) == ["a.gif", "b.gif", "a.gif"]

    def test_empty_tag_skipped(self):
        assert extract_tag_urls("[img][/img][img]c.gif[/img]") == ["c.gif"]

    def test_other_names(self):
        body = "[url]http://a/[/url][img]x.gif[/img]"
        assert extract_tag_urls(body, names=("url",)) == ["http://a/"]

    def test_unclosed_tag_ignored(self):
        assert extract_tag_urls("[img]a.gif") == []


class TestRewriteTagUrls:
    """Rewriting touches only the tag content."""

    def test_rewrites_and_keeps_everything_else(self):
        body = "Hi [sic] [img=650x450]http://h/a.gif[/img] ] [b]x[/b]"
        result = rewrite_tag_urls(body, lambda url: "local/" + url.rsplit("/", 1)[1])
        assert result == "Hi [sic] [img=650x450]local/a.gif[/img] ] [b]x[/b]"

    def test_none_keeps_tag(self):
        body = "[img]http://h/a.gif[/img]"
        assert rewrite_tag_urls(body, lambda url: None) == body

    def test_callback_order(self):
        seen = []

        def record(url):
            seen.append(url)
            return url

        rewrite_tag_urls("[img]1[/img] [img]2[/img] [img]3[/img]", record)
        assert seen == ["1", "2", "3"]

    def test_page_body(self, page_body):
        result = rewrite_tag_urls(page_body, lambda url: "01.gif")
        assert result == page_body.replace("http://example.com/panels/01.gif", "01.gif")


class TestDeeplyNestedTags:
    """Nested asset tags past the nesting bound stay text."""

    def test_extract_from_deep_nesting(self):
        body = "[img]" * 400 + "u" + "[/img]" * 400
        extra = 400 - DEFAULT_MAX_DEPTH
        assert extract_tag_urls(body) == ["[img]" * extra + "u"]

    def test_rewrite_deep_nesting_keeps_text_outside(self):
        body = "[img]" * 400 + "u" + "[/img]" * 400
        result = rewrite_tag_urls(body, lambda url: "local.gif")
        assert result == "[img]local.gif[/img]" + "[/img]" * (400 - DEFAULT_MAX_DEPTH)
