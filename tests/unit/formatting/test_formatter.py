"""Unit tests for the message formatting pipeline."""

from webchat.formatting import (
    FORMAT_PIPELINE,
    convert_lists,
    convert_newlines,
    format_message,
    linkify_bare_domains,
    linkify_urls,
    strip_emphasis,
)

LONG_URL = "https://example.com/a/very/long/path/that/exceeds/fifty/characters/total"


def _link(href: str, label: str) -> str:
    return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{label}</a>'


class TestStages:
    """Each stage in isolation."""

    def test_pipeline_order(self):
        assert FORMAT_PIPELINE == (
            strip_emphasis,
            convert_lists,
            linkify_urls,
            linkify_bare_domains,
            convert_newlines,
        )

    def test_strip_emphasis_pairs(self):
        assert strip_emphasis("**bold** and *italic*") == "bold and italic"

    def test_strip_emphasis_is_non_greedy(self):
        assert strip_emphasis("**a** b **c**") == "a b c"

    def test_strip_emphasis_leaves_stray_markers(self):
        assert strip_emphasis("2 * 3 = 6") == "2 * 3 = 6"
        assert strip_emphasis("a ** b") == "a ** b"

    def test_convert_lists_numbered(self):
        assert convert_lists("1. first\n2. second\nend") == (
            "<ol><li>first</li><li>second</li></ol>\nend"
        )

    def test_convert_lists_inserts_separator_after_prose(self):
        assert convert_lists("Intro\n- a\n- b") == "Intro\n\n<ol><li>a</li><li>b</li></ol>"

    def test_convert_lists_no_separator_after_blank_line(self):
        assert convert_lists("Intro\n\n* a") == "Intro\n\n<ol><li>a</li></ol>"

    def test_convert_lists_later_passes_see_earlier_blocks_as_text(self):
        assert convert_lists("1. a\n- b") == "<ol><li>a</li></ol>\n\n<ol><li>b</li></ol>"

    def test_convert_lists_splits_runs_on_other_lines(self):
        assert convert_lists("1. a\nmiddle\n2. b") == (
            "<ol><li>a</li></ol>\nmiddle\n\n<ol><li>b</li></ol>"
        )

    def test_linkify_urls_schemes(self):
        for url in ("http://a.io", "https://a.io/x?y=1", "ftp://files.a.io/f", "file:///tmp/x"):
            assert linkify_urls(f"see {url} ok") == f"see {_link(url, url)} ok"

    def test_linkify_urls_keeps_label_at_fifty_chars(self):
        url = "https://example.com/" + "a" * 30
        assert len(url) == 50
        assert linkify_urls(url) == _link(url, url)

    def test_linkify_bare_domains(self):
        assert linkify_bare_domains("go to www.example.com.") == (
            f"go to {_link('https://www.example.com', 'www.example.com')}."
        )

    def test_linkify_bare_domains_requires_whitespace_before(self):
        assert linkify_bare_domains("mail@www.example.com") == "mail@www.example.com"

    def test_convert_newlines(self):
        assert convert_newlines("a\nb\r\nc") == "a<br>b<br>c"


class TestFormatMessage:
    """End-to-end formatting behaviour."""

    def test_bold_removed(self):
        assert format_message("**Hello** World") == "Hello World"

    def test_plain_text_only_gains_line_breaks(self):
        text = "just some words\nsecond line"
        assert format_message(text) == "just some words<br>second line"

    def test_numbered_list_followed_by_text(self):
        assert format_message("1. first\n2. second\nend") == (
            "<ol><li>first</li><li>second</li></ol><br>end"
        )

    def test_emphasis_stripped_before_list_detection(self):
        assert format_message("**1. item**") == "<ol><li>item</li></ol>"

    def test_asterisk_bullets_become_list(self):
        assert format_message("Options:\n* one\n* two") == (
            "Options:<br><br><ol><li>one</li><li>two</li></ol>"
        )

    def test_url_inside_list_item_is_linked(self):
        assert format_message("1. see https://example.com") == (
            f"<ol><li>see {_link('https://example.com', 'https://example.com')}</li></ol>"
        )

    def test_long_url_label_truncated(self):
        result = format_message(f"visit {LONG_URL} now")

        assert result == f"visit {_link(LONG_URL, LONG_URL[:47] + '...')} now"
        assert len(LONG_URL[:47] + "...") == 50

    def test_long_bare_domain_label_truncated(self):
        domain = "www." + "b" * 60 + ".com"
        result = format_message(domain)

        assert result == _link(f"https://{domain}", domain[:47] + "...")

    def test_www_inside_http_url_not_double_wrapped(self):
        result = format_message("open http://www.example.com today")

        assert result.count("<a ") == 1
        assert result == f"open {_link('http://www.example.com', 'http://www.example.com')} today"

    def test_markup_passes_through_by_default(self):
        assert format_message("<b>hi</b>") == "<b>hi</b>"

    def test_escape_html_option(self):
        assert format_message("<b>hi</b> & bye", escape_html=True) == (
            "&lt;b&gt;hi&lt;/b&gt; &amp; bye"
        )

    def test_deterministic(self):
        text = "**Plan**\n1. Book www.flights.com\n2. Pack\nDone"
        assert format_message(text) == format_message(text)
