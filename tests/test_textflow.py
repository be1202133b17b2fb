"""Tests for markup stripping, wrapping and the small formatting helpers."""

from hnfeed.textflow import (
    hostname,
    relative_age,
    strip_markup,
    truncate,
    wrap_paragraphs,
    wrap_text,
    wrap_to_lines,
)


class TestStripMarkup:
    """Tests for converting HN comment HTML to plain text."""

    def test_empty(self):
        assert strip_markup("") == ""

    def test_entities_decoded(self):
        """HTML entities should come out as the characters they encode."""
        assert strip_markup("a &amp; b &#x27;c&#x27; &gt; d") == "a & b 'c' > d"

    def test_paragraphs_become_blank_lines(self):
        """HN separates paragraphs with bare <p> tags."""
        assert strip_markup("First<p>Second<p>Third") == "First\n\nSecond\n\nThird"

    def test_br_becomes_newline(self):
        assert strip_markup("one<br>two") == "one\ntwo"

    def test_links_keep_text(self):
        """Anchor tags are dropped but their text stays."""
        markup = 'see <a href="https://example.com" rel="nofollow">https://example.com</a>'
        assert strip_markup(markup) == "see https://example.com"

    def test_code_blocks_keep_content(self):
        assert strip_markup("<pre><code>x = 1</code></pre>") == "x = 1"


class TestWrapping:
    """Tests for greedy word wrap."""

    def test_wrap_to_lines_greedy(self):
        assert wrap_to_lines("the quick brown fox jumps", 10) == ["the quick", "brown fox", "jumps"]

    def test_long_word_left_whole(self):
        """A word wider than the line gets a line to itself."""
        assert wrap_to_lines("a supercalifragilistic b", 5) == ["a", "supercalifragilistic", "b"]

    def test_empty_text_no_lines(self):
        assert wrap_to_lines("", 10) == []
        assert wrap_to_lines("   ", 10) == []

    def test_zero_width_returns_text(self):
        assert wrap_to_lines("hello world", 0) == ["hello world"]

    def test_paragraphs_separated_by_one_blank(self):
        """Runs of blank lines collapse to a single separator."""
        text = "one two three\n\n\n\nfour"
        assert wrap_paragraphs(text, 7) == ["one two", "three", "", "four"]

    def test_trailing_blank_lines_dropped(self):
        assert wrap_paragraphs("end\n\n", 20) == ["end"]

    def test_wrap_text_indents_and_fits(self):
        lines = wrap_text("alpha beta gamma delta", 12, indent="  ")
        assert lines == ["  alpha beta", "  gamma", "  delta"]
        assert all(len(line) <= 12 for line in lines)

    def test_wrap_text_blank_lines_unindented(self):
        assert wrap_text("a\n\nb", 20) == ["  a", "", "  b"]


class TestRelativeAge:
    """Tests for human-readable ages."""

    NOW = 1_700_000_000

    def test_just_now(self):
        assert relative_age(self.NOW - 30, now=self.NOW) == "just now"

    def test_singular_minute(self):
        assert relative_age(self.NOW - 60, now=self.NOW) == "1 minute ago"

    def test_plural_minutes(self):
        assert relative_age(self.NOW - 150, now=self.NOW) == "2 minutes ago"

    def test_hours(self):
        assert relative_age(self.NOW - 3600, now=self.NOW) == "1 hour ago"
        assert relative_age(self.NOW - 5 * 3600, now=self.NOW) == "5 hours ago"

    def test_days(self):
        assert relative_age(self.NOW - 86400, now=self.NOW) == "1 day ago"
        assert relative_age(self.NOW - 3 * 86400 - 10, now=self.NOW) == "3 days ago"


class TestSmallHelpers:
    """Tests for hostname and truncate."""

    def test_hostname_strips_www(self):
        assert hostname("https://www.example.com/a/b?c=d") == "example.com"

    def test_hostname_keeps_subdomain(self):
        assert hostname("http://blog.example.org/") == "blog.example.org"

    def test_hostname_empty(self):
        assert hostname("") == ""

    def test_truncate_short_untouched(self):
        assert truncate("hi", 5) == "hi"

    def test_truncate_adds_ellipsis(self):
        assert truncate("hello world", 5) == "hell…"
        assert len(truncate("hello world", 5)) == 5

    def test_truncate_flattens_newlines(self):
        assert truncate("a\nb", 10) == "a b"

    def test_truncate_nonpositive(self):
        assert truncate("anything", 0) == ""
        assert truncate("anything", -3) == ""
