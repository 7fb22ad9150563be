#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for automatic paragraph normalization."""

import pytest

from html2blocks.autop import autop, remove_empty_paragraphs


@pytest.mark.unit
class TestAutop:
    """Tests for autop."""

    def test_blank_lines_delimit_paragraphs(self):
        assert autop("First para\n\nSecond\nline") == "<p>First para</p>\n<p>Second<br />\nline</p>\n"

    def test_whitespace_only_input(self):
        assert autop("") == ""
        assert autop(" \n\n ") == ""

    def test_block_tags_not_wrapped(self):
        assert autop("<h2>Title</h2>\nBody") == "<h2>Title</h2>\n<p>Body</p>\n"

    def test_adjacent_block_tags(self):
        assert autop("<h2>Title</h2><p>Body text</p>") == "<h2>Title</h2>\n<p>Body text</p>\n"

    def test_list_items_not_wrapped(self):
        result = autop("<ul>\n<li>x</li>\n</ul>")
        assert "<p>" not in result
        assert "<li>x</li>" in result

    def test_windows_newlines(self):
        assert autop("a\r\n\r\nb") == "<p>a</p>\n<p>b</p>\n"

    def test_pre_contents_preserved(self):
        result = autop("<pre>a\n\nb</pre>")
        assert "<pre>a\n\nb</pre>" in result
        assert "<br />" not in result

    def test_script_newlines_preserved(self):
        result = autop("<script>a\nb</script>")
        assert "<script>a\nb</script>" in result

    def test_br_disabled(self):
        assert autop("a\nb", br=False) == "<p>a\nb</p>\n"

    def test_double_br_becomes_paragraph_break(self):
        assert autop("a<br><br>b") == "<p>a</p>\n<p>b</p>\n"


@pytest.mark.unit
class TestRemoveEmptyParagraphs:
    """Tests for remove_empty_paragraphs."""

    def test_removes_empty_and_blank_paragraphs(self):
        assert remove_empty_paragraphs("<p></p><p> \n</p><p>x</p>") == "<p>x</p>"

    def test_keeps_content(self):
        assert remove_empty_paragraphs("<p>x</p>") == "<p>x</p>"
