#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for block records and block comment serialization."""

import json

import pytest

from html2blocks.blocks import (
    BlockRecord,
    block_comment_name,
    encode_block_attributes,
    serialize_block,
    unwrap_nested_paragraphs,
)


@pytest.mark.unit
class TestBlockCommentName:
    """Tests for namespace handling in block names."""

    def test_core_namespace_is_stripped(self):
        assert block_comment_name("core/paragraph") == "paragraph"

    def test_other_namespaces_are_kept(self):
        assert block_comment_name("acme/card") == "acme/card"

    def test_bare_name_unchanged(self):
        assert block_comment_name("separator") == "separator"


@pytest.mark.unit
class TestEncodeBlockAttributes:
    """Tests for comment-safe JSON encoding."""

    def test_compact_separators(self):
        assert encode_block_attributes({"level": 2}) == '{"level":2}'
        assert encode_block_attributes({"ordered": True}) == '{"ordered":true}'

    def test_insertion_order_preserved(self):
        encoded = encode_block_attributes({"id": 1, "url": "u", "alt": ""})
        assert encoded == '{"id":1,"url":"u","alt":""}'

    def test_angle_brackets_escaped(self):
        assert encode_block_attributes({"content": "<b>"}) == '{"content":"\\u003cb\\u003e"}'

    def test_double_hyphen_escaped(self):
        assert encode_block_attributes({"t": "a--b"}) == '{"t":"a\\u002d\\u002db"}'

    def test_ampersand_escaped(self):
        assert encode_block_attributes({"t": "a&b"}) == '{"t":"a\\u0026b"}'

    def test_escaped_quote_becomes_unicode_escape(self):
        assert encode_block_attributes({"t": 'say "hi"'}) == '{"t":"say \\u0022hi\\u0022"}'

    def test_trailing_backslash_is_not_mistaken_for_quote(self):
        assert encode_block_attributes({"t": "a\\"}) == '{"t":"a\\\\"}'

    def test_non_ascii_kept_literal(self):
        assert encode_block_attributes({"alt": "café"}) == '{"alt":"café"}'

    def test_payload_decodes_to_original(self):
        attrs = {"content": '<pre>x -- "y" & z\\</pre>', "level": 3}
        assert json.loads(encode_block_attributes(attrs)) == attrs


@pytest.mark.unit
class TestSerializeBlock:
    """Tests for serialize_block."""

    def test_none_serializes_to_empty_string(self):
        assert serialize_block(None) == ""

    def test_empty_inner_uses_self_closing_form(self):
        assert serialize_block(BlockRecord("core/separator")) == "<!-- wp:separator /-->"

    def test_empty_inner_with_attributes(self):
        block = BlockRecord("core/spacer", {"height": 10})
        assert serialize_block(block) == '<!-- wp:spacer {"height":10} /-->'

    def test_inner_markup_uses_two_comment_form(self):
        block = BlockRecord("core/separator", {}, "<hr/>")
        assert serialize_block(block) == "<!-- wp:separator --><hr/><!-- /wp:separator -->"

    def test_namespace_stripped_in_both_delimiters(self):
        block = BlockRecord("core/paragraph", {}, "<p>x</p>")
        assert serialize_block(block) == "<!-- wp:paragraph --><p>x</p><!-- /wp:paragraph -->"

    def test_attributes_only_in_opening_delimiter(self):
        block = BlockRecord("core/heading", {"level": 2}, "<h2>Hi</h2>")
        assert serialize_block(block) == '<!-- wp:heading {"level":2} --><h2>Hi</h2><!-- /wp:heading -->'

    def test_custom_namespace_kept(self):
        block = BlockRecord("acme/card", {}, "<div>x</div>")
        assert serialize_block(block) == "<!-- wp:acme/card --><div>x</div><!-- /wp:acme/card -->"


@pytest.mark.unit
class TestUnwrapNestedParagraphs:
    """Tests for the stray paragraph wrapper post-processor."""

    def test_wrapper_around_block_removed(self):
        content = (
            "<!-- wp:paragraph --><p><!-- wp:separator --><hr/><!-- /wp:separator --></p><!-- /wp:paragraph -->"
        )
        assert unwrap_nested_paragraphs(content) == "<!-- wp:separator --><hr/><!-- /wp:separator -->"

    def test_case_insensitive(self):
        content = "<!-- WP:PARAGRAPH --><P><!-- wp:html -->x<!-- /wp:html --></P><!-- /WP:PARAGRAPH -->"
        assert unwrap_nested_paragraphs(content) == "<!-- wp:html -->x<!-- /wp:html -->"

    def test_regular_paragraph_untouched(self):
        content = "<!-- wp:paragraph --><p>text</p><!-- /wp:paragraph -->\n\n"
        assert unwrap_nested_paragraphs(content) == content
