#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the element to block transform functions."""

import logging

import pytest
from bs4 import BeautifulSoup

from html2blocks import transforms
from html2blocks.mapping import Transform
from html2blocks.media import MediaAsset
from html2blocks.options import ConverterOptions
from html2blocks.sanitizer import AllowListPolicy
from html2blocks.transforms import ConversionContext


def _element(html, tag=None):
    soup = BeautifulSoup(html, "html.parser")
    return soup.find(tag) if tag else next(iter(soup.find_all(True)))


@pytest.fixture
def context():
    """Provide a context with default options and policy."""
    return ConversionContext(options=ConverterOptions(), policy=AllowListPolicy())


@pytest.mark.unit
class TestConversionContext:
    """Tests for ConversionContext helpers."""

    def test_cleaned_markup_strips_attributes(self, context):
        element = _element('<p class="lead" style="x" onclick="y">Hi</p>')
        assert context.cleaned_markup(element) == '<p class="lead">Hi</p>'

    def test_cleaned_markup_of_empty_element_is_text(self, context):
        assert context.cleaned_markup(_element("<p></p>")) == ""

    def test_store_image_without_upload_uses_placeholder(self, context):
        assert context.store_image("https://example.com/a.png") == MediaAsset(id=1, url="https://example.com/a.png")

    def test_store_image_uses_media_store(self, media_store):
        context = ConversionContext(
            options=ConverterOptions(upload_media=True), policy=AllowListPolicy(), media_store=media_store
        )
        asset = context.store_image("https://example.com/a.png")

        assert asset.id == 42
        assert asset.url == "https://media.example.com/uploads/a.png"
        assert media_store.calls == ["https://example.com/a.png"]

    def test_store_image_without_store(self, caplog):
        context = ConversionContext(options=ConverterOptions(upload_media=True), policy=AllowListPolicy())
        with caplog.at_level(logging.WARNING, logger="html2blocks.transforms"):
            assert context.store_image("https://example.com/a.png") is None
        assert "no media store" in caplog.text

    def test_store_image_failure_logged(self, failing_media_store, caplog):
        context = ConversionContext(
            options=ConverterOptions(upload_media=True), policy=AllowListPolicy(), media_store=failing_media_store
        )
        with caplog.at_level(logging.WARNING, logger="html2blocks.transforms"):
            assert context.store_image("https://example.com/a.png") is None
        assert "service unavailable" in caplog.text

    def test_store_image_empty_asset(self, empty_media_store):
        context = ConversionContext(
            options=ConverterOptions(upload_media=True), policy=AllowListPolicy(), media_store=empty_media_store
        )
        assert context.store_image("https://example.com/a.png") is None


@pytest.mark.unit
class TestHeading:
    """Tests for the heading transform."""

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_level_from_tag(self, context, level):
        block = transforms.heading(_element(f"<h{level}>T</h{level}>"), context)
        assert block.name == "core/heading"
        assert block.attrs == {"level": level}
        assert block.inner_html == f"<h{level}>T</h{level}>"

    def test_attributes_cleaned(self, context):
        block = transforms.heading(_element('<h2 id="intro" style="color:red" onclick="x">T</h2>'), context)
        assert block.inner_html == '<h2 id="intro">T</h2>'

    def test_tag_without_digits(self, context):
        block = transforms.heading(_element("<header>T</header>"), context)
        assert block.attrs == {"level": 0}


@pytest.mark.unit
class TestQuote:
    """Tests for the quote transform and its prepare step."""

    def test_prepare_sets_class_before_capture(self, context):
        entry = Transform(transforms.quote, prepare=transforms.mark_quote)
        block = entry.apply(_element('<blockquote class="old"><p>q</p></blockquote>'), context)

        assert block.name == "core/quote"
        assert block.attrs == {}
        assert block.inner_html == '<blockquote class="wp-block-quote"><p>q</p></blockquote>'

    def test_build_alone_does_not_mutate(self, context):
        block = transforms.quote(_element("<blockquote>q</blockquote>"), context)
        assert block.inner_html == "<blockquote>q</blockquote>"


@pytest.mark.unit
class TestLists:
    """Tests for the list transforms."""

    def test_unordered_list(self, context):
        block = transforms.unordered_list(_element("<ul><li>a</li><li>b</li></ul>"), context)

        assert block.name == "core/list"
        assert block.attrs == {}
        assert block.inner_html == (
            "<ul><!-- wp:list-item --><li>a</li><!-- /wp:list-item -->"
            "<!-- wp:list-item --><li>b</li><!-- /wp:list-item --></ul>"
        )

    def test_ordered_list(self, context):
        block = transforms.ordered_list(_element("<ol><li>a</li><li>b</li></ol>"), context)

        assert block.attrs == {"ordered": True}
        assert block.inner_html.startswith("<ol>")
        assert block.inner_html.endswith("</ol>")
        assert block.inner_html.index("<li>a</li>") < block.inner_html.index("<li>b</li>")
        assert block.inner_html.count("<!-- wp:list-item -->") == 2

    def test_nested_items_are_flattened(self, context):
        block = transforms.unordered_list(_element("<ul><li>a<ul><li>b</li></ul></li></ul>"), context)
        assert block.inner_html.count("<!-- wp:list-item -->") == 2

    def test_item_attributes_cleaned(self, context):
        block = transforms.unordered_list(_element('<ul><li style="x" class="c">a</li></ul>'), context)
        assert '<li class="c">a</li>' in block.inner_html

    def test_empty_list(self, context):
        block = transforms.unordered_list(_element("<ul></ul>"), context)
        assert block.inner_html == "<ul></ul>"


@pytest.mark.unit
class TestSimpleTransforms:
    """Tests for table, separator and code transforms."""

    def test_table(self, context):
        block = transforms.table(_element('<table border="1"><tr><td>x</td></tr></table>'), context)
        assert block.name == "core/table"
        assert block.inner_html == '<figure class="wp-block-table"><table><tr><td>x</td></tr></table></figure>'

    def test_separator(self, context):
        block = transforms.separator(_element("<hr>"), context)
        assert block.name == "core/separator"
        assert block.attrs == {}
        assert block.inner_html == '<hr class="wp-block-separator"/>'

    def test_code(self, context):
        block = transforms.code(_element("<code>x = 1</code>"), context)
        assert block.name == "core/code"
        assert block.attrs == {"content": "<code>x = 1</code>"}
        assert block.inner_html == '<pre class="wp-block-code"><code>x = 1</code></pre>'

    def test_pre(self, context):
        block = transforms.code(_element("<pre>a &lt; b</pre>"), context)
        assert block.attrs == {"content": "<pre>a &lt; b</pre>"}
        assert block.inner_html == '<pre class="wp-block-code"><pre>a &lt; b</pre></pre>'


@pytest.mark.unit
class TestImage:
    """Tests for the image transform."""

    def test_missing_src(self, context):
        assert transforms.image(_element('<img alt="x">'), context) is None

    def test_empty_src(self, context):
        assert transforms.image(_element('<img src="" alt="x">'), context) is None

    def test_default_block(self, context):
        block = transforms.image(_element('<img src="http://example.com/a.png" alt="A cat" title="T">'), context)

        assert block.name == "core/image"
        assert list(block.attrs) == ["id", "url", "alt", "title", "sizeSlug", "linkDestination"]
        assert block.attrs == {
            "id": 1,
            "url": "https://example.com/a.png",
            "alt": "A cat",
            "title": "T",
            "sizeSlug": "full",
            "linkDestination": "none",
        }
        assert block.inner_html == (
            '<figure class="wp-block-image"><img src="https://example.com/a.png" alt="A cat" '
            'class="wp-image-1" /></figure>'
        )

    def test_alt_falls_back_to_title(self, context):
        block = transforms.image(_element('<img src="https://example.com/a.png" title="Title">'), context)
        assert block.attrs["alt"] == "Title"
        assert 'alt="Title"' in block.inner_html

    def test_force_https_case_insensitive(self, context):
        block = transforms.image(_element('<img src="HTTP://example.com/a.png">'), context)
        assert block.attrs["url"] == "https://example.com/a.png"

    def test_force_https_disabled(self):
        context = ConversionContext(options=ConverterOptions(force_https=False), policy=AllowListPolicy())
        block = transforms.image(_element('<img src="http://example.com/a.png">'), context)
        assert block.attrs["url"] == "http://example.com/a.png"

    def test_alt_escaped_and_trimmed(self, context):
        element = _element('<img src="https://example.com/a.png">')
        element["alt"] = ' "x" & y '

        block = transforms.image(element, context)

        assert 'alt="&quot;x&quot; &amp; y"' in block.inner_html
        assert block.attrs["alt"] == ' "x" & y '

    def test_url_escaped_in_markup(self, context):
        block = transforms.image(_element('<img src="https://example.com/my image.png?a=1&amp;b=2">'), context)
        assert 'src="https://example.com/my%20image.png?a=1&amp;b=2"' in block.inner_html

    def test_uploaded_asset(self, media_store):
        context = ConversionContext(
            options=ConverterOptions(upload_media=True), policy=AllowListPolicy(), media_store=media_store
        )
        block = transforms.image(_element('<img src="https://example.com/cat.png" alt="Cat">'), context)

        assert block.attrs["id"] == 42
        assert block.attrs["url"] == "https://media.example.com/uploads/cat.png"
        assert 'class="wp-image-42"' in block.inner_html
        assert media_store.calls == ["https://example.com/cat.png"]

    def test_upload_failure_drops_image(self, failing_media_store):
        context = ConversionContext(
            options=ConverterOptions(upload_media=True), policy=AllowListPolicy(), media_store=failing_media_store
        )
        assert transforms.image(_element('<img src="https://example.com/cat.png">'), context) is None
