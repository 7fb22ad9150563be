#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/transforms.py
"""Element to block transform functions.

Each transform receives one parsed element and the :class:`ConversionContext`
of the current run and returns a :class:`~html2blocks.blocks.BlockRecord`,
or ``None`` when the element cannot become a block (an image without a
source, a failed upload). Transforms that need to change the element before
its markup is captured do so in a separate ``prepare`` step, which the
mapping table always runs first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from html2blocks.blocks import BlockRecord, serialize_block
from html2blocks.constants import IMAGE_LINK_DESTINATION, IMAGE_SIZE_SLUG, PLACEHOLDER_ATTACHMENT_ID
from html2blocks.exceptions import MediaUploadError
from html2blocks.media import MediaAsset, MediaStore
from html2blocks.options import ConverterOptions
from html2blocks.sanitizer import AllowListPolicy, clean_attributes
from html2blocks.utils.urls import escape_attr, escape_url, force_https

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


@dataclass
class ConversionContext:
    """State shared by the transforms of one conversion run.

    Parameters
    ----------
    options : ConverterOptions
        Options of the converter performing the run
    policy : AllowListPolicy
        Allow-list used to clean captured elements
    media_store : MediaStore, optional
        Store used when ``options.upload_media`` is enabled

    """

    options: ConverterOptions
    policy: AllowListPolicy
    media_store: Optional[MediaStore] = None

    def cleaned_markup(self, element: Any) -> str:
        """Clean an element's attributes and return its markup.

        An element without child nodes yields its text content instead of
        markup.
        """
        clean_attributes(element, self.policy)
        if not element.contents:
            return element.get_text()
        return str(element)

    def store_image(self, source_url: str) -> Optional[MediaAsset]:
        """Resolve the asset an image block should reference.

        Without ``upload_media`` the source URL is used with a placeholder
        id. Otherwise the media store is asked for a stored copy; a failure
        or an empty answer yields None.
        """
        if not self.options.upload_media:
            return MediaAsset(id=PLACEHOLDER_ATTACHMENT_ID, url=source_url)

        if self.media_store is None:
            logger.warning("upload_media is enabled but no media store is configured; skipping %s", source_url)
            return None

        try:
            asset = self.media_store.upload(source_url)
        except MediaUploadError as e:
            logger.warning("Skipping image %s: %s", source_url, e.message)
            return None
        except Exception as e:
            logger.warning("Skipping image %s: media store failed: %s", source_url, e, exc_info=True)
            return None

        if asset is None or not asset.url:
            logger.warning("Skipping image %s: media store returned no asset", source_url)
            return None
        return asset


def heading(element: Any, context: ConversionContext) -> BlockRecord:
    """Convert ``h1``-``h6`` to a heading block with its level."""
    digits = _NON_DIGITS.sub("", element.name)
    return BlockRecord(
        name="core/heading",
        attrs={"level": int(digits) if digits else 0},
        inner_html=context.cleaned_markup(element),
    )


def mark_quote(element: Any, context: ConversionContext) -> None:
    """Give a blockquote the quote block's class before it is captured."""
    element["class"] = "wp-block-quote"


def quote(element: Any, context: ConversionContext) -> BlockRecord:
    return BlockRecord(name="core/quote", inner_html=context.cleaned_markup(element))


def list_item(element: Any, context: ConversionContext) -> BlockRecord:
    return BlockRecord(name="core/list-item", inner_html=context.cleaned_markup(element))


def _list_items_markup(element: Any, context: ConversionContext) -> str:
    # Every descendant li becomes an item, nested lists included.
    return "".join(serialize_block(list_item(li, context)) for li in element.find_all("li"))


def unordered_list(element: Any, context: ConversionContext) -> BlockRecord:
    return BlockRecord(name="core/list", inner_html=f"<ul>{_list_items_markup(element, context)}</ul>")


def ordered_list(element: Any, context: ConversionContext) -> BlockRecord:
    return BlockRecord(
        name="core/list",
        attrs={"ordered": True},
        inner_html=f"<ol>{_list_items_markup(element, context)}</ol>",
    )


def table(element: Any, context: ConversionContext) -> BlockRecord:
    return BlockRecord(
        name="core/table",
        inner_html=f'<figure class="wp-block-table">{context.cleaned_markup(element)}</figure>',
    )


def separator(element: Any, context: ConversionContext) -> BlockRecord:
    return BlockRecord(name="core/separator", inner_html='<hr class="wp-block-separator"/>')


def code(element: Any, context: ConversionContext) -> BlockRecord:
    """Convert ``code``/``pre`` to a code block.

    The captured markup is stored both as the ``content`` attribute and,
    wrapped in ``<pre class="wp-block-code">``, as the inner markup.
    """
    markup = context.cleaned_markup(element)
    return BlockRecord(
        name="core/code",
        attrs={"content": markup},
        inner_html=f'<pre class="wp-block-code">{markup}</pre>',
    )


def image(element: Any, context: ConversionContext) -> Optional[BlockRecord]:
    """Convert ``img`` to an image block.

    Parameters
    ----------
    element : bs4.element.Tag
        The image element
    context : ConversionContext
        Current run; its options decide whether the image is uploaded and
        whether the URL is forced to HTTPS

    Returns
    -------
    BlockRecord or None
        The image block, or None when the element has no ``src`` or the
        media store could not provide an asset

    """
    src = element.get("src") or ""
    if not src:
        logger.debug("Dropping <img> without src")
        return None

    title = element.get("title") or ""
    alt = element.get("alt") or title

    asset = context.store_image(src)
    if asset is None:
        return None

    url = asset.url
    if context.options.force_https:
        url = force_https(url)

    markup = (
        f'<figure class="wp-block-image"><img src="{escape_url(url)}" alt="{escape_attr(alt).strip()}" '
        f'class="wp-image-{asset.id}" /></figure>'
    )
    return BlockRecord(
        name="core/image",
        attrs={
            "id": asset.id,
            "url": url,
            "alt": alt,
            "title": title,
            "sizeSlug": IMAGE_SIZE_SLUG,
            "linkDestination": IMAGE_LINK_DESTINATION,
        },
        inner_html=markup,
    )


__all__ = [
    "ConversionContext",
    "heading",
    "mark_quote",
    "quote",
    "list_item",
    "unordered_list",
    "ordered_list",
    "table",
    "separator",
    "code",
    "image",
]
