#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/autop.py
"""Automatic paragraph normalization.

Editors commonly store post bodies as text in which blank lines separate
paragraphs and single newlines are line breaks. :func:`autop` turns such
text into HTML before it is parsed:

- two or more newlines delimit paragraphs, each wrapped in ``<p>``;
- single newlines inside a paragraph become ``<br />``;
- block-level tags are left alone and never wrapped in ``<p>``;
- ``<pre>`` contents and newlines inside ``<script>``/``<style>`` are kept
  verbatim.

"""

from __future__ import annotations

import re

BLOCK_TAGS = (
    "table|thead|tfoot|caption|col|colgroup|tbody|tr|td|th|div|dl|dd|dt|ul|ol|li|pre|form|map|area|"
    "blockquote|address|math|style|p|h[1-6]|hr|fieldset|legend|section|article|aside|hgroup|header|"
    "footer|nav|figure|figcaption|details|menu|summary"
)
_ALLBLOCKS = f"(?:{BLOCK_TAGS})"

_PRE_BLOCK = re.compile(r"<pre[\s>].*?</pre>", re.IGNORECASE | re.DOTALL)
_DOUBLE_BR = re.compile(r"<br\s*/?>\s*<br\s*/?>", re.IGNORECASE)
_BLOCK_OPEN = re.compile(rf"(<{_ALLBLOCKS}[\s/>])", re.IGNORECASE)
_BLOCK_CLOSE = re.compile(rf"(</{_ALLBLOCKS}>)", re.IGNORECASE)
_HR = re.compile(r"(<hr\s*?/?>)", re.IGNORECASE)
_MANY_NEWLINES = re.compile(r"\n\n+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_EMPTY_PARAGRAPH = re.compile(r"<p>\s*</p>")
_UNCLOSED_CONTAINER = re.compile(r"<p>([^<]+)</(div|address|form)>", re.IGNORECASE)
_P_AROUND_BLOCK_TAG = re.compile(rf"<p>\s*(</?{_ALLBLOCKS}[^>]*>)\s*</p>", re.IGNORECASE)
_P_AROUND_LIST_ITEM = re.compile(r"<p>(<li.+?)</p>", re.IGNORECASE)
_P_BEFORE_BLOCKQUOTE = re.compile(r"<p><blockquote([^>]*)>", re.IGNORECASE)
_P_BEFORE_BLOCK_TAG = re.compile(rf"<p>\s*(</?{_ALLBLOCKS}[^>]*>)", re.IGNORECASE)
_BLOCK_TAG_BEFORE_P_CLOSE = re.compile(rf"(</?{_ALLBLOCKS}[^>]*>)\s*</p>", re.IGNORECASE)
_SCRIPT_OR_STYLE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BR_VARIANTS = re.compile(r"<br>|<br/>", re.IGNORECASE)
_NEWLINE_TO_BR = re.compile(r"(?<!<br />)\s*\n")
_BR_AFTER_BLOCK_TAG = re.compile(rf"(</?{_ALLBLOCKS}[^>]*>)\s*<br />", re.IGNORECASE)
_BR_BEFORE_BLOCK_TAG = re.compile(r"<br />(\s*</?(?:p|li|div|dl|dd|dt|th|pre|td|ul|ol)[^>]*>)", re.IGNORECASE)
_TRAILING_NEWLINE = re.compile(r"\n</p>$")

_PRESERVED_NEWLINE = "<H2BPreserveNewline />"


def autop(text: str, br: bool = True) -> str:
    """Wrap blank-line separated text in paragraph tags.

    Parameters
    ----------
    text : str
        Text or HTML to normalize
    br : bool, default True
        Convert single newlines inside paragraphs to ``<br />``

    Returns
    -------
    str
        HTML with paragraphs made explicit. Whitespace-only input yields an
        empty string.

    Examples
    --------
        >>> autop("First para\\n\\nSecond\\nline")
        '<p>First para</p>\\n<p>Second<br />\\nline</p>\\n'
        >>> autop("<h2>Title</h2>\\nBody")
        '<h2>Title</h2>\\n<p>Body</p>\\n'

    """
    if not text.strip():
        return ""

    pre_blocks: dict[str, str] = {}

    def _stash_pre(match: re.Match[str]) -> str:
        key = f"<pre h2b-pre-tag-{len(pre_blocks)}></pre>"
        pre_blocks[key] = match.group(0)
        return key

    text = text.replace("\r\n", "\n").replace("\r", "\n") + "\n"
    text = _PRE_BLOCK.sub(_stash_pre, text)

    text = _DOUBLE_BR.sub("\n\n", text)
    text = _BLOCK_OPEN.sub(r"\n\n\1", text)
    text = _BLOCK_CLOSE.sub(r"\1\n\n", text)
    text = _HR.sub(r"\1\n\n", text)
    text = _MANY_NEWLINES.sub("\n\n", text)

    paragraphs = [chunk for chunk in _PARAGRAPH_SPLIT.split(text) if chunk.strip()]
    text = "".join(f"<p>{chunk.strip(chr(10))}</p>\n" for chunk in paragraphs)

    text = _EMPTY_PARAGRAPH.sub("", text)
    text = _UNCLOSED_CONTAINER.sub(r"<p>\1</p></\2>", text)
    text = _P_AROUND_BLOCK_TAG.sub(r"\1", text)
    text = _P_AROUND_LIST_ITEM.sub(r"\1", text)
    text = _P_BEFORE_BLOCKQUOTE.sub(r"<blockquote\1><p>", text)
    text = text.replace("</blockquote></p>", "</p></blockquote>")
    text = _P_BEFORE_BLOCK_TAG.sub(r"\1", text)
    text = _BLOCK_TAG_BEFORE_P_CLOSE.sub(r"\1", text)

    if br:
        text = _SCRIPT_OR_STYLE.sub(lambda m: m.group(0).replace("\n", _PRESERVED_NEWLINE), text)
        text = _BR_VARIANTS.sub("<br />", text)
        text = _NEWLINE_TO_BR.sub("<br />\n", text)
        text = text.replace(_PRESERVED_NEWLINE, "\n")

    text = _BR_AFTER_BLOCK_TAG.sub(r"\1", text)
    text = _BR_BEFORE_BLOCK_TAG.sub(r"\1", text)
    text = _TRAILING_NEWLINE.sub("</p>", text)

    for key, block in pre_blocks.items():
        text = text.replace(key, block)

    return text


def remove_empty_paragraphs(html: str) -> str:
    """Drop paragraphs left empty, e.g. after sanitizing removed their only comment."""
    return _EMPTY_PARAGRAPH.sub("", html)


__all__ = ["autop", "remove_empty_paragraphs", "BLOCK_TAGS"]
