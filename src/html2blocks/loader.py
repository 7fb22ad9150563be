#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/loader.py
"""Load raw post content into a parsed document.

The loader normalizes raw text (wrapping bare fragments in a document,
making paragraphs explicit), sanitizes it against the allow-list policy and
parses the result with BeautifulSoup. The returned document always has a
``<body>`` whose direct children are the nodes the converter dispatches on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from bs4 import BeautifulSoup
from bs4.exceptions import FeatureNotFound

from html2blocks.autop import autop, remove_empty_paragraphs
from html2blocks.exceptions import DependencyError
from html2blocks.options import ConverterOptions
from html2blocks.sanitizer import AllowListPolicy, sanitize_html

logger = logging.getLogger(__name__)

# NUL and zero-width characters can hide markup from the sanitizer.
_INVISIBLE_CHARACTERS = dict.fromkeys(map(ord, "\x00\ufeff\u200b\u200c\u200d\u2060"))


@dataclass
class LoadedContent:
    """Result of loading raw content.

    Parameters
    ----------
    raw : str
        The input exactly as the caller supplied it (decoded to text)
    html : str
        Sanitized HTML that was parsed
    soup : BeautifulSoup
        Parsed document

    """

    raw: str
    html: str
    soup: Any

    @property
    def body(self) -> Any:
        """Return the ``<body>`` element of the parsed document."""
        return self.soup.body


def decode_content(content: Union[str, bytes]) -> str:
    """Decode input to text and drop invisible characters.

    Parameters
    ----------
    content : str or bytes
        Raw content; bytes are decoded as UTF-8 with replacement characters

    Returns
    -------
    str
        Clean text

    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return content.translate(_INVISIBLE_CHARACTERS)


def wrap_fragment(text: str) -> str:
    """Wrap text that does not start with a tag in a minimal document.

    Examples
    --------
        >>> wrap_fragment("foo")
        '<html><body>foo</body></html>'
        >>> wrap_fragment("<p>foo</p>")
        '<p>foo</p>'

    """
    if not text.startswith("<"):
        return f"<html><body>{text}</body></html>"
    return text


def parse_html(html: str, parser: str) -> Any:
    """Parse sanitized HTML into a document with a guaranteed body.

    The sanitizer strips ``<html>`` and ``<body>``, so the markup is placed
    in a fresh document shell before parsing; every tree builder then
    yields the same ``html > body`` root.

    Parameters
    ----------
    html : str
        Sanitized HTML
    parser : str
        BeautifulSoup tree builder name

    Returns
    -------
    BeautifulSoup
        Parsed document

    Raises
    ------
    DependencyError
        If the requested tree builder is not installed

    """
    try:
        return BeautifulSoup(f"<html><body>{html}</body></html>", parser)
    except FeatureNotFound as e:
        raise DependencyError(
            f"HTML parser '{parser}' is not available: {e}",
            missing_packages=[parser] if parser in ("lxml", "html5lib") else [],
            original_error=e,
        ) from e


def load_content(
    content: Union[str, bytes],
    policy: AllowListPolicy,
    options: ConverterOptions,
) -> LoadedContent:
    """Normalize, sanitize and parse raw content.

    Parameters
    ----------
    content : str or bytes
        Raw post content
    policy : AllowListPolicy
        Allow-list merged into the sanitizer's baseline policy
    options : ConverterOptions
        Converter options; ``auto_paragraph`` and ``html_parser`` apply here

    Returns
    -------
    LoadedContent
        Raw text, sanitized HTML and the parsed document

    """
    raw = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
    text = wrap_fragment(decode_content(raw))

    if options.auto_paragraph:
        text = autop(text)

    sanitized = sanitize_html(text, policy)
    if options.auto_paragraph:
        sanitized = remove_empty_paragraphs(sanitized)
    soup = parse_html(sanitized, options.html_parser)

    logger.debug(
        "Loaded %d characters into %d top-level nodes using %s",
        len(raw),
        len(soup.body.contents) if soup.body is not None else 0,
        options.html_parser,
    )
    return LoadedContent(raw=raw, html=sanitized, soup=soup)


__all__ = ["LoadedContent", "decode_content", "wrap_fragment", "parse_html", "load_content"]
