#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/blocks.py
"""Block records and the block comment wire format.

A block is serialized as a pair of HTML comments around its inner markup::

    <!-- wp:heading {"level":2} --><h2>Title</h2><!-- /wp:heading -->

or, when it has no inner markup, as a single self-closing comment::

    <!-- wp:separator /-->

Attributes are encoded as compact JSON. Characters that could end the
surrounding comment early (``--``, ``<``, ``>``, ``&``) and escaped quotes are
written as unicode escapes, so the payload stays valid JSON and the comment
can never be terminated from inside it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from html2blocks.constants import BLOCK_NAMESPACE

_PARAGRAPH_OPEN_BEFORE_BLOCK = re.compile(r"(<!-- wp:paragraph --><p>)(<!--)", re.IGNORECASE)
_PARAGRAPH_CLOSE_AFTER_BLOCK = re.compile(r"(-->)(</p><!-- /wp:paragraph -->)", re.IGNORECASE)

# Backslash pairs are matched first so an escaped backslash before a closing
# quote is never mistaken for an escaped quote.
_JSON_ESCAPE_PAIR = re.compile(r'\\\\|\\"')

_ATTRIBUTE_ESCAPES = (
    ("--", "\\u002d\\u002d"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
)


@dataclass
class BlockRecord:
    """A single block ready for serialization.

    Parameters
    ----------
    name : str
        Block type name, optionally namespaced (``core/paragraph``).
    attrs : dict
        Block attributes; insertion order is preserved in the JSON payload.
    inner_html : str
        Markup placed between the opening and closing delimiters.

    """

    name: str
    attrs: dict[str, Any] = field(default_factory=dict)
    inner_html: str = ""


def block_comment_name(name: str) -> str:
    """Return the name used inside block delimiters.

    The ``core/`` namespace is implied by the wire format and is dropped;
    other namespaces are kept.

    Examples
    --------
        >>> block_comment_name("core/paragraph")
        'paragraph'
        >>> block_comment_name("acme/card")
        'acme/card'

    """
    if name.startswith(BLOCK_NAMESPACE):
        return name[len(BLOCK_NAMESPACE) :]
    return name


def encode_block_attributes(attrs: dict[str, Any]) -> str:
    """Encode block attributes as comment-safe compact JSON.

    Parameters
    ----------
    attrs : dict
        Attribute mapping to encode

    Returns
    -------
    str
        JSON text with comment-breaking sequences unicode-escaped

    Examples
    --------
        >>> encode_block_attributes({"level": 2})
        '{"level":2}'
        >>> encode_block_attributes({"content": "<b>"})
        '{"content":"\\\\u003cb\\\\u003e"}'

    """
    encoded = json.dumps(attrs, ensure_ascii=False, separators=(",", ":"))
    encoded = _JSON_ESCAPE_PAIR.sub(lambda m: "\\u0022" if m.group(0) == '\\"' else m.group(0), encoded)
    for needle, replacement in _ATTRIBUTE_ESCAPES:
        encoded = encoded.replace(needle, replacement)
    return encoded


def serialize_block(block: Optional[BlockRecord]) -> str:
    """Convert a block record to block comment markup.

    Parameters
    ----------
    block : BlockRecord or None
        Block to serialize. ``None`` stands for "no block" and serializes to
        an empty string.

    Returns
    -------
    str
        Serialized block

    Examples
    --------
        >>> serialize_block(BlockRecord("core/separator"))
        '<!-- wp:separator /-->'
        >>> serialize_block(BlockRecord("core/heading", {"level": 2}, "<h2>Hi</h2>"))
        '<!-- wp:heading {"level":2} --><h2>Hi</h2><!-- /wp:heading -->'

    """
    if block is None:
        return ""

    name = block_comment_name(block.name)
    suffix = f" {encode_block_attributes(block.attrs)}" if block.attrs else ""

    if not block.inner_html:
        return f"<!-- wp:{name}{suffix} /-->"
    return f"<!-- wp:{name}{suffix} -->{block.inner_html}<!-- /wp:{name} -->"


def unwrap_nested_paragraphs(content: str) -> str:
    """Remove paragraph wrappers that directly enclose another block.

    An element with no mapping whose only meaningful content is another
    block ends up as ``<!-- wp:paragraph --><p><!-- wp:... -->``; the
    paragraph delimiters and tags around the inner block are dropped.

    Parameters
    ----------
    content : str
        Concatenated block markup

    Returns
    -------
    str
        Markup with the stray paragraph wrappers removed

    """
    content = _PARAGRAPH_OPEN_BEFORE_BLOCK.sub(r"\2", content)
    content = _PARAGRAPH_CLOSE_AFTER_BLOCK.sub(r"\1", content)
    return content


__all__ = [
    "BlockRecord",
    "block_comment_name",
    "encode_block_attributes",
    "serialize_block",
    "unwrap_nested_paragraphs",
]
