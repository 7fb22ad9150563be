"""html2blocks - convert HTML fragments into block editor markup.

html2blocks takes post content written as HTML (or as plain text with
blank-line paragraphs) and rewrites every top-level element as a block::

    <!-- wp:heading {"level":2} --><h2>Title</h2><!-- /wp:heading -->

Input is sanitized against a per-tag attribute allow-list, parsed with
BeautifulSoup and dispatched through a tag to block mapping table. Elements
without a mapping become paragraph or HTML passthrough blocks, and images
can optionally be copied into a media library as they are converted.

Requirements
------------
- Python 3.10+
- beautifulsoup4, bleach, httpx

Examples
--------
One-shot conversion:

    >>> from html2blocks import convert_blocks
    >>> markup = convert_blocks("<h2>Title</h2><p>Body text</p>")

Customizing the tables of one converter:

    >>> from html2blocks import BlockConverter
    >>> converter = BlockConverter(options={"force_https": False})
    >>> converter.add_dom_mapping("aside", "acme/callout")
    >>> converter.add_allowed_tag("aside", ["data-kind"])
    >>> markup = converter.convert_blocks("<aside data-kind='tip'>Note</aside>")

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "html2blocks requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from html2blocks.blocks import BlockRecord, serialize_block
from html2blocks.converter import BlockConverter, convert_blocks
from html2blocks.exceptions import (
    ConfigError,
    DependencyError,
    Html2BlocksError,
    MediaUploadError,
    NetworkSecurityError,
    ValidationError,
)
from html2blocks.hooks import HookContext, HookManager
from html2blocks.mapping import Fixed, MappingTable, Transform
from html2blocks.media import MediaAsset, MediaStore, WordPressMediaStore
from html2blocks.options import ConverterOptions, MediaOptions
from html2blocks.sanitizer import AllowListPolicy
from html2blocks.transforms import ConversionContext

__all__ = [
    "__version__",
    "convert_blocks",
    "BlockConverter",
    "BlockRecord",
    "serialize_block",
    "ConverterOptions",
    "MediaOptions",
    "AllowListPolicy",
    "MappingTable",
    "Fixed",
    "Transform",
    "ConversionContext",
    "HookManager",
    "HookContext",
    "MediaAsset",
    "MediaStore",
    "WordPressMediaStore",
    "Html2BlocksError",
    "ValidationError",
    "ConfigError",
    "DependencyError",
    "MediaUploadError",
    "NetworkSecurityError",
]
