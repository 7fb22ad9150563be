#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/converter.py
"""HTML to block markup converter.

:class:`BlockConverter` ties the pipeline together::

    raw text -> load_content (autop, sanitize, parse)
             -> convert_to_blocks (dispatch each body child, serialize)
             -> render (concatenate, unwrap stray paragraph wrappers)

Every converter owns its options, tag mapping, allow-list policy and hook
manager, so independent instances never share configuration.

Examples
--------
One-shot conversion:

    >>> from html2blocks import convert_blocks
    >>> print(convert_blocks("<h2>Title</h2><p>Body text</p>"))
    <!-- wp:heading {"level":2} --><h2>Title</h2><!-- /wp:heading -->
    <BLANKLINE>
    <!-- wp:paragraph --><p>Body text</p><!-- /wp:paragraph -->
    <BLANKLINE>
    <BLANKLINE>

Step by step with a custom mapping:

    >>> converter = BlockConverter()
    >>> converter.add_dom_mapping("aside", "acme/callout")
    >>> converter.load_content("<aside>Note</aside>")
    >>> blocks = converter.convert_to_blocks()
    >>> converter.render()
    '<!-- wp:acme/callout --><aside>Note</aside><!-- /wp:acme/callout -->\\n\\n'

"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from bs4.element import Tag

from html2blocks.blocks import BlockRecord, serialize_block, unwrap_nested_paragraphs
from html2blocks.constants import BLOCK_SEPARATOR
from html2blocks.exceptions import ValidationError
from html2blocks.hooks import HookContext, HookManager
from html2blocks.loader import LoadedContent
from html2blocks.loader import load_content as load_document
from html2blocks.mapping import Fixed, MappingTable, Transform
from html2blocks.media import MediaStore
from html2blocks.options import ConverterOptions
from html2blocks.sanitizer import AllowListPolicy
from html2blocks.transforms import ConversionContext

logger = logging.getLogger(__name__)

# Everything but letters, digits, underscore and hyphen.
_NON_WORD = re.compile(r"[^\w-]")

SHORTCODE_MARKER = "["


def _has_meaningful_text(text: str) -> bool:
    return bool(_NON_WORD.sub("", text))


def _coerce_options(options: Union[ConverterOptions, Mapping[str, Any], None]) -> ConverterOptions:
    if options is None:
        return ConverterOptions()
    if isinstance(options, ConverterOptions):
        return options
    if isinstance(options, Mapping):
        return ConverterOptions().create_updated(**options)
    raise ValidationError(
        f"options must be ConverterOptions or a mapping, got {type(options).__name__}",
        parameter_name="options",
        parameter_value=options,
    )


class BlockConverter:
    """Convert HTML fragments into block markup.

    Parameters
    ----------
    options : ConverterOptions or Mapping, optional
        Converter options; a mapping is applied over the defaults
    media_store : MediaStore, optional
        Store used for images when ``upload_media`` is enabled
    hooks : HookManager, optional
        Hooks filtering the mapping and allow-list before each conversion
    mapping : Mapping[str, Any], optional
        Initial tag mapping; defaults to the built-in table
    allowed_tags : Mapping[str, Iterable[str]], optional
        Initial allow-list; defaults to the built-in policy

    Notes
    -----
    A converter is not safe for concurrent use. Each conversion keeps its
    parsed document and output buffer on the instance until the next
    :meth:`load_content`.

    """

    def __init__(
        self,
        options: Union[ConverterOptions, Mapping[str, Any], None] = None,
        media_store: Optional[MediaStore] = None,
        hooks: Optional[HookManager] = None,
        mapping: Optional[Mapping[str, Any]] = None,
        allowed_tags: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> None:
        """Initialize the converter with its own copies of the tables."""
        self._options = _coerce_options(options)
        self.media_store = media_store
        self.hooks = hooks if hooks is not None else HookManager()
        self._mapping = MappingTable(mapping.as_dict() if isinstance(mapping, MappingTable) else mapping)
        self._policy = (
            allowed_tags.copy() if isinstance(allowed_tags, AllowListPolicy) else AllowListPolicy(allowed_tags)
        )

        self._loaded: Optional[LoadedContent] = None
        self._active_mapping: Optional[MappingTable] = None
        self._active_policy: Optional[AllowListPolicy] = None
        self._output: list[str] = []

    # Options

    @property
    def options(self) -> ConverterOptions:
        """Return the current options."""
        return self._options

    def get_option(self, name: str) -> Any:
        """Return the value of one option.

        Raises
        ------
        ValidationError
            If ``name`` is not an option

        """
        if name not in ConverterOptions.__dataclass_fields__:
            raise ValidationError(f"Unknown option '{name}'", parameter_name=name)
        return getattr(self._options, name)

    def set_option(self, name: str, value: Any) -> None:
        """Set one option, validating the name and value."""
        self._options = self._options.create_updated(**{name: value})

    def set_options(self, **options: Any) -> None:
        """Set several options at once."""
        self._options = self._options.create_updated(**options)

    # Tables

    def add_dom_mapping(self, tag: str, entry: Any) -> None:
        """Map a tag to a block name, a transform callable or a mapping entry."""
        self._mapping.add(tag, entry)

    def remove_dom_mapping(self, tag: str) -> bool:
        """Remove a tag's mapping; return True if it existed."""
        return self._mapping.remove(tag)

    def add_allowed_tag(self, tag: str, attributes: Iterable[str] = ()) -> None:
        """Allow a tag with the given extra attributes, replacing any previous list."""
        self._policy.add(tag, attributes)

    def remove_allowed_tag(self, tag: str) -> bool:
        """Remove a tag from the allow-list; return True if it existed."""
        return self._policy.remove(tag)

    def _hook_context(self) -> HookContext:
        return HookContext(converter=self)

    def get_mapping(self) -> MappingTable:
        """Return a copy of the mapping table after the ``mapping`` hooks ran."""
        result = self.hooks.execute_hooks("mapping", self._mapping.copy(), self._hook_context())
        return result if isinstance(result, MappingTable) else MappingTable(result)

    def get_allowed_tags(self) -> AllowListPolicy:
        """Return a copy of the allow-list after the ``allowed_tags`` hooks ran."""
        result = self.hooks.execute_hooks("allowed_tags", self._policy.copy(), self._hook_context())
        return result if isinstance(result, AllowListPolicy) else AllowListPolicy(result)

    # Conversion

    def load_content(self, content: Union[str, bytes]) -> None:
        """Sanitize and parse raw content, discarding any previous run.

        The mapping and allow-list hooks run here; the filtered tables are
        used until the next call.
        """
        self._output = []
        self._active_mapping = self.get_mapping()
        self._active_policy = self.get_allowed_tags()
        self._loaded = load_document(content, self._active_policy, self._options)

    def _context(self) -> ConversionContext:
        return ConversionContext(
            options=self._options,
            policy=self._active_policy if self._active_policy is not None else self._policy,
            media_store=self.media_store,
        )

    def _convert_node(self, node: Any, mapping: MappingTable, context: ConversionContext) -> Optional[str]:
        """Dispatch one body child; return its output text or None."""
        if not isinstance(node, Tag):
            text = str(node)
            if SHORTCODE_MARKER in text:
                logger.debug("Passing through text node containing '['")
                return text
            return None

        entry = mapping.get(node.name)

        if isinstance(entry, Fixed):
            logger.debug("<%s> -> %s", node.name, entry.block_name)
            block: Optional[BlockRecord] = BlockRecord(entry.block_name, {}, context.cleaned_markup(node))
        elif isinstance(entry, Transform):
            block = entry.apply(node, context)
            if block is None:
                logger.debug("<%s> produced no block", node.name)
                return None
            logger.debug("<%s> -> %s", node.name, block.name)
        else:
            text = node.get_text()
            if _has_meaningful_text(text) and SHORTCODE_MARKER not in text:
                logger.debug("<%s> has no mapping; wrapping as paragraph", node.name)
                block = BlockRecord("core/paragraph", {}, f"<p>{context.cleaned_markup(node).strip()}</p>")
            else:
                logger.debug("<%s> has no mapping; passing through as html", node.name)
                block = BlockRecord("core/html", {}, context.cleaned_markup(node))

        return serialize_block(block) + BLOCK_SEPARATOR

    def convert_to_blocks(self) -> list[str]:
        """Convert each child of the loaded document body.

        Returns
        -------
        list of str
            Output pieces in document order: serialized blocks, each followed
            by a blank line, and passed-through text

        """
        if self._loaded is None or self._loaded.body is None:
            logger.debug("Nothing loaded; no blocks to convert")
            return []

        mapping = self._active_mapping if self._active_mapping is not None else self._mapping
        context = self._context()

        self._output = []
        # Transforms may mutate nodes, so iterate over a snapshot.
        for node in list(self._loaded.body.children):
            piece = self._convert_node(node, mapping, context)
            if piece is not None:
                self._output.append(piece)

        logger.debug(
            "Converted %d top-level nodes into %d output pieces", len(self._loaded.body.contents), len(self._output)
        )
        return list(self._output)

    def render(self) -> str:
        """Return the final block markup.

        When the conversion produced nothing, the raw input is returned
        unchanged so content is never lost.
        """
        content = "".join(self._output)
        if not content:
            return self._loaded.raw if self._loaded is not None else ""
        return unwrap_nested_paragraphs(content)

    def convert_blocks(self, content: Union[str, bytes]) -> str:
        """Load, convert and render ``content`` in one call."""
        self.load_content(content)
        self.convert_to_blocks()
        return self.render()

    @staticmethod
    def serialize_block(block: Optional[BlockRecord]) -> str:
        """Serialize a block record to block comment markup."""
        return serialize_block(block)


def convert_blocks(
    html: Union[str, bytes],
    options: Union[ConverterOptions, Mapping[str, Any], None] = None,
    media_store: Optional[MediaStore] = None,
) -> str:
    """Convert HTML to block markup with a fresh converter.

    Parameters
    ----------
    html : str or bytes
        HTML fragment or document
    options : ConverterOptions or Mapping, optional
        Converter options
    media_store : MediaStore, optional
        Store used for images when ``upload_media`` is enabled

    Returns
    -------
    str
        Block markup, or the input text itself when nothing converted

    """
    return BlockConverter(options=options, media_store=media_store).convert_blocks(html)


__all__ = ["BlockConverter", "convert_blocks"]
