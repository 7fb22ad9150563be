#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/mapping.py
"""Tag to block mapping table.

Each entry of the table is one of two variants:

- :class:`Fixed`: the element becomes a block of a constant type whose
  inner markup is the element's cleaned markup;
- :class:`Transform`: a function builds the block, optionally after a
  ``prepare`` step that mutates the element.

Lookup is by exact tag name. Tags without an entry fall back to a paragraph
or HTML passthrough block (see :mod:`html2blocks.converter`).

Examples
--------
Map ``<aside>`` to a custom block and drop the table mapping:

    >>> table = MappingTable()
    >>> table.add("aside", "acme/callout")
    >>> table.remove("table")
    True
    >>> table.get("aside")
    Fixed(block_name='acme/callout')

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from html2blocks import transforms
from html2blocks.blocks import BlockRecord
from html2blocks.constants import HEADING_TAGS
from html2blocks.exceptions import ValidationError

if TYPE_CHECKING:
    from html2blocks.transforms import ConversionContext

BuildFunc = Callable[[Any, "ConversionContext"], Optional[BlockRecord]]
PrepareFunc = Callable[[Any, "ConversionContext"], None]


@dataclass(frozen=True)
class Fixed:
    """Map a tag to a constant block type."""

    block_name: str


@dataclass(frozen=True)
class Transform:
    """Map a tag to a transform function.

    Parameters
    ----------
    build : callable
        ``build(element, context) -> BlockRecord | None``; reads the element
    prepare : callable, optional
        ``prepare(element, context) -> None``; mutates the element and always
        runs before ``build``

    """

    build: BuildFunc
    prepare: Optional[PrepareFunc] = None

    def apply(self, element: Any, context: ConversionContext) -> Optional[BlockRecord]:
        """Run ``prepare`` then ``build`` on an element."""
        if self.prepare is not None:
            self.prepare(element, context)
        return self.build(element, context)


MappingEntry = Union[Fixed, Transform]


def as_mapping_entry(value: Any) -> MappingEntry:
    """Coerce a user-supplied mapping value to a table entry.

    A string becomes :class:`Fixed`, a callable becomes :class:`Transform`
    and existing entries are returned unchanged.

    Raises
    ------
    ValidationError
        If the value is none of these

    """
    if isinstance(value, (Fixed, Transform)):
        return value
    if isinstance(value, str):
        if not value:
            raise ValidationError("Block name must not be empty", parameter_name="mapping", parameter_value=value)
        return Fixed(value)
    if callable(value):
        return Transform(value)
    raise ValidationError(
        f"Mapping must be a block name or a callable, got {type(value).__name__}",
        parameter_name="mapping",
        parameter_value=value,
    )


def default_mapping() -> dict[str, MappingEntry]:
    """Return the built-in tag mapping."""
    code = Transform(transforms.code)
    heading = Transform(transforms.heading)

    entries: dict[str, MappingEntry] = {
        "p": Fixed("core/paragraph"),
        "code": code,
        "pre": code,
        "ul": Transform(transforms.unordered_list),
        "table": Transform(transforms.table),
        "ol": Transform(transforms.ordered_list),
    }
    entries.update({tag: heading for tag in HEADING_TAGS})
    entries.update(
        {
            "blockquote": Transform(transforms.quote, prepare=transforms.mark_quote),
            "img": Transform(transforms.image),
            "hr": Transform(transforms.separator),
        }
    )
    return entries


class MappingTable:
    """Mutable tag to :data:`MappingEntry` table.

    Parameters
    ----------
    entries : Mapping[str, Any], optional
        Initial entries; values are coerced with :func:`as_mapping_entry`.
        Defaults to :func:`default_mapping`.

    """

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        """Initialize the table from a mapping of tag names to entries."""
        self._entries: dict[str, MappingEntry] = {}
        for tag, entry in (default_mapping() if entries is None else entries).items():
            self.add(tag, entry)

    def add(self, tag: str, entry: Any) -> None:
        """Add or replace the entry for a tag."""
        if not tag or not isinstance(tag, str):
            raise ValidationError("Mapping tag must be a non-empty string", parameter_name="tag", parameter_value=tag)
        self._entries[tag] = as_mapping_entry(entry)

    def remove(self, tag: str) -> bool:
        """Remove a tag's entry; return True if it existed."""
        return self._entries.pop(tag, None) is not None

    def get(self, tag: str) -> Optional[MappingEntry]:
        return self._entries.get(tag)

    def copy(self) -> MappingTable:
        return MappingTable(self._entries)

    def as_dict(self) -> dict[str, MappingEntry]:
        return dict(self._entries)

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __getitem__(self, tag: str) -> MappingEntry:
        return self._entries[tag]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MappingTable({', '.join(self._entries)})"


__all__ = ["Fixed", "Transform", "MappingEntry", "MappingTable", "as_mapping_entry", "default_mapping"]
