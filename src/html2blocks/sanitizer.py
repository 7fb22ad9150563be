#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/sanitizer.py
"""Attribute allow-list policy and HTML sanitization.

Two layers keep converted markup clean:

- Before parsing, the whole input is passed through bleach with the
  converter's allow-list merged into a baseline policy for published
  content. This drops unknown tags, event handlers and dangerous URLs.
- While converting, every element whose markup is captured into a block is
  run through :func:`clean_attributes`, which keeps only ``class``, ``id``
  and the attributes the allow-list names for that tag.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import bleach
from bleach.css_sanitizer import CSSSanitizer

from html2blocks.constants import (
    ALLOWED_CSS_PROPERTIES,
    ALLOWED_PROTOCOLS,
    ALWAYS_ALLOWED_ATTRIBUTES,
    BASELINE_GLOBAL_ATTRIBUTES,
    BASELINE_POST_TAGS,
    DEFAULT_ALLOWED_TAGS,
)
from html2blocks.exceptions import ValidationError

logger = logging.getLogger(__name__)


class AllowListPolicy:
    """Per-tag allow-list of extra attribute names.

    ``class`` and ``id`` are implicitly allowed on every tag and never need
    to be listed. Tag order and attribute order are preserved.

    Parameters
    ----------
    tags : Mapping[str, Iterable[str]], optional
        Initial tag to attribute mapping. Defaults to
        :data:`~html2blocks.constants.DEFAULT_ALLOWED_TAGS`.

    Examples
    --------
        >>> policy = AllowListPolicy({"a": ["href"]})
        >>> policy.allowed_for("a")
        ('class', 'id', 'href')
        >>> policy.allowed_for("marquee")
        ('class', 'id')

    """

    def __init__(self, tags: Mapping[str, Iterable[str]] | None = None) -> None:
        """Initialize the policy from a tag mapping."""
        source = DEFAULT_ALLOWED_TAGS if tags is None else tags
        self._tags: dict[str, tuple[str, ...]] = {}
        for tag, attributes in source.items():
            self.add(tag, attributes)

    def add(self, tag: str, attributes: Iterable[str] = ()) -> None:
        """Allow a tag, replacing any attribute list it already had.

        Parameters
        ----------
        tag : str
            Tag name
        attributes : Iterable[str]
            Extra attribute names allowed on the tag

        Raises
        ------
        ValidationError
            If the tag name is empty or attributes is a bare string

        """
        if not tag or not isinstance(tag, str):
            raise ValidationError(
                "Allow-list tag must be a non-empty string", parameter_name="tag", parameter_value=tag
            )
        if isinstance(attributes, str):
            raise ValidationError(
                f"Attributes for '{tag}' must be a list of names, not a string",
                parameter_name="attributes",
                parameter_value=attributes,
            )
        self._tags[tag] = tuple(dict.fromkeys(attributes))

    def remove(self, tag: str) -> bool:
        """Remove a tag from the policy.

        Returns
        -------
        bool
            True if the tag was present

        """
        return self._tags.pop(tag, None) is not None

    def allowed_for(self, tag: str) -> tuple[str, ...]:
        """Return every attribute allowed on ``tag``, including class and id."""
        return ALWAYS_ALLOWED_ATTRIBUTES + tuple(
            name for name in self._tags.get(tag, ()) if name not in ALWAYS_ALLOWED_ATTRIBUTES
        )

    def copy(self) -> AllowListPolicy:
        """Return an independent copy of the policy."""
        return AllowListPolicy(self._tags)

    def as_dict(self) -> dict[str, list[str]]:
        """Return the policy as a plain ``{tag: [attributes]}`` mapping."""
        return {tag: list(attributes) for tag, attributes in self._tags.items()}

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __getitem__(self, tag: str) -> tuple[str, ...]:
        return self._tags[tag]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllowListPolicy):
            return NotImplemented
        return self._tags == other._tags

    def __repr__(self) -> str:
        return f"AllowListPolicy({len(self._tags)} tags)"


def build_bleach_attributes(policy: AllowListPolicy) -> tuple[frozenset[str], dict[str, list[str]]]:
    """Merge the allow-list with the baseline post-content policy.

    Tags from both policies are allowed. For a tag present in both, the
    attribute lists are unioned, baseline first.

    Parameters
    ----------
    policy : AllowListPolicy
        Converter allow-list

    Returns
    -------
    tuple of (frozenset, dict)
        Allowed tag names and the bleach attribute mapping (``"*"`` holds
        the global attributes)

    """
    merged: dict[str, tuple[str, ...]] = dict(BASELINE_POST_TAGS)
    for tag in policy:
        merged[tag] = tuple(dict.fromkeys(merged.get(tag, ()) + policy[tag]))

    attributes: dict[str, list[str]] = {tag: list(names) for tag, names in merged.items()}
    attributes["*"] = list(BASELINE_GLOBAL_ATTRIBUTES)
    return frozenset(merged), attributes


def sanitize_html(content: str, policy: AllowListPolicy, strip_comments: bool = True) -> str:
    """Sanitize HTML text against the merged allow-list.

    Disallowed tags are stripped (their text is kept), disallowed attributes
    and URL protocols are dropped, and ``style`` values are filtered to a
    small set of presentational CSS properties.

    Parameters
    ----------
    content : str
        HTML text to sanitize
    policy : AllowListPolicy
        Converter allow-list merged into the baseline policy
    strip_comments : bool, default True
        Drop HTML comments from the output

    Returns
    -------
    str
        Sanitized HTML

    Examples
    --------
        >>> sanitize_html('<p onclick="x()">Hi<script>bad()</script></p>', AllowListPolicy())
        '<p>Hibad()</p>'

    """
    if not content:
        return ""

    tags, attributes = build_bleach_attributes(policy)
    logger.debug("Sanitizing %d characters with %d allowed tags", len(content), len(tags))

    return bleach.clean(
        content,
        tags=tags,
        attributes=attributes,
        protocols=frozenset(ALLOWED_PROTOCOLS),
        css_sanitizer=CSSSanitizer(allowed_css_properties=frozenset(ALLOWED_CSS_PROPERTIES)),
        strip=True,
        strip_comments=strip_comments,
    )


def clean_attributes(element: Any, policy: AllowListPolicy) -> Any:
    """Remove attributes the allow-list does not permit on an element.

    Removal walks a snapshot of the attribute names, so deleting entries
    never skips the one after it. Running this twice leaves the same
    attributes as running it once.

    Parameters
    ----------
    element : bs4.element.Tag
        Element to clean in place
    policy : AllowListPolicy
        Allow-list consulted for the element's tag

    Returns
    -------
    bs4.element.Tag
        The same element

    """
    if not getattr(element, "attrs", None):
        return element

    allowed = policy.allowed_for(element.name)
    for name in list(element.attrs):
        if name not in allowed:
            del element[name]

    return element


__all__ = [
    "AllowListPolicy",
    "build_bleach_attributes",
    "sanitize_html",
    "clean_attributes",
]
