#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for block conversion.

This module defines the frozen dataclasses holding converter options and
media store settings. Options are immutable; converters swap in an updated
copy through ``create_updated`` when a setter is called.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from html2blocks.constants import (
    DEFAULT_AUTO_PARAGRAPH,
    DEFAULT_FORCE_HTTPS,
    DEFAULT_HTML_PARSER,
    DEFAULT_MEDIA_MAX_SIZE_BYTES,
    DEFAULT_MEDIA_REQUIRE_HTTPS,
    DEFAULT_MEDIA_TIMEOUT,
    DEFAULT_UPLOAD_MEDIA,
    HTML_PARSERS,
    HtmlParser,
)
from html2blocks.exceptions import ValidationError


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        Raises
        ------
        ValidationError
            If a keyword does not name a field of this options class

        """
        known = {f.name for f in fields(self)}
        for name, value in kwargs.items():
            if name not in known:
                raise ValidationError(
                    f"Unknown option '{name}' for {type(self).__name__}",
                    parameter_name=name,
                    parameter_value=value,
                )
        return replace(self, **kwargs)


@dataclass(frozen=True)
class ConverterOptions(CloneFrozenMixin):
    """Options controlling a ``BlockConverter`` instance.

    Parameters
    ----------
    upload_media : bool, default False
        Store images through the configured media store and reference the
        stored copy. When False, images keep their source URL and a
        placeholder attachment id of 1.
    force_https : bool, default True
        Rewrite a leading ``http://`` in image URLs to ``https://``.
    auto_paragraph : bool, default True
        Wrap bare text runs in ``<p>`` tags before parsing.
    html_parser : {"html.parser", "lxml", "html5lib"}, default "html.parser"
        BeautifulSoup tree builder used to parse sanitized input.

    """

    upload_media: bool = field(
        default=DEFAULT_UPLOAD_MEDIA,
        metadata={"help": "Upload images to the media store and use the stored URL", "importance": "core"},
    )
    force_https: bool = field(
        default=DEFAULT_FORCE_HTTPS,
        metadata={"help": "Rewrite http:// image URLs to https://", "importance": "core"},
    )
    auto_paragraph: bool = field(
        default=DEFAULT_AUTO_PARAGRAPH,
        metadata={"help": "Wrap blank-line separated text in paragraph tags before parsing", "importance": "core"},
    )
    html_parser: HtmlParser = field(
        default=DEFAULT_HTML_PARSER,
        metadata={
            "help": "BeautifulSoup parser: 'html.parser' (built-in), 'lxml' or 'html5lib'",
            "choices": list(HTML_PARSERS),
            "importance": "advanced",
        },
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValidationError
            If a flag is not a bool or ``html_parser`` is not a supported
            tree builder.

        """
        for name in ("upload_media", "force_https", "auto_paragraph"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValidationError(
                    f"{name} must be a bool, got {type(value).__name__} {value!r}",
                    parameter_name=name,
                    parameter_value=value,
                )
        if self.html_parser not in HTML_PARSERS:
            raise ValidationError(
                f"html_parser must be one of {', '.join(HTML_PARSERS)}, got {self.html_parser!r}",
                parameter_name="html_parser",
                parameter_value=self.html_parser,
            )


@dataclass(frozen=True)
class MediaOptions(CloneFrozenMixin):
    """Settings for the WordPress-compatible media store.

    Parameters
    ----------
    endpoint : str or None
        Base URL of the site whose ``/wp-json/wp/v2/media`` route stores images.
    username : str or None
        User name for basic authentication.
    password : str or None
        Application password for basic authentication.
    timeout : float, default 30.0
        Timeout in seconds for both the download and the upload request.
    max_size_bytes : int, default 20MB
        Largest image accepted from a source URL.
    allowed_hosts : tuple of str or None
        When set, only these source hosts may be fetched.
    require_https : bool, default False
        Refuse to fetch source images over plain HTTP.

    """

    endpoint: str | None = field(default=None, metadata={"help": "Media library site URL"})
    username: str | None = field(default=None, metadata={"help": "Media library user name"})
    password: str | None = field(default=None, metadata={"help": "Media library application password"})
    timeout: float = field(default=DEFAULT_MEDIA_TIMEOUT, metadata={"help": "Network timeout in seconds"})
    max_size_bytes: int = field(default=DEFAULT_MEDIA_MAX_SIZE_BYTES, metadata={"help": "Maximum image size"})
    allowed_hosts: tuple[str, ...] | None = field(default=None, metadata={"help": "Allowed source image hosts"})
    require_https: bool = field(default=DEFAULT_MEDIA_REQUIRE_HTTPS, metadata={"help": "Only fetch HTTPS images"})

    def __post_init__(self) -> None:
        """Validate numeric ranges.

        Raises
        ------
        ValidationError
            If the timeout or size limit is not positive.

        """
        if self.timeout <= 0:
            raise ValidationError(
                f"timeout must be positive, got {self.timeout}", parameter_name="timeout", parameter_value=self.timeout
            )
        if self.max_size_bytes <= 0:
            raise ValidationError(
                f"max_size_bytes must be positive, got {self.max_size_bytes}",
                parameter_name="max_size_bytes",
                parameter_value=self.max_size_bytes,
            )
