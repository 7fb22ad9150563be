#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/media.py
"""Media storage for converted images.

When ``upload_media`` is enabled the image transform hands each source URL
to a :class:`MediaStore`, which copies the image into a media library and
returns the stored asset. Any store works as long as it implements
``upload``; :class:`WordPressMediaStore` talks to the WordPress REST API.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import posixpath
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable
from urllib.parse import unquote, urlparse

import httpx

from html2blocks.constants import DEFAULT_USER_AGENT, ENV_MEDIA_PASSWORD, ENV_USER_AGENT
from html2blocks.exceptions import MediaUploadError, ValidationError
from html2blocks.options import MediaOptions
from html2blocks.utils.network_security import fetch_image_securely

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaAsset:
    """A stored image.

    Parameters
    ----------
    id : Any
        Identifier assigned by the store; echoed into the ``wp-image-{id}``
        class and the block's ``id`` attribute
    url : str
        Location of the stored copy
    metadata : dict
        Store-specific extras (sizes, mime type, ...)

    """

    id: Any
    url: str
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class MediaStore(Protocol):
    """Protocol for services that ingest an image URL and store a copy."""

    def upload(self, source_url: str) -> Optional[MediaAsset]:
        """Store the image at ``source_url``.

        Returns
        -------
        MediaAsset or None
            The stored asset, or None if nothing was stored

        Raises
        ------
        MediaUploadError
            If the image could not be fetched or stored

        """
        ...


def image_filename(source_url: str, content_type: str = "") -> str:
    """Derive an upload filename from an image URL.

    The URL path's basename is used; when it has no extension one is added
    from the content type.

    Examples
    --------
        >>> image_filename("https://example.com/img/cat.png?w=300")
        'cat.png'
        >>> image_filename("https://example.com/render", "image/jpeg")
        'render.jpg'

    """
    name = posixpath.basename(unquote(urlparse(source_url).path)) or "image"
    if not posixpath.splitext(name)[1] and content_type:
        extension = mimetypes.guess_extension(content_type) or ""
        if extension == ".jpe":
            extension = ".jpg"
        name += extension
    return name.replace('"', "")


class WordPressMediaStore:
    """Media store backed by the WordPress REST API media route.

    The source image is downloaded with the same safeguards as any other
    untrusted fetch, then posted as the request body to
    ``{endpoint}/wp-json/wp/v2/media`` using basic authentication with an
    application password.

    Parameters
    ----------
    options : MediaOptions
        Endpoint, credentials and fetch limits
    transport : httpx.BaseTransport, optional
        Transport used for both download and upload, for tests

    """

    MEDIA_ROUTE = "/wp-json/wp/v2/media"

    def __init__(self, options: MediaOptions, transport: httpx.BaseTransport | None = None) -> None:
        """Initialize the store, resolving the password from the environment if unset."""
        if not options.endpoint:
            raise ValidationError("Media store endpoint is required", parameter_name="endpoint")
        self.options = options
        self.transport = transport
        self._password = options.password or os.getenv(ENV_MEDIA_PASSWORD)

    @property
    def media_url(self) -> str:
        """Return the media collection URL."""
        return str(self.options.endpoint).rstrip("/") + self.MEDIA_ROUTE

    def _auth(self) -> httpx.BasicAuth | None:
        if self.options.username and self._password:
            return httpx.BasicAuth(self.options.username, self._password)
        return None

    def upload(self, source_url: str) -> Optional[MediaAsset]:
        """Download ``source_url`` and sideload it into the media library.

        Raises
        ------
        MediaUploadError
            If the download or the upload fails, or the response lacks an id
            or URL

        """
        data, content_type = fetch_image_securely(
            source_url,
            allowed_hosts=self.options.allowed_hosts,
            require_https=self.options.require_https,
            max_size_bytes=self.options.max_size_bytes,
            timeout=self.options.timeout,
            transport=self.transport,
        )
        filename = image_filename(source_url, content_type)

        headers = {
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Type": content_type,
            "User-Agent": os.getenv(ENV_USER_AGENT) or DEFAULT_USER_AGENT,
        }

        try:
            with httpx.Client(timeout=self.options.timeout, transport=self.transport) as client:
                response = client.post(self.media_url, content=data, headers=headers, auth=self._auth())
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise MediaUploadError(
                f"Upload of {filename} to {self.media_url} failed: {e}", source_url=source_url, original_error=e
            ) from e
        except ValueError as e:
            raise MediaUploadError(
                f"Media endpoint returned invalid JSON for {filename}", source_url=source_url, original_error=e
            ) from e

        if not isinstance(payload, dict) or not payload.get("id") or not payload.get("source_url"):
            raise MediaUploadError(
                f"Media endpoint response for {filename} lacks id or source_url", source_url=source_url
            )

        logger.info("Stored %s as attachment %s", source_url, payload["id"])
        return MediaAsset(
            id=payload["id"],
            url=payload["source_url"],
            metadata={
                "mime_type": payload.get("mime_type", content_type),
                "media_details": payload.get("media_details"),
            },
        )


__all__ = ["MediaAsset", "MediaStore", "WordPressMediaStore", "image_filename"]
