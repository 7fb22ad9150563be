"""Network security utilities for fetching remote images.

Source image URLs come from untrusted content, so every fetch made on their
behalf is validated before a request leaves the process:

- only ``http``/``https`` schemes, optionally HTTPS only
- optional hostname / CIDR allowlist
- DNS resolution with private, loopback and reserved ranges blocked
- redirect chains re-validated hop by hop
- streamed downloads capped by size and checked for an ``image/*`` type

Functions
---------
- validate_url_security: URL validation before any request
- create_secure_http_client: httpx client enforcing the validation on redirects
- fetch_image_securely: bounded image download
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/utils/network_security.py

from __future__ import annotations

import ipaddress
import logging
import os
import socket
from email.message import Message
from typing import Any, Sequence
from urllib.parse import urlparse

import httpx

from html2blocks.constants import DEFAULT_USER_AGENT, ENV_DISABLE_NETWORK, ENV_USER_AGENT
from html2blocks.exceptions import NetworkSecurityError

logger = logging.getLogger(__name__)

_EXTRA_BLOCKED_V4 = tuple(
    ipaddress.IPv4Network(net)
    for net in (
        "0.0.0.0/8",
        "100.64.0.0/10",
        "192.0.0.0/24",
        "192.0.2.0/24",
        "198.18.0.0/15",
        "198.51.100.0/24",
        "203.0.113.0/24",
        "240.0.0.0/4",
    )
)
_EXTRA_BLOCKED_V6 = tuple(
    ipaddress.IPv6Network(net) for net in ("::ffff:0:0/96", "2001:db8::/32", "2001::/32", "2002::/16")
)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def _is_private_or_reserved_ip(ip: IPAddress) -> bool:
    """Check if an IP address is private, reserved, or otherwise restricted."""
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved or ip.is_multicast:
        return True
    if isinstance(ip, ipaddress.IPv4Address):
        return any(ip in net for net in _EXTRA_BLOCKED_V4)
    return any(ip in net for net in _EXTRA_BLOCKED_V6)


def _resolve_hostname_to_ips(hostname: str) -> list[IPAddress]:
    """Resolve hostname to all associated IP addresses.

    Raises
    ------
    NetworkSecurityError
        If hostname resolution fails or yields no usable address

    """
    try:
        addr_infos = socket.getaddrinfo(hostname, None)
    except (socket.gaierror, UnicodeError) as e:
        raise NetworkSecurityError(f"Failed to resolve hostname {hostname}: {e}", original_error=e) from e

    ips: list[IPAddress] = []
    for addr_info in addr_infos:
        try:
            ips.append(ipaddress.ip_address(addr_info[4][0]))
        except ValueError:
            continue

    if not ips:
        raise NetworkSecurityError(f"No valid IP addresses resolved for hostname: {hostname}")
    return ips


def _normalize_hostname(hostname: str) -> str:
    """Normalize a hostname for case-insensitive comparison.

    Examples
    --------
    >>> _normalize_hostname("Example.com")
    'example.com'

    """
    try:
        return hostname.encode("idna").decode("ascii").lower()
    except UnicodeError:
        return hostname.lower()


def _host_allowed(hostname: str, ips: Sequence[IPAddress], allowed_hosts: Sequence[str] | None) -> bool:
    """Check a hostname and its addresses against an allowlist of names and CIDR blocks."""
    if allowed_hosts is None:
        return True

    for entry in allowed_hosts:
        try:
            network = ipaddress.ip_network(entry, strict=False)
        except ValueError:
            if _normalize_hostname(entry) == hostname:
                return True
            continue
        if any(ip in network for ip in ips):
            return True

    return False


def _parse_content_type(content_type: str) -> str:
    """Parse a content-type header down to its lowercased MIME type.

    Examples
    --------
    >>> _parse_content_type("image/png; charset=utf-8")
    'image/png'

    """
    if not content_type:
        return ""
    msg = Message()
    msg["content-type"] = content_type
    return msg.get_content_type().lower()


def is_network_disabled() -> bool:
    """Check if network access is globally disabled via environment variable."""
    return os.getenv(ENV_DISABLE_NETWORK, "").lower() in ("true", "1", "yes", "on")


def validate_url_security(
    url: str,
    allowed_hosts: Sequence[str] | None = None,
    require_https: bool = False,
) -> None:
    """Validate a URL before making an HTTP request to it.

    Parameters
    ----------
    url : str
        URL to validate
    allowed_hosts : sequence of str, optional
        Allowed hostnames or CIDR blocks. If None, all public hosts are allowed
    require_https : bool, default False
        If True, only HTTPS URLs are allowed

    Raises
    ------
    NetworkSecurityError
        If URL fails security validation

    """
    try:
        parsed = urlparse(url)
        raw_hostname = parsed.hostname
    except ValueError as e:
        raise NetworkSecurityError(f"Malformed URL: {e}", source_url=url, original_error=e) from e

    if parsed.scheme not in ("http", "https"):
        raise NetworkSecurityError(f"Unsupported URL scheme: {parsed.scheme or '(none)'}", source_url=url)

    if require_https and parsed.scheme != "https":
        raise NetworkSecurityError(f"HTTPS required but got: {parsed.scheme}", source_url=url)

    if not raw_hostname:
        raise NetworkSecurityError("URL missing hostname", source_url=url)

    hostname = _normalize_hostname(raw_hostname)
    resolved_ips = _resolve_hostname_to_ips(hostname)

    if not _host_allowed(hostname, resolved_ips, allowed_hosts):
        raise NetworkSecurityError(f"Hostname not in allowlist: {hostname}", source_url=url)

    for ip in resolved_ips:
        if _is_private_or_reserved_ip(ip):
            raise NetworkSecurityError(
                f"Access to private/reserved IP address blocked: {ip} (hostname: {hostname})", source_url=url
            )

    logger.debug("URL security validation passed for: %s", url)


def create_secure_http_client(
    timeout: float = 30.0,
    max_redirects: int = 5,
    allowed_hosts: Sequence[str] | None = None,
    require_https: bool = False,
    user_agent: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an httpx client that validates every request and redirect.

    Parameters
    ----------
    timeout : float, default 30.0
        Request timeout in seconds
    max_redirects : int, default 5
        Maximum number of redirects to follow
    allowed_hosts : sequence of str, optional
        Allowed hostnames or CIDR blocks
    require_https : bool, default False
        If True, only HTTPS URLs are allowed
    user_agent : str, optional
        User-Agent header; falls back to ``HTML2BLOCKS_USER_AGENT`` then the default
    transport : httpx.BaseTransport, optional
        Transport override, used by tests

    Returns
    -------
    httpx.Client
        Configured HTTP client

    """

    def validate_request_url(request: httpx.Request) -> None:
        validate_url_security(str(request.url), allowed_hosts=allowed_hosts, require_https=require_https)

    def validate_response_redirects(response: httpx.Response) -> None:
        if len(response.history) > max_redirects:
            raise NetworkSecurityError(f"Too many redirects: {len(response.history)} > {max_redirects}")

    effective_user_agent = user_agent or os.getenv(ENV_USER_AGENT) or DEFAULT_USER_AGENT
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        event_hooks={"request": [validate_request_url], "response": [validate_response_redirects]},
        headers={"User-Agent": effective_user_agent},
        transport=transport,
    )


def fetch_image_securely(
    url: str,
    allowed_hosts: Sequence[str] | None = None,
    require_https: bool = False,
    max_size_bytes: int = 20 * 1024 * 1024,
    timeout: float = 30.0,
    user_agent: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> tuple[bytes, str]:
    """Download an image with URL validation and a streamed size cap.

    Parameters
    ----------
    url : str
        Image URL
    allowed_hosts : sequence of str, optional
        Allowed hostnames or CIDR blocks
    require_https : bool, default False
        If True, only HTTPS URLs are allowed
    max_size_bytes : int, default 20MB
        Maximum allowed response size in bytes
    timeout : float, default 30.0
        Request timeout in seconds
    user_agent : str, optional
        User-Agent header
    transport : httpx.BaseTransport, optional
        Transport override, used by tests

    Returns
    -------
    tuple of (bytes, str)
        Image data and its MIME type

    Raises
    ------
    NetworkSecurityError
        If the URL fails validation, the request fails, or the response is
        not an image within the size limit

    """
    if is_network_disabled():
        raise NetworkSecurityError(
            f"Network access is globally disabled via {ENV_DISABLE_NETWORK} environment variable", source_url=url
        )

    validate_url_security(url, allowed_hosts=allowed_hosts, require_https=require_https)

    try:
        with create_secure_http_client(
            timeout=timeout,
            allowed_hosts=allowed_hosts,
            require_https=require_https,
            user_agent=user_agent,
            transport=transport,
        ) as client:
            with client.stream("GET", url) as response:
                response.raise_for_status()

                content_type = _parse_content_type(response.headers.get("content-type", ""))
                if not content_type.startswith("image/"):
                    raise NetworkSecurityError(f"Invalid content type: {content_type or '(none)'}", source_url=url)

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_size_bytes:
                    raise NetworkSecurityError(
                        f"Content-Length too large: {declared} bytes (max: {max_size_bytes})", source_url=url
                    )

                chunks: list[bytes] = []
                total_size = 0
                for chunk in response.iter_bytes(chunk_size=8192):
                    total_size += len(chunk)
                    if total_size > max_size_bytes:
                        raise NetworkSecurityError(
                            f"Response too large: exceeded {max_size_bytes} bytes during streaming", source_url=url
                        )
                    chunks.append(chunk)

                if total_size == 0:
                    raise NetworkSecurityError("Empty response received", source_url=url)

                logger.debug("Fetched %d bytes of %s from %s", total_size, content_type, url)
                return b"".join(chunks), content_type

    except NetworkSecurityError:
        raise
    except httpx.HTTPError as e:
        raise NetworkSecurityError(f"HTTP request failed for {url}: {e}", source_url=url, original_error=e) from e


__all__ = [
    "validate_url_security",
    "create_secure_http_client",
    "fetch_image_securely",
    "is_network_disabled",
]
