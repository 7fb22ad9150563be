"""Pytest configuration and shared fixtures for the html2blocks test suite."""

from typing import Generator
from unittest.mock import patch

import pytest

from html2blocks import BlockConverter, ConverterOptions
from html2blocks.media import MediaAsset


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


class RecordingMediaStore:
    """Media store double that records every upload request."""

    def __init__(self, asset_id=42, base_url="https://media.example.com/uploads/", fail=False, empty=False):
        self.asset_id = asset_id
        self.base_url = base_url
        self.fail = fail
        self.empty = empty
        self.calls = []

    def upload(self, source_url):
        from html2blocks.exceptions import MediaUploadError

        self.calls.append(source_url)
        if self.fail:
            raise MediaUploadError("service unavailable", source_url=source_url)
        if self.empty:
            return None
        return MediaAsset(id=self.asset_id, url=self.base_url + source_url.rsplit("/", 1)[-1])


@pytest.fixture
def converter() -> BlockConverter:
    """Provide a converter with default options."""
    return BlockConverter()


@pytest.fixture
def plain_converter() -> BlockConverter:
    """Provide a converter that skips automatic paragraphs."""
    return BlockConverter(options=ConverterOptions(auto_paragraph=False))


@pytest.fixture
def media_store() -> RecordingMediaStore:
    """Provide a media store that succeeds with attachment id 42."""
    return RecordingMediaStore()


@pytest.fixture
def public_dns() -> Generator[None, None, None]:
    """Resolve every hostname to a public address without touching DNS."""
    import ipaddress

    with patch(
        "html2blocks.utils.network_security._resolve_hostname_to_ips",
        return_value=[ipaddress.ip_address("93.184.216.34")],
    ):
        yield


@pytest.fixture
def failing_media_store() -> RecordingMediaStore:
    """Provide a media store whose uploads always fail."""
    return RecordingMediaStore(fail=True)


@pytest.fixture
def empty_media_store() -> RecordingMediaStore:
    """Provide a media store that never returns an asset."""
    return RecordingMediaStore(empty=True)
