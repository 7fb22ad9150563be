#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the media store and upload filename helper."""

import base64
import json

import httpx
import pytest

from html2blocks.constants import ENV_MEDIA_PASSWORD
from html2blocks.exceptions import MediaUploadError, NetworkSecurityError, ValidationError
from html2blocks.media import MediaAsset, MediaStore, WordPressMediaStore, image_filename
from html2blocks.options import MediaOptions

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake image data"


class FakeMediaSite:
    """Mock transport serving source images and a media route."""

    def __init__(self, upload_status=200, upload_body=None, image_type="image/png"):
        self.upload_status = upload_status
        self.upload_body = upload_body
        self.image_type = image_type
        self.uploads = []

    def __call__(self, request):
        if request.method == "GET":
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": self.image_type})

        self.uploads.append(request)
        if isinstance(self.upload_body, bytes):
            return httpx.Response(self.upload_status, content=self.upload_body)
        body = self.upload_body if self.upload_body is not None else {
            "id": 314,
            "source_url": "https://blog.example.com/wp-content/uploads/cat.png",
            "mime_type": "image/png",
        }
        return httpx.Response(self.upload_status, json=body)

    @property
    def transport(self):
        return httpx.MockTransport(self)


def _store(site, **overrides):
    settings = {"endpoint": "https://blog.example.com/", "username": "editor", "password": "app pass"}
    settings.update(overrides)
    return WordPressMediaStore(MediaOptions(**settings), transport=site.transport)


@pytest.mark.unit
class TestImageFilename:
    """Tests for image_filename."""

    def test_basename_from_path(self):
        assert image_filename("https://example.com/img/cat.png?w=300#top") == "cat.png"

    def test_percent_decoded(self):
        assert image_filename("https://example.com/my%20cat.png") == "my cat.png"

    def test_extension_from_content_type(self):
        assert image_filename("https://example.com/render", "image/png") == "render.png"
        assert image_filename("https://example.com/render", "image/jpeg") == "render.jpg"

    def test_fallback_name(self):
        assert image_filename("https://example.com/") == "image"

    def test_quotes_removed(self):
        assert image_filename('https://example.com/a"b.png') == "ab.png"


@pytest.mark.unit
class TestWordPressMediaStore:
    """Tests for WordPressMediaStore."""

    def test_requires_endpoint(self):
        with pytest.raises(ValidationError):
            WordPressMediaStore(MediaOptions())

    def test_satisfies_protocol(self):
        assert isinstance(WordPressMediaStore(MediaOptions(endpoint="https://blog.example.com")), MediaStore)

    def test_media_url(self):
        store = WordPressMediaStore(MediaOptions(endpoint="https://blog.example.com/"))
        assert store.media_url == "https://blog.example.com/wp-json/wp/v2/media"

    def test_upload_success(self, public_dns):
        site = FakeMediaSite()
        asset = _store(site).upload("https://images.example.com/photos/cat.png")

        assert asset == MediaAsset(
            id=314,
            url="https://blog.example.com/wp-content/uploads/cat.png",
            metadata={"mime_type": "image/png", "media_details": None},
        )

        request = site.uploads[0]
        assert str(request.url) == "https://blog.example.com/wp-json/wp/v2/media"
        assert request.headers["content-disposition"] == 'attachment; filename="cat.png"'
        assert request.headers["content-type"] == "image/png"
        assert request.content == PNG_BYTES

    def test_basic_auth_header(self, public_dns):
        site = FakeMediaSite()
        _store(site).upload("https://images.example.com/cat.png")

        expected = "Basic " + base64.b64encode(b"editor:app pass").decode("ascii")
        assert site.uploads[0].headers["authorization"] == expected

    def test_password_from_environment(self, public_dns, monkeypatch):
        monkeypatch.setenv(ENV_MEDIA_PASSWORD, "from env")
        site = FakeMediaSite()
        _store(site, password=None).upload("https://images.example.com/cat.png")

        expected = "Basic " + base64.b64encode(b"editor:from env").decode("ascii")
        assert site.uploads[0].headers["authorization"] == expected

    def test_no_credentials_no_auth_header(self, public_dns, monkeypatch):
        monkeypatch.delenv(ENV_MEDIA_PASSWORD, raising=False)
        site = FakeMediaSite()
        _store(site, username=None, password=None).upload("https://images.example.com/cat.png")

        assert "authorization" not in site.uploads[0].headers

    def test_server_error(self, public_dns):
        site = FakeMediaSite(upload_status=500, upload_body={"code": "rest_upload_error"})

        with pytest.raises(MediaUploadError, match="failed") as exc_info:
            _store(site).upload("https://images.example.com/cat.png")
        assert exc_info.value.source_url == "https://images.example.com/cat.png"

    def test_invalid_json(self, public_dns):
        site = FakeMediaSite(upload_body=b"<html>not json</html>")

        with pytest.raises(MediaUploadError, match="invalid JSON"):
            _store(site).upload("https://images.example.com/cat.png")

    @pytest.mark.parametrize("body", [{"source_url": "https://blog.example.com/a.png"}, {"id": 5}, ["id", 5]])
    def test_incomplete_response(self, public_dns, body):
        site = FakeMediaSite(upload_body=body)

        with pytest.raises(MediaUploadError, match="lacks id or source_url"):
            _store(site).upload("https://images.example.com/cat.png")

    def test_source_not_an_image(self, public_dns):
        site = FakeMediaSite(image_type="text/html")

        with pytest.raises(NetworkSecurityError):
            _store(site).upload("https://images.example.com/cat.png")
        assert site.uploads == []

    def test_source_host_not_allowed(self, public_dns):
        site = FakeMediaSite()

        with pytest.raises(NetworkSecurityError, match="allowlist"):
            _store(site, allowed_hosts=("cdn.example.com",)).upload("https://images.example.com/cat.png")

    def test_metadata_from_response(self, public_dns):
        site = FakeMediaSite(upload_body={"id": 7, "source_url": "https://b/x.png", "media_details": {"width": 10}})
        asset = _store(site).upload("https://images.example.com/x.png")

        assert json.dumps(asset.metadata) == '{"mime_type": "image/png", "media_details": {"width": 10}}'
