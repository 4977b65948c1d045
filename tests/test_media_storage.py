"""
Tests for the media backends (local disk and Cloudinary over a mock transport).
"""

import httpx
import pytest

from config.settings import Settings
from media.cloudinary import CloudinaryStorage, sign_params
from media.local import LocalMediaStorage
from media.registry import build_media_storage
from utils.errors import MediaUploadError


def _temp_file(tmp_path, name="avatar.PNG", content=b"image-bytes"):
    path = tmp_path / "temp" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


class TestLocalMediaStorage:
    @pytest.mark.asyncio
    async def test_upload_moves_file_and_returns_url(self, tmp_path):
        source = _temp_file(tmp_path)
        storage = LocalMediaStorage(str(tmp_path / "media"), "http://cdn.test/media/")

        url = await storage.upload(str(source))

        assert url.startswith("http://cdn.test/media/")
        assert url.endswith(".png")
        stored = tmp_path / "media" / url.rsplit("/", 1)[1]
        assert stored.read_bytes() == b"image-bytes"
        assert not source.exists()

    @pytest.mark.asyncio
    async def test_missing_file_fails(self, tmp_path):
        storage = LocalMediaStorage(str(tmp_path / "media"), "http://cdn.test/media")
        with pytest.raises(MediaUploadError):
            await storage.upload(str(tmp_path / "nope.png"))


class TestCloudinaryStorage:
    def test_signature_is_sorted_sha1(self):
        sig = sign_params({"timestamp": "1700000000", "folder": "avatars"}, "secret")
        assert len(sig) == 40
        assert sig == sign_params({"folder": "avatars", "timestamp": "1700000000"}, "secret")

    @pytest.mark.asyncio
    async def test_upload_returns_secure_url(self, tmp_path):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(
                200, json={"url": "http://res.test/a.png", "secure_url": "https://res.test/a.png"}
            )

        source = _temp_file(tmp_path)
        storage = CloudinaryStorage(
            "demo", "key", "secret", transport=httpx.MockTransport(handler)
        )
        url = await storage.upload(str(source))

        assert url == "https://res.test/a.png"
        assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/auto/upload"
        assert b"signature" in seen["body"]
        assert b"api_key" in seen["body"]
        assert b"image-bytes" in seen["body"]
        assert not source.exists()

    @pytest.mark.asyncio
    async def test_http_error_fails_and_removes_file(self, tmp_path):
        source = _temp_file(tmp_path)
        storage = CloudinaryStorage(
            "demo",
            "key",
            "secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(401, json={})),
        )
        with pytest.raises(MediaUploadError):
            await storage.upload(str(source))
        assert not source.exists()

    @pytest.mark.asyncio
    async def test_response_without_url_fails(self, tmp_path):
        source = _temp_file(tmp_path)
        storage = CloudinaryStorage(
            "demo",
            "key",
            "secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        with pytest.raises(MediaUploadError):
            await storage.upload(str(source))

    def test_is_configured(self):
        assert CloudinaryStorage("demo", "key", "secret").is_configured()
        assert not CloudinaryStorage("", "key", "secret").is_configured()


class TestRegistry:
    def test_builds_local_backend(self, tmp_path):
        storage = build_media_storage(Settings(media_backend="local", media_root=str(tmp_path)))
        assert storage.backend_name == "local"

    def test_builds_cloudinary_backend(self):
        storage = build_media_storage(Settings(media_backend="Cloudinary"))
        assert storage.backend_name == "cloudinary"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_media_storage(Settings(media_backend="s3"))
