"""
CloudinaryStorage — uploads images to Cloudinary's REST API.

Uses a signed upload (``resource_type=auto``) so no upload preset has to
be configured on the Cloudinary side.  Credentials come from
``CLOUDINARY_CLOUD_NAME`` / ``CLOUDINARY_API_KEY`` / ``CLOUDINARY_API_SECRET``.
"""

from __future__ import annotations

import hashlib
import logging
import pathlib
import time
from typing import Dict

import httpx

from media.base import MediaStorage
from utils.errors import MediaUploadError

logger = logging.getLogger(__name__)

_CLOUDINARY_API = "https://api.cloudinary.com/v1_1"


def sign_params(params: Dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: SHA-1 of the sorted ``k=v`` pairs + secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryStorage(MediaStorage):
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._timeout = timeout
        self._transport = transport

    @property
    def backend_name(self) -> str:
        return "cloudinary"

    def is_configured(self) -> bool:
        return bool(self._cloud_name and self._api_key and self._api_secret)

    def _upload_url(self) -> str:
        return f"{_CLOUDINARY_API}/{self._cloud_name}/auto/upload"

    async def upload(self, local_path: str) -> str:
        path = pathlib.Path(local_path)
        try:
            if not path.is_file():
                raise MediaUploadError(f"No such file: {local_path}")

            params = {"timestamp": str(int(time.time()))}
            data = {
                **params,
                "api_key": self._api_key,
                "signature": sign_params(params, self._api_secret),
            }
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    with path.open("rb") as fh:
                        resp = await client.post(
                            self._upload_url(),
                            data=data,
                            files={"file": (path.name, fh)},
                        )
                    resp.raise_for_status()
                    body = resp.json()
            except httpx.HTTPError as exc:
                logger.error("Cloudinary upload of %s failed: %s", path.name, exc)
                raise MediaUploadError(f"Cloudinary upload failed: {exc}") from exc

            url = body.get("secure_url") or body.get("url")
            if not url:
                raise MediaUploadError("Cloudinary response carried no URL")
            logger.info("Uploaded %s to Cloudinary: %s", path.name, url)
            return url
        finally:
            self.discard(local_path)
