"""
LocalMediaStorage — keeps uploads on the server's own disk.

Files are moved into ``MEDIA_ROOT`` under a random name and served from
``MEDIA_BASE_URL``.  Meant for development and single-node deployments.
"""

from __future__ import annotations

import asyncio
import logging
import pathlib
import shutil
import uuid

from media.base import MediaStorage
from utils.errors import MediaUploadError

logger = logging.getLogger(__name__)


class LocalMediaStorage(MediaStorage):
    def __init__(self, media_root: str, base_url: str):
        self._root = pathlib.Path(media_root)
        self._base_url = base_url.rstrip("/")

    @property
    def backend_name(self) -> str:
        return "local"

    async def upload(self, local_path: str) -> str:
        source = pathlib.Path(local_path)
        try:
            if not source.is_file():
                raise MediaUploadError(f"No such file: {local_path}")
            name = f"{uuid.uuid4().hex}{source.suffix.lower()}"
            self._root.mkdir(parents=True, exist_ok=True)
            target = self._root / name
            try:
                await asyncio.to_thread(shutil.copyfile, source, target)
            except OSError as exc:
                raise MediaUploadError(f"Could not store {source.name}: {exc}") from exc
            logger.info("Stored %s as %s", source.name, target)
            return f"{self._base_url}/{name}"
        finally:
            self.discard(local_path)
