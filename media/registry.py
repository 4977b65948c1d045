"""
Media backend selection.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from config.settings import config
from media.base import MediaStorage
from media.cloudinary import CloudinaryStorage
from media.local import LocalMediaStorage

logger = logging.getLogger(__name__)


def build_media_storage(settings) -> MediaStorage:
    """Instantiate the backend named by ``settings.media_backend``."""
    backend = settings.media_backend.lower()
    if backend == "cloudinary":
        storage: MediaStorage = CloudinaryStorage(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            timeout=settings.media_upload_timeout,
        )
    elif backend == "local":
        storage = LocalMediaStorage(settings.media_root, settings.media_base_url)
    else:
        raise ValueError(f"Unknown media backend: {settings.media_backend!r}")

    if not storage.is_configured():
        logger.warning(
            "Media backend %s is not configured — uploads will fail",
            storage.backend_name,
        )
    return storage


@lru_cache(maxsize=1)
def get_media_storage() -> MediaStorage:
    """FastAPI dependency — process-wide media backend."""
    return build_media_storage(config)
