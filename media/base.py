"""
MediaStorage — abstract interface for media backends.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class MediaStorage(ABC):
    """Abstract base for all media backends."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Unique slug: 'local', 'cloudinary'."""
        ...

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def upload(self, local_path: str) -> str:
        """
        Store the file at ``local_path`` and return its public URL.

        Raises ``MediaUploadError`` when the file cannot be stored.  The
        local file is removed whether or not the upload succeeded.
        """
        ...

    @staticmethod
    def discard(local_path: str) -> None:
        """Remove a temp file, ignoring files that are already gone."""
        try:
            os.remove(local_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove temp file %s: %s", local_path, exc)
