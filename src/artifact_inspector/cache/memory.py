"""In-memory artifact cache."""

import asyncio
import logging

from ..core.types import BlobInfo
from .base import ArtifactCache, check_blob_id

logger = logging.getLogger(__name__)


class MemoryCache(ArtifactCache):
    """Artifact cache kept in a dictionary."""

    def __init__(self) -> None:
        self._blobs: dict[str, BlobInfo] = {}
        self._lock = asyncio.Lock()

    async def put_blob(self, blob_id: str, blob_info: BlobInfo) -> None:
        check_blob_id(blob_id)
        async with self._lock:
            if blob_id in self._blobs:
                logger.debug(f"Blob {blob_id} already cached")
                return
            self._blobs[blob_id] = blob_info

    async def get_blob(self, blob_id: str) -> BlobInfo | None:
        check_blob_id(blob_id)
        return self._blobs.get(blob_id)

    def __contains__(self, blob_id: str) -> bool:
        return blob_id in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)

    async def clear(self) -> None:
        async with self._lock:
            self._blobs.clear()
