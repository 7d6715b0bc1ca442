"""Artifact cache interface."""

from abc import ABC, abstractmethod

from ..core.types import BlobInfo
from ..exceptions import CacheError
from ..utils.digest import validate_digest


def check_blob_id(blob_id: str) -> None:
    """Reject blob IDs that are not "algorithm:hex" digests.

    Raises:
        CacheError: If the blob ID is malformed
    """
    if not validate_digest(blob_id):
        raise CacheError(f"invalid blob ID: {blob_id!r}")


class ArtifactCache(ABC):
    """Content-addressed store for blob records.

    Implementations must make ``put_blob`` a successful no-op when the blob
    already exists, and must never leave a partially written blob behind.
    """

    @abstractmethod
    async def put_blob(self, blob_id: str, blob_info: BlobInfo) -> None:
        """Store a blob record under its ID.

        Raises:
            CacheError: If the record cannot be stored
        """
        raise NotImplementedError

    @abstractmethod
    async def get_blob(self, blob_id: str) -> BlobInfo | None:
        """Return the stored record, or None if the blob is unknown."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release resources held by the cache."""
        return None

    async def __aenter__(self) -> "ArtifactCache":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
