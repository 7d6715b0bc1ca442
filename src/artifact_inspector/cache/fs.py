"""On-disk artifact cache."""

import contextlib
import json
import logging
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from ..core.types import BlobInfo
from ..exceptions import CacheError
from ..utils.canonical import to_canonical_json
from ..utils.digest import split_digest, verify_digest
from .base import ArtifactCache, check_blob_id

logger = logging.getLogger(__name__)


class FSCache(ArtifactCache):
    """Artifact cache storing one JSON file per blob.

    Blobs live at ``<cache_dir>/blob/<algorithm>/<hex>.json``. A blob is
    written to a temporary file in the same directory and renamed into
    place, so readers never see a partial file and concurrent writers of the
    same blob simply replace it with identical content.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir)
        self.blob_dir = self.cache_dir / "blob"

    def blob_path(self, blob_id: str) -> Path:
        """Location of a blob on disk.

        Raises:
            CacheError: If the blob ID is malformed
        """
        check_blob_id(blob_id)
        algorithm, hex_digest = split_digest(blob_id)
        return self.blob_dir / algorithm / f"{hex_digest}.json"

    async def put_blob(self, blob_id: str, blob_info: BlobInfo) -> None:
        path = self.blob_path(blob_id)
        try:
            if await aiofiles.os.path.exists(path):
                logger.debug(f"Blob {blob_id} already cached at {path}")
                return
            await aiofiles.os.makedirs(path.parent, exist_ok=True)

            tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
            try:
                async with aiofiles.open(tmp_path, "wb") as f:
                    await f.write(to_canonical_json(blob_info))
                    await f.flush()
                await aiofiles.os.replace(tmp_path, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    await aiofiles.os.remove(tmp_path)
                raise
        except OSError as e:
            raise CacheError(f"failed to write blob {blob_id}: {e}") from e
        logger.debug(f"Stored blob {blob_id} at {path}")

    async def get_blob(self, blob_id: str) -> BlobInfo | None:
        path = self.blob_path(blob_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheError(f"failed to read blob {blob_id}: {e}") from e

        if not verify_digest(data, blob_id):
            raise CacheError(f"corrupt blob {blob_id} at {path}: content does not match its ID")
        try:
            return BlobInfo.from_dict(json.loads(data))
        except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError) as e:
            raise CacheError(f"corrupt blob {blob_id} at {path}: {e}") from e

    async def clear(self) -> None:
        """Remove every stored blob."""
        if not await aiofiles.os.path.isdir(self.blob_dir):
            return
        for algorithm_dir in await aiofiles.os.listdir(self.blob_dir):
            directory = self.blob_dir / algorithm_dir
            for name in await aiofiles.os.listdir(directory):
                await aiofiles.os.remove(directory / name)
            await aiofiles.os.rmdir(directory)
