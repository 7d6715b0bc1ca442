"""Inspection of a local directory tree."""

import asyncio
import logging
import os
from collections.abc import Iterable

from ..analyzer.dispatch import Dispatcher
from ..analyzer.registry import AnalyzerRegistry, default_registry
from ..cache.base import ArtifactCache
from ..core.types import AnalyzerType, ArtifactReference, BlobInfo, ScannerOption
from ..exceptions import BlobStoreError, InspectionCancelledError
from ..utils.canonical import calculate_blob_id, canonicalize
from ..walker import walk_dir

logger = logging.getLogger(__name__)


class LocalArtifact:
    """Directory tree standing in for an image layer or a host filesystem."""

    def __init__(
        self,
        root: str,
        cache: ArtifactCache,
        registry: AnalyzerRegistry,
        disabled_analyzers: Iterable[AnalyzerType | str] = (),
        option: ScannerOption | None = None,
    ) -> None:
        self.root = root
        self.cache = cache
        self.option = option or ScannerOption()
        self.disabled_analyzers = frozenset(str(t) for t in disabled_analyzers)
        self.analyzers = registry.filtered(self.disabled_analyzers, self.option.enabled_groups)

    async def inspect(self, cancel: asyncio.Event | None = None) -> ArtifactReference:
        """Analyze the tree and store the result in the cache.

        Args:
            cancel: Set to stop the inspection; nothing is stored afterwards

        Returns:
            ArtifactReference whose ID is the stored blob ID

        Raises:
            RootNotFoundError: If the root directory cannot be accessed
            FileReadError: If a file under the root cannot be read
            ConsistencyError: If analyzers report conflicting findings
            BlobStoreError: If the cache fails to store the blob
            InspectionCancelledError: If cancel is set before the blob is stored
        """
        logger.info(
            f"Inspecting {self.root} with analyzers: "
            f"{', '.join(str(a.type) for a in self.analyzers) or 'none'}"
        )
        dispatcher = Dispatcher(
            self.analyzers,
            concurrency=self.option.concurrency,
            file_size_limit=self.option.file_size_limit,
        )
        outcome = await dispatcher.run(walk_dir(self.root, self.option), cancel=cancel)

        blob_info = canonicalize(outcome.result, outcome.diff_id)
        blob_id = calculate_blob_id(blob_info)

        if cancel is not None and cancel.is_set():
            raise InspectionCancelledError("inspection cancelled before storing the blob")

        await self._store(blob_id, blob_info)
        logger.info(
            f"Inspected {outcome.files} files under {self.root}: "
            f"diff ID {outcome.diff_id}, blob ID {blob_id}"
        )
        return ArtifactReference(
            name=self.option.artifact_name,
            id=blob_id,
            blob_ids=(blob_id,),
        )

    async def _store(self, blob_id: str, blob_info: BlobInfo) -> None:
        try:
            await self.cache.put_blob(blob_id, blob_info)
        except Exception as e:
            raise BlobStoreError(f"failed to store blob ({blob_id}): {e}") from e


def new_artifact(
    root_path: str | os.PathLike,
    cache: ArtifactCache,
    disabled_analyzers: Iterable[AnalyzerType | str] = (),
    option: ScannerOption | None = None,
    registry: AnalyzerRegistry | None = None,
) -> LocalArtifact:
    """Create an inspector for a local directory.

    Existence of the directory is checked when inspecting, not here.

    Args:
        root_path: Directory to inspect
        cache: Cache receiving the blob record
        disabled_analyzers: Analyzer types to leave out
        option: Scanner configuration
        registry: Analyzers to use (default: every built-in analyzer)

    Returns:
        LocalArtifact ready to inspect

    Raises:
        ValueError: If root_path is empty or not a valid path
    """
    root = os.fspath(root_path)
    if not root:
        raise ValueError("root path must not be empty")
    if "\0" in root:
        raise ValueError(f"invalid root path: {root!r}")
    return LocalArtifact(
        root=root,
        cache=cache,
        registry=registry if registry is not None else default_registry(),
        disabled_analyzers=disabled_analyzers,
        option=option,
    )
