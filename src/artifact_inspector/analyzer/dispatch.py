"""Dispatch walked files to analyzers and aggregate their findings.

A single producer walks the tree, feeds every file into the diff stream and
schedules matched files on a bounded set of worker tasks. Workers post
findings to a queue drained by one merge loop, the only writer of the
composite result.
"""

import asyncio
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from ..core.types import GROUP_ORDER
from ..exceptions import AnalyzerError, FileReadError, InspectionCancelledError
from ..utils.diff import DiffStream
from ..walker import FileEntry, format_os_error
from .base import FINDING_TYPES, AnalysisTarget, Analyzer
from .registry import by_group
from .result import CompositeResult

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_DONE = object()


@dataclass
class DispatchOutcome:
    """Merged findings and diff ID of one walk."""

    result: CompositeResult
    diff_id: str
    files: int
    analyzed_files: int


def _check_findings(findings: Any) -> list:
    if findings is None:
        return []
    if not isinstance(findings, (list, tuple)):
        raise TypeError(f"expected a list of findings, got {type(findings).__name__}")
    for finding in findings:
        if not isinstance(finding, FINDING_TYPES):
            raise TypeError(f"unknown finding type {type(finding).__name__}")
    return list(findings)


class Dispatcher:
    """Run analyzers over walked files.

    Args:
        analyzers: Active analyzers; they run in group order, OS analyzers first
        concurrency: Maximum number of files analyzed at the same time
        file_size_limit: Files larger than this are hashed but not analyzed
        chunk_size: Read size used while hashing
    """

    def __init__(
        self,
        analyzers: Iterable[Analyzer],
        concurrency: int = 5,
        file_size_limit: int | None = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        grouped = by_group(analyzers)
        self.analyzers = tuple(a for group in GROUP_ORDER for a in grouped.get(group, ()))
        self.concurrency = concurrency
        self.file_size_limit = file_size_limit
        self.chunk_size = chunk_size

    def matching(self, entry: FileEntry) -> tuple[Analyzer, ...]:
        """Analyzers whose match predicate accepts the entry."""
        if self.file_size_limit is not None and entry.size > self.file_size_limit:
            return ()
        return tuple(a for a in self.analyzers if a.matches(entry.path))

    async def run(
        self,
        entries: Iterable[FileEntry],
        cancel: asyncio.Event | None = None,
    ) -> DispatchOutcome:
        """Hash and analyze every walked file.

        Args:
            entries: Walked files, in walk order
            cancel: Set to stop dispatching new files

        Returns:
            DispatchOutcome with the merged result and the diff ID

        Raises:
            RootNotFoundError: If the walk root cannot be accessed
            FileReadError: If a walked file cannot be read
            ConsistencyError: If analyzers report conflicting findings
            InspectionCancelledError: If cancel was set before the walk ended
        """
        loop = asyncio.get_running_loop()
        result = CompositeResult()
        diff = DiffStream()
        queue: asyncio.Queue = asyncio.Queue()
        semaphore = asyncio.Semaphore(self.concurrency)
        workers: set[asyncio.Task] = set()
        failures: list[BaseException] = []
        consumer = asyncio.create_task(self._merge_loop(queue, result))
        iterator: Iterator[FileEntry] = iter(entries)
        files = 0
        analyzed = 0

        def on_worker_done(task: asyncio.Task) -> None:
            workers.discard(task)
            if not task.cancelled() and task.exception() is not None:
                failures.append(task.exception())

        try:
            while True:
                if cancel is not None and cancel.is_set():
                    logger.info(
                        f"Inspection cancelled after {files} files, waiting for in-flight analyses"
                    )
                    if workers:
                        await asyncio.wait(set(workers))
                    raise InspectionCancelledError(f"inspection cancelled after {files} files")
                if failures:
                    raise failures[0]
                if consumer.done():
                    # the merge loop only stops early on an error
                    consumer.result()

                # Directory listing blocks, run it in thread pool
                entry = await loop.run_in_executor(None, next, iterator, None)
                if entry is None:
                    break
                files += 1
                await self._hash_entry(diff, entry)

                analyzers = self.matching(entry)
                if not analyzers:
                    continue
                await semaphore.acquire()
                if cancel is not None and cancel.is_set():
                    # set while waiting for a free worker
                    semaphore.release()
                    continue
                analyzed += 1
                task = asyncio.create_task(self._analyze_file(entry, analyzers, queue, semaphore))
                workers.add(task)
                task.add_done_callback(on_worker_done)

            if workers:
                await asyncio.gather(*workers)
            if failures:
                raise failures[0]
            await queue.put(_DONE)
            await consumer
        finally:
            if consumer.done() and not consumer.cancelled() and consumer.exception() is not None:
                logger.debug(f"Merge loop stopped with an error: {consumer.exception()}")
            pending = [t for t in (*workers, consumer) if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        logger.debug(
            f"Dispatched {files} files, {analyzed} analyzed, "
            f"{len(result.errors)} analyzer errors"
        )
        return DispatchOutcome(
            result=result,
            diff_id=diff.digest(),
            files=files,
            analyzed_files=analyzed,
        )

    async def _hash_entry(self, diff: DiffStream, entry: FileEntry) -> None:
        """Feed one file into the diff stream."""
        diff.add_member(entry.path, entry.mode, entry.size)
        try:
            async with entry.open() as f:
                while True:
                    chunk = await f.read(self.chunk_size)
                    if not chunk:
                        break
                    diff.update(chunk)
            diff.end_member()
        except OSError as e:
            raise FileReadError(format_os_error("read", entry.path, e)) from e
        except ValueError as e:
            # size differs from the one recorded by the walker
            raise FileReadError(f"read {entry.path}: {e}") from e

    async def _analyze_file(
        self,
        entry: FileEntry,
        analyzers: tuple[Analyzer, ...],
        queue: asyncio.Queue,
        semaphore: asyncio.Semaphore,
    ) -> None:
        """Read one file and run every matching analyzer on it."""
        loop = asyncio.get_running_loop()
        try:
            try:
                async with entry.open() as f:
                    content = await f.read()
            except FileNotFoundError:
                logger.warning(f"{entry.path} disappeared before it could be analyzed")
                return
            except OSError as e:
                raise FileReadError(format_os_error("read", entry.path, e)) from e
            if len(content) != entry.size:
                raise FileReadError(
                    f"read {entry.path}: expected {entry.size} bytes, got {len(content)}"
                )

            target = AnalysisTarget(file_path=entry.path, content=content)
            for analyzer in analyzers:
                analyzer_type = str(analyzer.type)
                try:
                    findings = await loop.run_in_executor(None, analyzer.analyze, target)
                    findings = _check_findings(findings)
                except Exception as e:
                    error = AnalyzerError(analyzer_type, entry.path, e)
                    logger.warning(str(error))
                    await queue.put(error)
                    continue
                if findings:
                    await queue.put((analyzer_type, findings))
        finally:
            semaphore.release()

    @staticmethod
    async def _merge_loop(queue: asyncio.Queue, result: CompositeResult) -> None:
        while True:
            item = await queue.get()
            if item is _DONE:
                return
            if isinstance(item, AnalyzerError):
                result.add_error(item)
                continue
            analyzer_type, findings = item
            result.merge(analyzer_type, findings)
