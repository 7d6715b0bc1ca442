"""Test helpers: filesystem fixtures, a recording cache and custom analyzers."""

import time
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles

from artifact_inspector.analyzer.base import AnalysisTarget, Analyzer
from artifact_inspector.cache.base import ArtifactCache
from artifact_inspector.core.types import OS, AnalyzerGroup, BlobInfo, OSFinding
from artifact_inspector.walker import FileEntry

ALPINE_INSTALLED = """C:Q1ZzH4Lh5RaUoK2CQWWHS3N5WB0yQ=
P:musl
V:1.1.24-r2
A:x86_64
S:377089
I:614400
T:the musl c library (libc) implementation
U:https://musl.libc.org/
L:MIT
o:musl
m:Timo Teräs <timo.teras@iki.fi>
t:1584545282
c:d5b5f4dfd4a7e7b3e8c2ab6e96b10ad2d3d5d7f0
p:so:libc.musl-x86_64.so.1=1
F:lib
R:libc.musl-x86_64.so.1
a:0:0:777
Z:Q17yJ3JFNypA4mxhJJr0ou6CzsJVI=
R:ld-musl-x86_64.so.1
a:0:0:755
Z:Q1+wTnmsS5Dq6zPIjsW0U6OA1LLiw=

"""

ALPINE_FILES = {
    "etc/alpine-release": "3.11.6\n",
    "lib/apk/db/installed": ALPINE_INSTALLED,
}


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create files under root from a {relative path: content} mapping."""
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


class RecordingCache(ArtifactCache):
    """Cache double recording every put_blob call."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.put_calls: list[tuple[str, BlobInfo]] = []
        self.blobs: dict[str, BlobInfo] = {}

    async def put_blob(self, blob_id: str, blob_info: BlobInfo) -> None:
        self.put_calls.append((blob_id, blob_info))
        if self.error is not None:
            raise self.error
        self.blobs.setdefault(blob_id, blob_info)

    async def get_blob(self, blob_id: str) -> BlobInfo | None:
        return self.blobs.get(blob_id)


class FixedOSAnalyzer(Analyzer):
    """Report a fixed OS for etc/os-release."""

    type = "fixed-os"
    group = AnalyzerGroup.OS

    def __init__(self, family: str = "debian", name: str = "10.4") -> None:
        self.os = OS(family=family, name=name)

    def matches(self, file_path: str) -> bool:
        return file_path == "etc/os-release"

    def analyze(self, target: AnalysisTarget):
        return [OSFinding(os=self.os)]


class BrokenAnalyzer(Analyzer):
    """Fail on every matched file."""

    type = "broken"
    group = AnalyzerGroup.LANG

    def __init__(self, suffix: str = ".broken") -> None:
        self.suffix = suffix

    def matches(self, file_path: str) -> bool:
        return file_path.endswith(self.suffix)

    def analyze(self, target: AnalysisTarget):
        raise RuntimeError(f"cannot parse {target.file_path}")


class BadReturnAnalyzer(Analyzer):
    """Return something that is not a list of findings."""

    type = "bad-return"
    group = AnalyzerGroup.LANG

    def matches(self, file_path: str) -> bool:
        return file_path.endswith(".bad")

    def analyze(self, target: AnalysisTarget):
        return {"name": "not-a-finding"}


class CancellingAnalyzer(Analyzer):
    """Set a cancel event from the worker thread while analyzing."""

    type = "cancelling"
    group = AnalyzerGroup.LANG

    def __init__(self, loop, cancel, delay: float = 0.05) -> None:
        self.loop = loop
        self.cancel = cancel
        self.delay = delay
        self.started: list[str] = []
        self.completed: list[str] = []

    def matches(self, file_path: str) -> bool:
        return file_path.endswith(".txt")

    def analyze(self, target: AnalysisTarget):
        self.started.append(target.file_path)
        self.loop.call_soon_threadsafe(self.cancel.set)
        time.sleep(self.delay)
        self.completed.append(target.file_path)
        return []


@dataclass(frozen=True)
class ReplacedEntry(FileEntry):
    """Walked file whose later reads go to another path.

    The first open (hashing) reads ``abs_path``; every later open (analysis)
    reads ``replacement``.
    """

    replacement: str = ""
    opened: list = field(default_factory=list)

    def open(self):
        self.opened.append(self.path)
        if len(self.opened) == 1:
            return super().open()
        return aiofiles.open(self.replacement, "rb")


def file_entry(path: Path, rel_path: str, **kwargs) -> FileEntry:
    """FileEntry for an existing file, with overridable fields."""
    st = path.stat()
    values = {"path": rel_path, "abs_path": str(path), "size": st.st_size, "mode": st.st_mode}
    values.update(kwargs)
    cls = ReplacedEntry if "replacement" in values else FileEntry
    return cls(**values)
