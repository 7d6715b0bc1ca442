"""Directory tree walker."""

import fnmatch
import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass, field

import aiofiles

from .core.types import ScannerOption
from .exceptions import RootNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """Regular file found under the root.

    Attributes:
        path: Path relative to the root, "/"-separated, without a leading slash
        abs_path: Absolute path on the local filesystem
        size: Size in bytes at walk time
        mode: st_mode at walk time
    """

    path: str
    abs_path: str
    size: int
    mode: int

    def open(self):
        """Open the file for async binary reading.

        Returns:
            aiofiles context manager
        """
        return aiofiles.open(self.abs_path, "rb")


def format_os_error(op: str, path: str, error: OSError) -> str:
    """Render an OSError the way "stat <path>: no such file or directory" reads."""
    text = error.strerror or str(error)
    return f"{op} {path}: {text[:1].lower()}{text[1:]}"


def check_root(root: str) -> os.stat_result:
    """Stat the root directory.

    Raises:
        RootNotFoundError: If the root is missing, unreadable or not a directory
    """
    try:
        st = os.stat(root)
    except OSError as e:
        raise RootNotFoundError(format_os_error("stat", root, e)) from e
    if not stat.S_ISDIR(st.st_mode):
        raise RootNotFoundError(f"stat {root}: not a directory")
    try:
        with os.scandir(root):
            pass
    except OSError as e:
        raise RootNotFoundError(format_os_error("open", root, e)) from e
    return st


def _normalize_patterns(patterns: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(p.strip("/") for p in patterns if p.strip("/"))


def _matches_any(rel_path: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatch.fnmatchcase(rel_path, pattern) for pattern in patterns)


def _is_within(real_root: str, target: str) -> bool:
    return target == real_root or target.startswith(real_root.rstrip(os.sep) + os.sep)


@dataclass
class _Walk:
    real_root: str
    follow_symlinks: bool
    skip_files: tuple[str, ...]
    skip_dirs: tuple[str, ...]
    visited: set[tuple[int, int]] = field(default_factory=set)

    def stat_child(self, child: os.DirEntry, rel_path: str) -> os.stat_result | None:
        """Stat a directory entry, applying the symlink policy.

        Returns None for entries that must not be visited.
        """
        try:
            if not child.is_symlink():
                return child.stat(follow_symlinks=False)
            if not self.follow_symlinks:
                logger.debug(f"Skipping symlink {rel_path}")
                return None
            target = os.path.realpath(child.path)
            if not _is_within(self.real_root, target):
                logger.debug(f"Skipping symlink {rel_path} pointing outside the root")
                return None
            return os.stat(target)
        except OSError as e:
            logger.warning(f"Skipping {rel_path}: {format_os_error('stat', child.path, e)}")
            return None

    def walk(self, dir_path: str, rel_dir: str) -> Iterator[FileEntry]:
        try:
            with os.scandir(dir_path) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"Skipping unreadable directory: {format_os_error('open', dir_path, e)}")
            return

        for child in children:
            rel_path = f"{rel_dir}/{child.name}" if rel_dir else child.name
            st = self.stat_child(child, rel_path)
            if st is None:
                continue

            if stat.S_ISDIR(st.st_mode):
                if _matches_any(rel_path, self.skip_dirs):
                    logger.debug(f"Skipping directory {rel_path}")
                    continue
                key = (st.st_dev, st.st_ino)
                if key in self.visited:
                    logger.debug(f"Skipping already visited directory {rel_path}")
                    continue
                self.visited.add(key)
                yield from self.walk(child.path, rel_path)
            elif stat.S_ISREG(st.st_mode):
                if _matches_any(rel_path, self.skip_files):
                    logger.debug(f"Skipping file {rel_path}")
                    continue
                yield FileEntry(
                    path=rel_path,
                    abs_path=child.path,
                    size=st.st_size,
                    mode=st.st_mode,
                )


def walk_dir(root: str, option: ScannerOption | None = None) -> Iterator[FileEntry]:
    """Walk a directory tree and yield its regular files.

    Entries of each directory are visited in name order, depth first, so the
    sequence is the same on every run for the same tree. The generator is
    lazy and can only be consumed once. Directories below the root that
    cannot be read are skipped with a warning.

    Args:
        root: Root directory
        option: Scanner configuration (skip patterns, symlink policy)

    Yields:
        FileEntry for every regular file

    Raises:
        RootNotFoundError: If the root cannot be accessed (on first iteration)
    """
    option = option or ScannerOption()
    root_stat = check_root(root)
    state = _Walk(
        real_root=os.path.realpath(root),
        follow_symlinks=option.follow_symlinks,
        skip_files=_normalize_patterns(option.skip_files),
        skip_dirs=_normalize_patterns(option.skip_dirs),
        visited={(root_stat.st_dev, root_stat.st_ino)},
    )
    yield from state.walk(root, "")
