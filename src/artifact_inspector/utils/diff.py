"""Diff ID calculation over a normalized tar stream of walked files."""

import tarfile

from .digest import DEFAULT_ALGORITHM, format_digest, new_hasher

BLOCK_SIZE = tarfile.BLOCKSIZE
END_OF_ARCHIVE = b"\0" * (BLOCK_SIZE * 2)


def build_member_header(path: str, mode: int, size: int) -> bytes:
    """Build a normalized tar header for a regular file.

    Ownership, timestamps and user names are zeroed so that the header only
    depends on the path, permission bits and size.
    """
    info = tarfile.TarInfo(path)
    info.type = tarfile.REGTYPE
    info.mode = mode & 0o7777
    info.size = size
    info.mtime = 0
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info.tobuf(format=tarfile.PAX_FORMAT, encoding="utf-8", errors="surrogateescape")


class DiffStream:
    """Incremental hasher equivalent to hashing an uncompressed tar archive.

    Members must be added in a deterministic order, normally the walk order.
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        self.algorithm = algorithm
        self._hasher = new_hasher(algorithm)
        self._path: str | None = None
        self._size = 0
        self._remaining = 0
        self._finished = False
        self.members = 0

    def add_member(self, path: str, mode: int, size: int) -> None:
        """Start a new member; its content must follow through update()."""
        if self._finished:
            raise ValueError("diff stream already finished")
        if self._path is not None:
            raise ValueError(f"member {self._path} was not ended")
        self._hasher.update(build_member_header(path, mode, size))
        self._path = path
        self._size = size
        self._remaining = size

    def update(self, chunk: bytes) -> None:
        """Feed content of the current member."""
        if self._path is None:
            raise ValueError("no member started")
        if len(chunk) > self._remaining:
            raise ValueError(
                f"{self._path}: content exceeds the size recorded in the header ({self._size} bytes)"
            )
        self._hasher.update(chunk)
        self._remaining -= len(chunk)

    def end_member(self) -> None:
        """Finish the current member and pad it to a full block."""
        if self._path is None:
            raise ValueError("no member started")
        if self._remaining:
            raise ValueError(
                f"{self._path}: content is {self._remaining} bytes shorter than the size "
                f"recorded in the header ({self._size} bytes)"
            )
        padding = -self._size % BLOCK_SIZE
        if padding:
            self._hasher.update(b"\0" * padding)
        self._path = None
        self.members += 1

    def digest(self) -> str:
        """Close the archive and return the diff ID."""
        if self._path is not None:
            raise ValueError(f"member {self._path} was not ended")
        if not self._finished:
            self._hasher.update(END_OF_ARCHIVE)
            self._finished = True
        return format_digest(self.algorithm, self._hasher.hexdigest())
