"""Content digests used for diff IDs, blob IDs and cache keys.

A digest is rendered as "<algorithm>:<hex>", e.g. "sha256:2c26b4...".
"""

import hashlib
import re
from typing import Union

# algorithm:hex
DIGEST_PATTERN = re.compile(r"^[a-z0-9]+:[a-f0-9]+$")

DEFAULT_ALGORITHM = "sha256"

SUPPORTED_ALGORITHMS = ("sha256", "sha512")


def new_hasher(algorithm: str = DEFAULT_ALGORITHM) -> "hashlib._Hash":
    """Create an incremental hasher for a supported algorithm.

    Raises:
        ValueError: If algorithm is not supported
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    return hashlib.new(algorithm)


def format_digest(algorithm: str, hex_digest: str) -> str:
    """Render a digest as "algorithm:hex"."""
    return f"{algorithm}:{hex_digest}"


def calculate_digest(
    data: Union[bytes, bytearray, memoryview], algorithm: str = DEFAULT_ALGORITHM
) -> str:
    """Hash bytes into a content identifier.

    Blob IDs are the digest of a record's canonical JSON bytes; the same bytes
    always give the same ID.

    Args:
        data: Bytes to identify
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Content identifier, "algorithm:hex"

    Raises:
        ValueError: If algorithm is not supported
        ValueError: If data is not bytes-like
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValueError("Data must be bytes, bytearray or memoryview")

    hasher = new_hasher(algorithm)
    hasher.update(data)
    return format_digest(algorithm, hasher.hexdigest())


def validate_digest(digest: str) -> bool:
    """Check that a string can serve as a blob ID or cache key.

    The algorithm must be supported and the hex part must have the length of
    that algorithm's digest, so a valid ID never contains path separators.
    """
    if not isinstance(digest, str):
        return False

    if not DIGEST_PATTERN.match(digest):
        return False

    algorithm, hex_part = digest.split(":", 1)
    if algorithm not in SUPPORTED_ALGORITHMS:
        return False
    return len(hex_part) == hashlib.new(algorithm).digest_size * 2


def split_digest(digest: str) -> tuple[str, str]:
    """Split a blob ID into its algorithm and hex parts, e.g. for a cache path.

    Raises:
        ValueError: If digest format is invalid
    """
    if not validate_digest(digest):
        raise ValueError(f"Invalid digest format: {digest}")
    algorithm, hex_part = digest.split(":", 1)
    return algorithm, hex_part


def verify_digest(data: Union[bytes, bytearray], expected_digest: str) -> bool:
    """Check that stored bytes still hash to the ID they are kept under.

    Args:
        data: Bytes read back from a cache
        expected_digest: Blob ID the bytes were stored under

    Returns:
        True if the bytes hash to expected_digest

    Raises:
        ValueError: If digest format is invalid
    """
    algorithm, _ = split_digest(expected_digest)
    actual_digest = calculate_digest(data, algorithm)
    return actual_digest == expected_digest
