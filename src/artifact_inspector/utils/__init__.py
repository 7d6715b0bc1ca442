"""Utility functions for the artifact inspector."""

from .canonical import calculate_blob_id, canonicalize, to_canonical_json
from .diff import DiffStream
from .digest import calculate_digest, validate_digest, verify_digest

__all__ = [
    "DiffStream",
    "calculate_blob_id",
    "calculate_digest",
    "canonicalize",
    "to_canonical_json",
    "validate_digest",
    "verify_digest",
]
