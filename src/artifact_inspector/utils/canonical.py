"""Canonical form of analysis results and blob ID calculation.

The canonical form must not depend on directory enumeration order or on the
order analyzers finished in. Every grouped field is sorted before it is
serialized:

- package groups by file path, packages by (name, version, source name,
  source version)
- applications by (type, file path), libraries by (name, version)
- configs by (type, file path)

JSON object keys are sorted as well. Non-ASCII text, including the lone
surrogates that stand for undecodable bytes in file names, is written as
\\uXXXX escapes so the output is always plain ASCII.
"""

import json
from typing import TYPE_CHECKING

from ..core.types import (
    BLOB_JSON_SCHEMA_VERSION,
    Application,
    BlobInfo,
    ConfigFile,
    PackageInfo,
)
from .digest import DEFAULT_ALGORITHM, calculate_digest

if TYPE_CHECKING:
    from ..analyzer.result import CompositeResult


def _package_key(pkg):
    return (pkg.name, pkg.version, pkg.src_name, pkg.src_version)


def _library_key(lib):
    return (lib.name, lib.version)


def canonicalize(result: "CompositeResult", diff_id: str) -> BlobInfo:
    """Build the immutable blob record from a composite result.

    Args:
        result: Findings merged during dispatch
        diff_id: Diff ID of the walked file contents

    Returns:
        BlobInfo stamped with the current schema version
    """
    package_infos = tuple(
        PackageInfo(
            file_path=file_path,
            packages=tuple(sorted(packages, key=_package_key)),
        )
        for file_path, packages in sorted(result.packages.items())
    )
    applications = tuple(
        Application(
            type=app_type,
            file_path=file_path,
            libraries=tuple(sorted(libraries, key=_library_key)),
        )
        for (app_type, file_path), libraries in sorted(result.applications.items())
    )
    configs = tuple(
        ConfigFile(type=cfg_type, file_path=file_path, content=content)
        for (cfg_type, file_path), content in sorted(
            result.configs.items(), key=lambda item: item[0]
        )
    )
    return BlobInfo(
        schema_version=BLOB_JSON_SCHEMA_VERSION,
        diff_id=diff_id,
        os=result.os,
        package_infos=package_infos,
        applications=applications,
        configs=configs,
    )


def to_canonical_json(blob_info: BlobInfo) -> bytes:
    """Serialize a blob record to its canonical bytes."""
    return json.dumps(
        blob_info.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    ).encode("ascii")


def calculate_blob_id(blob_info: BlobInfo, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Calculate the blob ID of a record.

    Args:
        blob_info: Canonical blob record
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Digest string in format "algorithm:hex"
    """
    return calculate_digest(to_canonical_json(blob_info), algorithm)
