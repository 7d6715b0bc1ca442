"""npm package-lock.json parser."""

import json
import posixpath
from typing import Any

from ...core.types import (
    AnalyzerGroup,
    AnalyzerType,
    Application,
    ApplicationFinding,
    FileFinding,
    LibraryInfo,
)
from ..base import AnalysisTarget, Analyzer

NPM_LOCK_FILE = "package-lock.json"
NODE_MODULES = "node_modules"


def _walk_dependencies(deps: dict[str, Any], out: set[tuple[str, str]]) -> None:
    # lockfileVersion 1 nests transitive dependencies
    for name, info in deps.items():
        if not isinstance(info, dict):
            continue
        version = info.get("version")
        if isinstance(version, str) and version:
            out.add((name, version))
        nested = info.get("dependencies")
        if isinstance(nested, dict):
            _walk_dependencies(nested, out)


def parse_npm_lock(lock: dict[str, Any]) -> list[LibraryInfo]:
    """Extract (name, version) pairs from a parsed package-lock.json.

    lockfileVersion 2 and 3 list every installed module under "packages",
    keyed by its node_modules path. Older files only have "dependencies".
    """
    found: set[tuple[str, str]] = set()

    packages = lock.get("packages")
    if isinstance(packages, dict):
        for pkg_path, info in packages.items():
            if pkg_path == "" or not isinstance(info, dict):
                continue
            if info.get("link"):
                continue
            name = info.get("name")
            if not name:
                # npm lock v2 sometimes omits "name" for nested nodes
                _, sep, name = pkg_path.rpartition(f"{NODE_MODULES}/")
                if not sep:
                    continue
            version = info.get("version")
            if isinstance(name, str) and isinstance(version, str) and version:
                found.add((name, version))
    else:
        deps = lock.get("dependencies")
        if isinstance(deps, dict):
            _walk_dependencies(deps, found)

    return [LibraryInfo(name=name, version=version) for name, version in sorted(found)]


class NpmLockAnalyzer(Analyzer):
    """Extract dependencies from package-lock.json files outside node_modules."""

    type = AnalyzerType.NPM
    group = AnalyzerGroup.LANG

    def matches(self, file_path: str) -> bool:
        if posixpath.basename(file_path) != NPM_LOCK_FILE:
            return False
        return NODE_MODULES not in file_path.split("/")

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        lock = json.loads(target.content)
        if not isinstance(lock, dict):
            raise ValueError(f"npm: {target.file_path} is not a JSON object")
        libraries = parse_npm_lock(lock)
        if not libraries:
            return []
        return [
            ApplicationFinding(
                application=Application(
                    type=str(self.type), file_path=target.file_path, libraries=tuple(libraries)
                )
            )
        ]
