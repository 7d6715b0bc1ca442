"""pip requirements.txt parser."""

import posixpath
import re

from ...core.types import (
    AnalyzerGroup,
    AnalyzerType,
    Application,
    ApplicationFinding,
    FileFinding,
    LibraryInfo,
)
from ..base import AnalysisTarget, Analyzer, decode_text

REQUIREMENTS_FILE = "requirements.txt"

# name[extras]==version
PINNED_PATTERN = re.compile(
    r"^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)(?:\[[^\]]*\])?\s*==\s*(?P<version>[^\s;#]+)"
)


def parse_requirements(text: str) -> list[LibraryInfo]:
    """Extract pinned requirements.

    Comments, options (-r, -c, --hash ...), URL requirements and unpinned
    requirements carry no exact version and are skipped.
    """
    libraries: list[LibraryInfo] = []
    for line in text.splitlines():
        s = line.split(" #", 1)[0].strip()
        if not s or s.startswith("#") or s.startswith("-"):
            continue
        if "://" in s:
            continue
        match = PINNED_PATTERN.match(s)
        if match:
            libraries.append(LibraryInfo(name=match.group("name"), version=match.group("version")))
    return libraries


class PipRequirementsAnalyzer(Analyzer):
    """Extract pinned dependencies from requirements.txt files."""

    type = AnalyzerType.PIP
    group = AnalyzerGroup.LANG

    def matches(self, file_path: str) -> bool:
        return posixpath.basename(file_path) == REQUIREMENTS_FILE

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        libraries = parse_requirements(decode_text(target.content))
        if not libraries:
            return []
        return [
            ApplicationFinding(
                application=Application(
                    type=str(self.type), file_path=target.file_path, libraries=tuple(libraries)
                )
            )
        ]
