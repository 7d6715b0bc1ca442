"""Debian release detection."""

from ...core.types import OS, AnalyzerGroup, AnalyzerType, FileFinding, OSFinding
from ..base import AnalysisTarget, Analyzer, decode_text

DEBIAN_VERSION_PATH = "etc/debian_version"


class DebianVersionAnalyzer(Analyzer):
    """Read the release number from etc/debian_version."""

    type = AnalyzerType.DEBIAN
    group = AnalyzerGroup.OS

    def matches(self, file_path: str) -> bool:
        return file_path == DEBIAN_VERSION_PATH

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        lines = decode_text(target.content).strip().splitlines()
        if not lines or not lines[0].strip():
            raise ValueError(f"debian: empty version file {target.file_path}")
        return [OSFinding(os=OS(family="debian", name=lines[0].strip()))]
