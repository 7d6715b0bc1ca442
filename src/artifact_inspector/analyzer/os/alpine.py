"""Alpine Linux release detection."""

from ...core.types import OS, AnalyzerGroup, AnalyzerType, FileFinding, OSFinding
from ..base import AnalysisTarget, Analyzer, decode_text

ALPINE_RELEASE_PATH = "etc/alpine-release"


class AlpineReleaseAnalyzer(Analyzer):
    """Read the release number from etc/alpine-release."""

    type = AnalyzerType.ALPINE
    group = AnalyzerGroup.OS

    def matches(self, file_path: str) -> bool:
        return file_path == ALPINE_RELEASE_PATH

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        for line in decode_text(target.content).splitlines():
            release = line.strip()
            if release:
                return [OSFinding(os=OS(family="alpine", name=release))]
        raise ValueError(f"alpine: no release found in {target.file_path}")
