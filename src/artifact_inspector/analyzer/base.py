"""Base analyzer interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Union, get_args

from ..core.types import AnalyzerGroup, AnalyzerType, FileFinding

FINDING_TYPES = get_args(FileFinding)


@dataclass(frozen=True)
class AnalysisTarget:
    """A file handed to an analyzer.

    Attributes:
        file_path: Path relative to the artifact root, without a leading slash
        content: Full file content
    """

    file_path: str
    content: bytes


class Analyzer(ABC):
    """Abstract base class for file analyzers.

    Subclasses set ``type`` to a stable tag used in disable lists and
    ``group`` to the broad kind of finding they produce. The dispatcher runs
    the analyzers of a file group by group, OS analyzers first.
    """

    type: ClassVar[Union[AnalyzerType, str]]
    group: ClassVar[AnalyzerGroup]

    @abstractmethod
    def matches(self, file_path: str) -> bool:
        """Return True if the analyzer handles the given relative path."""
        raise NotImplementedError

    @abstractmethod
    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        """Extract findings from a matched file.

        Implementations may raise on malformed input; the dispatcher records
        the failure and continues with other files.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type!s}, group={self.group!s})"


def decode_text(content: bytes) -> str:
    """Decode file content as UTF-8, replacing invalid sequences."""
    return content.decode("utf-8", errors="replace")
