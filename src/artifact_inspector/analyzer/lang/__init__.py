"""Application dependency analyzers."""

from .npm import NpmLockAnalyzer
from .pip import PipRequirementsAnalyzer

__all__ = ["NpmLockAnalyzer", "PipRequirementsAnalyzer"]
