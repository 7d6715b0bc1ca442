"""Package database analyzers."""

from .apk import ApkAnalyzer
from .dpkg import DpkgAnalyzer

__all__ = ["ApkAnalyzer", "DpkgAnalyzer"]
