"""OS identity analyzers."""

from .alpine import AlpineReleaseAnalyzer
from .debian import DebianVersionAnalyzer

__all__ = ["AlpineReleaseAnalyzer", "DebianVersionAnalyzer"]
