"""Analyzer interface, registry and dispatch."""

from .base import AnalysisTarget, Analyzer
from .dispatch import DispatchOutcome, Dispatcher
from .registry import AnalyzerRegistry, RegistryBuilder, by_group, default_registry
from .result import CompositeResult

__all__ = [
    "AnalysisTarget",
    "Analyzer",
    "AnalyzerRegistry",
    "CompositeResult",
    "DispatchOutcome",
    "Dispatcher",
    "RegistryBuilder",
    "by_group",
    "default_registry",
]
