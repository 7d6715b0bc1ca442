"""Configuration file analyzers."""

from .dockerfile import DockerfileAnalyzer

__all__ = ["DockerfileAnalyzer"]
