"""Artifact inspectors."""

from .local import LocalArtifact, new_artifact

__all__ = ["LocalArtifact", "new_artifact"]
