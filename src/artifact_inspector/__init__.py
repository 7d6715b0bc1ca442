"""Artifact Inspector - content-addressed software composition of filesystem trees."""

__version__ = "0.1.0"

from .analyzer import AnalysisTarget, Analyzer, AnalyzerRegistry, RegistryBuilder, default_registry
from .artifact import LocalArtifact, new_artifact
from .cache import ArtifactCache, FSCache, MemoryCache
from .core.types import (
    OS,
    AnalyzerGroup,
    AnalyzerType,
    Application,
    ArtifactReference,
    BlobInfo,
    ConfigFile,
    LibraryInfo,
    Package,
    PackageInfo,
    ScannerOption,
)
from .exceptions import (
    AnalyzerError,
    BlobStoreError,
    CacheError,
    ConsistencyError,
    FileReadError,
    InspectionCancelledError,
    InspectorError,
    RootNotFoundError,
)
from .walker import FileEntry, walk_dir

__all__ = [
    # Inspection
    "new_artifact",
    "LocalArtifact",
    "ArtifactReference",
    "ScannerOption",
    # Analyzers
    "Analyzer",
    "AnalysisTarget",
    "AnalyzerGroup",
    "AnalyzerType",
    "AnalyzerRegistry",
    "RegistryBuilder",
    "default_registry",
    # Walking
    "FileEntry",
    "walk_dir",
    # Cache
    "ArtifactCache",
    "FSCache",
    "MemoryCache",
    # Records
    "BlobInfo",
    "OS",
    "Package",
    "PackageInfo",
    "Application",
    "LibraryInfo",
    "ConfigFile",
    # Exceptions
    "InspectorError",
    "RootNotFoundError",
    "AnalyzerError",
    "FileReadError",
    "ConsistencyError",
    "CacheError",
    "BlobStoreError",
    "InspectionCancelledError",
]
