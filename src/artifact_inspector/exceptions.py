"""Custom exceptions for the artifact inspector."""


class InspectorError(Exception):
    """Base exception for all inspection-related errors."""

    pass


class RootNotFoundError(InspectorError):
    """Raised when the root directory of an artifact cannot be accessed."""

    pass


class AnalyzerError(InspectorError):
    """Raised when an analyzer fails on a single file.

    These errors are recovered by the dispatcher: they are logged and kept
    on the composite result, and the inspection goes on.
    """

    def __init__(self, analyzer_type: str, file_path: str, cause: BaseException):
        super().__init__(f"{analyzer_type} analyzer failed on {file_path}: {cause}")
        self.analyzer_type = analyzer_type
        self.file_path = file_path
        self.cause = cause


class FileReadError(InspectorError):
    """Raised when a walked file cannot be read."""

    pass


class ConsistencyError(InspectorError):
    """Raised when analyzers contribute conflicting findings."""

    pass


class CacheError(InspectorError):
    """Raised when a cache operation fails."""

    pass


class BlobStoreError(CacheError):
    """Raised when a blob cannot be stored in the artifact cache."""

    pass


class InspectionCancelledError(InspectorError):
    """Raised when an inspection is cancelled before it completes."""

    pass
