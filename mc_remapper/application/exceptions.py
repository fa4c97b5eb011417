"""
Core business exceptions for the remapper application.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains. Adapters raise
infrastructure errors; the pipeline wraps every fatal one into a
ProcessingFailure that names the stage it happened in.
"""


class RemapperError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(RemapperError):
    """Raised for errors related to application configuration."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(RemapperError):
    """Base class for errors related to external systems (network, engines)."""
    pass


class TransportError(InfrastructureError):
    """Raised when a remote resource cannot be fetched."""
    pass


class APIError(InfrastructureError):
    """Raised when the launcher metadata service returns unusable data."""
    pass


class ReleaseNotFoundError(APIError):
    """Raised when a version id is not listed by the metadata service."""
    pass


class MetadataError(InfrastructureError):
    """Raised when version metadata cannot be parsed."""
    pass


class ArchiveError(InfrastructureError):
    """Raised when an archive cannot be opened or read."""
    pass


class RemapError(InfrastructureError):
    """Raised when the remapping engine fails."""
    pass


class DecompileError(InfrastructureError):
    """Raised when the decompilation engine fails."""
    pass


# --- Pipeline Failures ---

class ProcessingFailure(RemapperError):
    """
    A fatal pipeline failure. Carries the stage it happened in; the
    underlying cause is chained as __cause__.
    """

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
        self.message = message


class DirectoryCreationFailure(ProcessingFailure):
    pass


class MetadataFetchFailure(ProcessingFailure):
    pass


class MetadataParseFailure(ProcessingFailure):
    pass


class ManifestKeyMissing(ProcessingFailure):
    pass


class TransportFailure(ProcessingFailure):
    pass


class WriteFailure(ProcessingFailure):
    pass


class IntegrityMismatch(ProcessingFailure):
    """Raised when downloaded bytes do not hash to the expected digest."""
    pass


class ArchiveUnpackFailure(ProcessingFailure):
    pass


class RemapFailure(ProcessingFailure):
    pass


class DecompileFailure(ProcessingFailure):
    pass
