class PipelineError(Exception):
    """Base exception for infrastructure failures in the upload pipeline."""


class SourceUnavailableError(PipelineError):
    """Raised when the uploaded bytes cannot be fully read."""


class PersistenceError(PipelineError):
    """Raised when the provenance record cannot be written."""


class UnsupportedStorageBackendError(PipelineError):
    """Raised when the configured storage backend is not supported."""
