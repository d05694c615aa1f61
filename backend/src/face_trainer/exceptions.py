"""Exceptions raised by the face trainer runtime.

Every failure surfaced to callers derives from FaceTrainerError so a request
layer can map the whole taxonomy at once, while still telling "not trained
yet" (ModelNotFound) apart from a broken store or a corrupt model.
"""

from typing import Any, Dict, Optional


class FaceTrainerError(Exception):
    """Base exception for face trainer operations."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize face trainer error.

        Args:
            message: Error description
            details: Additional context (tenant key, operation, ...)
        """
        super().__init__(message)
        self.details = details or {}


class StorageUnavailable(FaceTrainerError):
    """Raised when a durable store is unreachable or fails a query."""
    pass


class ModelNotFound(FaceTrainerError):
    """Raised when no trained classifier exists for a tenant."""
    pass


class ModelCorrupt(FaceTrainerError):
    """Raised when a stored classifier blob cannot be deserialized."""
    pass


class InvalidArgument(FaceTrainerError, ValueError):
    """Raised when a caller passes an unusable argument."""
    pass


class LockTimeout(FaceTrainerError):
    """Raised when a per-tenant lock cannot be acquired within its timeout."""
    pass
