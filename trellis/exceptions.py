"""
Custom exceptions for the Trellis application.
"""


class TrellisError(Exception):
    """Base exception for all Trellis-related errors."""
    pass


class ValidationError(TrellisError):
    """Raised when form data or a parent/type combination is invalid."""
    pass


class NotFoundError(TrellisError):
    """Raised when a requested release or work item is not found."""
    pass


class InvalidOperationError(TrellisError):
    """Raised when an operation is not allowed in the current state."""
    pass


class StorageError(TrellisError):
    """Raised when reading or writing a file in the .trellis/ directory fails."""
    pass


class PersistenceError(TrellisError):
    """Raised when the store rejects a replaced release document.

    The in-memory release is left exactly as it was before the attempt.
    """
    pass


class ConfigurationError(TrellisError):
    """Raised when there's a configuration or setup issue."""
    pass
