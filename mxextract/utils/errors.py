"""
Custom exceptions for the mxextract engine.

Only conditions that end a run are raised out of the engine; failures of
single units are converted to warnings at the unit boundary.
"""

from typing import Any, Optional


class MxExtractException(Exception):
    """Base exception for all mxextract-specific errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(MxExtractException):
    """Invalid configuration value."""

    pass


# =============================================================================
# Model Source Exceptions
# =============================================================================


class ModelSourceError(MxExtractException):
    """The model source could not be opened."""

    pass


class SnapshotFormatError(ModelSourceError):
    """A model snapshot file is malformed."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with the offending file and reason."""
        message = f"Invalid model snapshot '{path}': {reason}"
        super().__init__(message, {"path": path, "reason": reason})


class ModelLoadError(MxExtractException):
    """A model element failed to materialize."""

    def __init__(self, unit: str, reason: str) -> None:
        """Initialize with the unit description."""
        message = f"Failed to load '{unit}': {reason}"
        super().__init__(message, {"unit": unit, "reason": reason})


# =============================================================================
# Output Exceptions
# =============================================================================


class PersistenceError(MxExtractException):
    """The extracted document could not be written."""

    pass
