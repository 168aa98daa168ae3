"""Custom exceptions for ZidRec.

Defines specific exception types for better error handling and reporting.
"""

from typing import Any, Dict, Optional


class ZidRecException(Exception):
    """Base exception for ZidRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ProviderError(ZidRecException):
    """Raised when the Zid API cannot be reached or returns a bad response."""

    def __init__(self, path: str, error: Exception):
        message = f"Zid API request to '{path}' failed: {str(error)}"
        super().__init__(
            message=message,
            status_code=502,
            details={
                "path": path,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )


class SnapshotStoreError(ZidRecException):
    """Raised when the persisted snapshot cannot be written or removed."""

    def __init__(self, cache_path: str, error: Exception):
        message = f"Failed to persist snapshot to '{cache_path}': {str(error)}"
        super().__init__(
            message=message,
            status_code=500,
            details={
                "cache_path": cache_path,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
