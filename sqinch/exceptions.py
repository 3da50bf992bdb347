"""
Exception hierarchy for Catalog Space Efficiency Analytics

Structured error handling with specific error types.
"""

from typing import Any, Dict, Optional


class SqinchError(Exception):
    """Base exception for all analytics errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DataError(SqinchError):
    """Raised when input data makes the analysis run impossible.

    Empty or malformed input, zero-area products, duplicate product names
    and zero-area segments all abort the run with this error.
    """


class ExternalServiceError(SqinchError):
    """Raised when narrative generation fails or times out."""

    def __init__(
        self,
        message: str,
        view: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.view = view
