"""
Custom exceptions for the trending ingestion pipeline with structured error context.

Each exception carries a context dictionary for logging and for the
error_details section of a run outcome.

Exception Hierarchy:
    ETLException (base)
    ├── ConfigurationError      fatal, raised before any I/O
    ├── FetchError              bulk download / API call failed
    │   └── RateLimitError      HTTP 429 after retries
    ├── NormalizationError      one malformed item, counted as skipped
    └── PersistenceError        datastore write failed
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (source, batch, status code, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and run outcomes."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class ConfigurationError(ETLException):
    """
    Raised when a required secret or option is missing or invalid.

    Context should include:
        - missing: Comma-separated names of the missing settings
    """
    pass


class FetchError(ETLException):
    """
    Raised when the bulk download or a YouTube API call fails.

    Context should include:
        - url: The endpoint that failed
        - status_code: HTTP status code (if applicable)
        - response_body: Response body (truncated)
        - retry_count: Number of attempts made
    """

    @property
    def status_code(self) -> Optional[int]:
        return self.context.get("status_code")


class RateLimitError(FetchError):
    """Rate limiting errors (HTTP 429) that persisted through every retry."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after


class NormalizationError(ETLException):
    """
    Raised when a raw item is structurally malformed (e.g. has no video ID).

    Context should include:
        - field_name: The missing or invalid field
        - strategy: Fetch strategy that produced the item
    """
    pass


class PersistenceError(ETLException):
    """
    Raised when a datastore write fails.

    Context should include:
        - operation: UPSERT
        - table_name: Name of the table
        - records: Number of records in the failed call
        - external_id: The record being written (per-item writes)
    """
    pass
