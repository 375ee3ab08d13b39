"""
Custom exception classes and error handling utilities.
"""

from typing import Optional, Dict, Any
import traceback


class LinkCrawlerError(Exception):
    """Base exception for all link crawler errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FetchError(LinkCrawlerError):
    """Exception raised by a fetcher when a resource cannot be returned."""

    def __init__(self, resource_id: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, {"resource_id": resource_id, **(details or {})})
        self.resource_id = resource_id


class AlreadyVisitedError(FetchError):
    """The resource was already claimed by another task during this run."""

    def __init__(self, resource_id: str):
        super().__init__(resource_id, f"already visited {resource_id}")


class NotFoundError(FetchError):
    """The fetcher has no data for the resource."""

    def __init__(self, resource_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(resource_id, f"not found: {resource_id}", details)


class TransportError(FetchError):
    """Fetcher-specific failure (network, bad status, decoding)."""
    pass


class ValidationError(LinkCrawlerError):
    """Exception raised for data validation failures."""
    pass


class ConfigurationError(LinkCrawlerError):
    """Exception raised for configuration-related issues."""
    pass


class TraversalError(LinkCrawlerError):
    """Exception raised when a traversal run cannot complete normally."""
    pass


class CompletionTrackerError(TraversalError):
    """Register/deregister pairing was violated."""
    pass


class TraversalTimeoutError(TraversalError):
    """The caller gave up waiting for outstanding tasks."""
    pass


def handle_error(
    error: Exception,
    logger,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
) -> None:
    """
    Handle and log errors with context information.

    Args:
        error: The exception that occurred
        logger: Structured logger instance to use for logging
        context: Additional context information
        reraise: Whether to reraise the exception after logging
    """
    error_context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **(context or {})
    }

    if isinstance(error, LinkCrawlerError):
        error_context.update(error.details)
    else:
        # Unexpected errors keep their traceback for diagnosis
        error_context["traceback"] = traceback.format_exc()

    logger.error("Error occurred", **error_context)

    if reraise:
        raise error
