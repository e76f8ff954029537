"""
Exception Classes for the Qdrant Vector Store

Defines error types for configuration problems, invalid calls and
failures reported by the Qdrant service.
"""

from typing import Optional


class VectorStoreError(Exception):
    """Base exception for vector store errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class VectorStoreConfigurationError(VectorStoreError, ValueError):
    """
    Raised at construction when the store cannot be configured.

    Examples: neither a client nor a URL given, content and metadata
    payload keys that collide, unsupported distance metric.
    """


class VectorStoreInvalidArgumentError(VectorStoreError, ValueError):
    """
    Raised when an operation is called with arguments it cannot act on.

    Raised before any request is sent to Qdrant.
    """


class QdrantRemoteError(VectorStoreError):
    """
    Error reported by the Qdrant service (or the transport to it).

    Carries the HTTP status code and remote message. Never retried.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
