"""
Domain error classes for the Music Catalog Service.

These error classes provide explicit, typed exceptions that map cleanly to API responses.
Handlers translate them into HTTP status codes (see responses.py) or, for queue
delivery, into per-message failure reports.
"""

from typing import Dict, Any


class DomainError(Exception):
    """
    Base class for all domain errors.

    Domain errors are explicit business logic errors that should be mapped
    to appropriate HTTP responses by the handler layer.

    Attributes:
        code: Stable error code returned to clients in the 'error' field
        message: Human-readable message
        details: Additional structured context (field errors, keys, ...)
        retryable: Whether the caller may retry the same request later
    """

    retryable = False

    def __init__(self, code: str, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """
    Raised when input validation fails.

    Maps to HTTP 400 Bad Request.
    Details should contain field-level validation errors.
    """

    def __init__(self, message: str, details: Dict[str, Any]):
        super().__init__('VALIDATION_ERROR', message, details)


class NotFoundError(DomainError):
    """
    Raised when a requested resource does not exist.

    Maps to HTTP 404 Not Found.
    """

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('NOT_FOUND', message, details or {})


class ConflictError(DomainError):
    """
    Raised when an operation conflicts with existing state.

    Maps to HTTP 409 Conflict.
    Example: username or email already registered.
    """

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('CONFLICT', message, details or {})


class StoreUnavailableError(DomainError):
    """
    Raised when the backing store is throttling, unreachable or failing.

    Maps to HTTP 500. Transient: the same request may succeed when retried.
    """

    retryable = True

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('STORE_UNAVAILABLE', message, details or {})


class RequestTimeoutError(DomainError):
    """
    Raised when a request exhausts its deadline before finishing.

    Maps to HTTP 503 Service Unavailable.
    """

    retryable = True

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('TIMEOUT', message, details or {})


class CorruptRecordError(DomainError):
    """
    Raised when a stored item cannot be converted back into an album record.

    Maps to HTTP 500. Never retryable: the stored data itself is wrong.
    """

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__('CORRUPT_RECORD', message, details or {})
