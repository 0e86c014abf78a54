"""Shared library for the Music Catalog Service."""

from .types import (
    Operation,
    Track,
    AlbumRecord,
    AlbumKey,
    ArtistDeletion,
    BatchItemFailure,
    RegistrationRequest,
    UserAccount,
    ErrorResponse
)

from .errors import (
    DomainError,
    ValidationError,
    NotFoundError,
    ConflictError,
    StoreUnavailableError,
    RequestTimeoutError,
    CorruptRecordError
)

from .responses import (
    create_success_response,
    create_no_content_response,
    create_error_response
)

__all__ = [
    # Types
    'Operation',
    'Track',
    'AlbumRecord',
    'AlbumKey',
    'ArtistDeletion',
    'BatchItemFailure',
    'RegistrationRequest',
    'UserAccount',
    'ErrorResponse',
    # Errors
    'DomainError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
    'StoreUnavailableError',
    'RequestTimeoutError',
    'CorruptRecordError',
    # Responses
    'create_success_response',
    'create_no_content_response',
    'create_error_response',
]
