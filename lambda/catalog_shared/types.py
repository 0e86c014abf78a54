"""
Shared type definitions for the Music Catalog Service.

This module defines TypedDict classes for request/response types and domain models.
"""

from typing import TypedDict, Literal, List, Dict, Any

# Logical operations understood by the ingress router
Operation = Literal[
    'CreateAlbum',
    'DeleteAlbum',
    'DeleteArtist',
    'ListAlbums'
]


class Track(TypedDict):
    """Track embedded in an album; length is kept exactly as supplied."""
    title: str
    length: str


class AlbumRecord(TypedDict):
    """Complete album domain model."""
    artist: str
    album: str
    tracks: List[Track]


class AlbumKey(TypedDict):
    """Compound (partition, sort) key of an album record."""
    artist: str
    album: str


class ArtistDeletion(TypedDict):
    """Outcome of deleting every album of one artist."""
    artist: str
    found: bool
    requested: int
    deleted: int
    batches: int
    unprocessed: List[AlbumKey]


class BatchItemFailure(TypedDict):
    """Failed queue message reported back for redelivery."""
    itemIdentifier: str


class RegistrationRequest(TypedDict):
    """Request payload for user registration."""
    username: str
    password: str
    email: str


class UserAccount(TypedDict):
    """Registered user as returned to clients (never includes the password)."""
    userId: str
    username: str
    email: str
    createdAt: str


class _ErrorResponseBase(TypedDict):
    error: str
    message: str


class ErrorResponse(_ErrorResponseBase, total=False):
    """Standard error response body; details only when there is something to report."""
    details: Dict[str, Any]
