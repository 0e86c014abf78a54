"""
Conversion between wire-level JSON payloads and album records.

Decoding validates first (see validation.py) and raises ValidationError, so a
bad payload never reaches the store. Encoding always emits a 'tracks' array,
empty when the album has no tracks.
"""

import json
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

from catalog_shared.errors import ValidationError, NotFoundError
from catalog_shared.types import AlbumRecord, AlbumKey, ArtistDeletion, Track
from catalog_shared.validation import (
    validate_album_request,
    validate_album_key,
    validate_artist,
)


def parse_json_body(body: Any) -> Any:
    """
    Decode a proxy event body.

    Strings are parsed as JSON; already-decoded values are returned as is and
    a missing body decodes to an empty object.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    if body is None:
        return {}
    if isinstance(body, (bytes, bytearray)):
        body = body.decode('utf-8')
    if not isinstance(body, str):
        return body
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        raise ValidationError(
            'Invalid JSON in request body',
            {'body': 'Request body must be valid JSON'}
        )


def decode_album_request(payload: Any) -> AlbumRecord:
    """
    Decode a create-album payload into an album record.

    Args:
        payload: Decoded JSON payload {artist, album, tracks?}

    Returns:
        AlbumRecord with tracks in payload order ([] when absent or null)

    Raises:
        ValidationError: If artist/album are missing or blank, or tracks are malformed
    """
    errors = validate_album_request(payload)
    if errors:
        raise ValidationError('Invalid request data', {'errors': errors})

    tracks: List[Track] = []
    for track in payload.get('tracks') or []:
        tracks.append({
            'title': track.get('title') or '',
            'length': track.get('length') or '',
        })

    return {
        'artist': payload['artist'],
        'album': payload['album'],
        'tracks': tracks,
    }


def decode_album_key(artist: Any, album: Any, url_encoded: bool = False) -> AlbumKey:
    """
    Decode and validate an (artist, album) key.

    Args:
        artist: Artist value from a path parameter or message
        album: Album value from a path parameter or message
        url_encoded: True when the values come from a URL path

    Raises:
        ValidationError: If either value is missing or blank
    """
    if url_encoded:
        artist = unquote(artist) if isinstance(artist, str) else artist
        album = unquote(album) if isinstance(album, str) else album

    errors = validate_album_key(artist, album)
    if errors:
        raise ValidationError('Invalid album key', {'errors': errors})

    return {'artist': artist, 'album': album}


def decode_artist(artist: Any, url_encoded: bool = False) -> str:
    """Decode and validate an artist path parameter or message field."""
    if url_encoded and isinstance(artist, str):
        artist = unquote(artist)

    errors = validate_artist(artist)
    if errors:
        raise ValidationError('Invalid artist', {'errors': errors})

    return artist


def encode_album(record: AlbumRecord) -> Dict[str, Any]:
    """Encode one album for the list response; 'tracks' is never omitted."""
    return {
        'artist': record['artist'],
        'album': record['album'],
        'tracks': [
            {'title': track['title'], 'length': track['length']}
            for track in record.get('tracks') or []
        ],
    }


def encode_album_list(records: List[AlbumRecord]) -> List[Dict[str, Any]]:
    """Encode the full catalog listing; an empty store encodes to []."""
    return [encode_album(record) for record in records]


def encode_delete_result(
    previous: Optional[AlbumRecord],
    artist: str,
    album: str
) -> Dict[str, str]:
    """
    Encode the outcome of a single-album delete.

    Args:
        previous: The record that existed before deletion, or None
        artist: Requested artist
        album: Requested album

    Returns:
        {'artist', 'album'} confirming what was removed

    Raises:
        NotFoundError: If nothing existed under the key
    """
    if previous is None:
        raise album_not_found(artist, album)

    return {
        'artist': previous['artist'],
        'album': previous['album'],
    }


def album_not_found(artist: str, album: str) -> NotFoundError:
    """Build the not-found error for a missing (artist, album) key."""
    return NotFoundError(
        f"Album '{album}' by artist '{artist}' was not found in the catalog"
    )


def encode_artist_deletion(
    result: ArtistDeletion,
    propagate_partial_failure: bool = False
) -> Tuple[int, Dict[str, Any]]:
    """
    Encode the outcome of an artist deletion as (status code, body).

    An artist with no albums and a deletion that left keys behind both report
    200 with a message. Leftover keys only turn into a 207 degraded result,
    listing the keys, when propagate_partial_failure is enabled.
    """
    artist = result['artist']

    if not result['found']:
        return 200, {'message': f"Artist '{artist}' was not found; nothing to delete"}

    if result['unprocessed'] and propagate_partial_failure:
        return 207, {
            'message': (
                f"Artist '{artist}' was partially deleted: "
                f"{len(result['unprocessed'])} of {result['requested']} albums remain"
            ),
            'deleted': result['deleted'],
            'unprocessed': [
                {'artist': key['artist'], 'album': key['album']}
                for key in result['unprocessed']
            ],
        }

    return 200, {'message': f"Artist '{artist}' was deleted successfully"}
