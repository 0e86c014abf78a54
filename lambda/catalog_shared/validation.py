"""
Input validation for catalog and user requests.

Follows the "fail fast" principle - all validation happens before business logic,
so invalid input never reaches the store.

Every validator returns a list of errors; an empty list means the input is valid.
Each error is a dict with 'field' and 'message' keys.
"""

import re
from typing import Dict, Any, List


# Email regex pattern (RFC 5322 simplified)
# Validates: local-part@domain with basic character restrictions
EMAIL_PATTERN = re.compile(
    r'^[a-zA-Z0-9.!#$%&\'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$'
)

MIN_PASSWORD_LENGTH = 8


def _validate_required_string(request: Dict[str, Any], field: str, errors: List[Dict[str, str]]) -> None:
    if field not in request or request[field] is None:
        errors.append({
            'field': field,
            'message': 'Field is required'
        })
    elif not isinstance(request[field], str):
        errors.append({
            'field': field,
            'message': 'Field must be a string'
        })
    elif not request[field].strip():
        errors.append({
            'field': field,
            'message': 'Field cannot be empty'
        })


def validate_album_request(request: Any) -> List[Dict[str, str]]:
    """
    Validate an album creation request.

    Performs the following validations:
    1. The payload is a JSON object
    2. artist and album are present, strings, and not blank
    3. tracks, when present and not null, is a list of objects
    4. each track's title and length, when present, are strings

    Unknown top-level fields are ignored.

    Args:
        request: Decoded request payload

    Returns:
        List of validation errors. Empty list if validation passes.

    Examples:
        >>> validate_album_request({'artist': 'A', 'album': 'X'})
        []

        >>> validate_album_request({'artist': 'A'})
        [{'field': 'album', 'message': 'Field is required'}]
    """
    errors: List[Dict[str, str]] = []

    if not isinstance(request, dict):
        errors.append({
            'field': 'body',
            'message': 'Request body must be a JSON object'
        })
        return errors

    for field in ('artist', 'album'):
        _validate_required_string(request, field, errors)

    tracks = request.get('tracks')
    if tracks is None:
        return errors

    if not isinstance(tracks, list):
        errors.append({
            'field': 'tracks',
            'message': 'Tracks must be an array'
        })
        return errors

    for index, track in enumerate(tracks):
        if not isinstance(track, dict):
            errors.append({
                'field': f'tracks[{index}]',
                'message': 'Track must be an object'
            })
            continue

        for key in ('title', 'length'):
            if key in track and track[key] is not None and not isinstance(track[key], str):
                errors.append({
                    'field': f'tracks[{index}].{key}',
                    'message': 'Field must be a string'
                })

    return errors


def validate_album_key(artist: Any, album: Any) -> List[Dict[str, str]]:
    """
    Validate the (artist, album) key taken from a path or queue message.

    Returns:
        List of validation errors. Empty list if validation passes.
    """
    errors: List[Dict[str, str]] = []
    _validate_required_string({'artist': artist, 'album': album}, 'artist', errors)
    _validate_required_string({'artist': artist, 'album': album}, 'album', errors)
    return errors


def validate_artist(artist: Any) -> List[Dict[str, str]]:
    """Validate an artist taken from a path or queue message."""
    errors: List[Dict[str, str]] = []
    _validate_required_string({'artist': artist}, 'artist', errors)
    return errors


def validate_registration_request(request: Any) -> List[Dict[str, str]]:
    """
    Validate a user registration request.

    Performs the following validations:
    1. Required fields are present (username, password, email)
    2. Field types are correct and values are not blank
    3. Email format is valid (RFC 5322 simplified)
    4. Password is at least MIN_PASSWORD_LENGTH characters
    5. No unexpected fields are present

    Args:
        request: Registration request payload

    Returns:
        List of validation errors. Empty list if validation passes.
    """
    errors: List[Dict[str, str]] = []

    if not isinstance(request, dict):
        errors.append({
            'field': 'body',
            'message': 'Request body must be a JSON object'
        })
        return errors

    allowed_fields = {'username', 'password', 'email'}

    unexpected_fields = set(request.keys()) - allowed_fields
    for field in sorted(unexpected_fields, key=str):
        errors.append({
            'field': field,
            'message': 'Unexpected field in request'
        })

    for field in ('username', 'password', 'email'):
        _validate_required_string(request, field, errors)

    email = request.get('email')
    if isinstance(email, str) and email.strip() and not validate_email_format(email):
        errors.append({
            'field': 'email',
            'message': 'Invalid email format'
        })

    password = request.get('password')
    if isinstance(password, str) and password.strip() and len(password) < MIN_PASSWORD_LENGTH:
        errors.append({
            'field': 'password',
            'message': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
        })

    return errors


def validate_email_format(email: str) -> bool:
    """
    Validate email format using regex.

    Uses a simplified RFC 5322 pattern that covers most common email formats.

    Examples:
        >>> validate_email_format('user@example.com')
        True

        >>> validate_email_format('invalid-email')
        False
    """
    if not email or not isinstance(email, str):
        return False

    return EMAIL_PATTERN.match(email.strip()) is not None
