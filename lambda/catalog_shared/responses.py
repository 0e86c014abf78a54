"""
Response helper functions for Lambda handlers.

These functions create consistent API Gateway proxy responses. Every error
response carries a stable 'error' code and a human-readable 'message'.
"""

import json
from typing import Dict, Any, List, Union

from catalog_shared.types import ErrorResponse


# Error code to HTTP status code mapping
STATUS_CODE_MAP = {
    'VALIDATION_ERROR': 400,
    'NOT_FOUND': 404,
    'ROUTE_NOT_FOUND': 404,
    'CONFLICT': 409,
    'STORE_UNAVAILABLE': 500,
    'CORRUPT_RECORD': 500,
    'INTERNAL_ERROR': 500,
    'TIMEOUT': 503,
}

JSON_HEADERS = {
    'Content-Type': 'application/json'
}


def status_code_for(error_code: str) -> int:
    """Return the HTTP status code for an error code (500 when unknown)."""
    return STATUS_CODE_MAP.get(error_code, 500)


def create_success_response(
    status_code: int,
    data: Union[Dict[str, Any], List[Any]]
) -> Dict[str, Any]:
    """
    Create a successful HTTP response.

    Args:
        status_code: HTTP status code (200, 201, 207, etc.)
        data: Response payload to be JSON serialized (object or array)

    Returns:
        Lambda proxy integration response object
    """
    return {
        'statusCode': status_code,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(data)
    }


def create_no_content_response() -> Dict[str, Any]:
    """Create a 204 No Content response with an empty body."""
    return {
        'statusCode': 204,
        'headers': dict(JSON_HEADERS),
        'body': ''
    }


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Dict[str, Any] = None
) -> Dict[str, Any]:
    """
    Create an error HTTP response with consistent structure.

    All error responses follow the format:
    {
        "error": "ERROR_CODE",
        "message": "Human-readable message",
        "details": { ... }          (only when there is something to report)
    }

    Args:
        status_code: HTTP status code (400, 404, 500, etc.)
        code: Error code string (VALIDATION_ERROR, NOT_FOUND, TIMEOUT, etc.)
        message: Human-readable error message
        details: Additional error context (field errors, keys, etc.)

    Returns:
        Lambda proxy integration response object
    """
    body: ErrorResponse = {
        'error': code,
        'message': message
    }
    if details:
        body['details'] = details

    return {
        'statusCode': status_code,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body)
    }
