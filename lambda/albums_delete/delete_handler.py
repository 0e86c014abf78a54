"""
Album deletion Lambda handler.

Entry point for DELETE /album/{artist}/{album}. Path parameters are
URL-decoded once; the delete is a single atomic read-and-delete.
"""

from typing import Dict, Any

from catalog_shared.config import load_catalog_config
from catalog_shared.metrics import create_cloudwatch_client
from catalog_shared.router import handle_api_event
from catalog_shared.service import build_catalog_service


# Load configuration at module initialization (cold start)
config = load_catalog_config()

cloudwatch = create_cloudwatch_client(config)
catalog_service = build_catalog_service(config)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for album deletion.

    Response codes:
        200: Album deleted, body {artist, album}
        400: Blank artist or album
        404: No album under the key, body {error, message}
        500: Store unavailable or internal error
        503: Request deadline exceeded
    """
    return handle_api_event(
        event,
        context,
        catalog_service,
        config,
        operation='DeleteAlbum',
        cloudwatch=cloudwatch
    )
