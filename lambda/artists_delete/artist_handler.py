"""
Artist deletion Lambda handler.

Entry point for DELETE /artist/{artist}. Removes every album of the artist
in batches of 25, retrying unprocessed keys with exponential backoff.
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
    Lambda handler for artist deletion.

    Response codes:
        200: Artist deleted, or artist had no albums
        207: Some albums could not be deleted (PROPAGATE_PARTIAL_FAILURE=true only)
        400: Blank artist
        500: Store unavailable or internal error
        503: Request deadline exceeded
    """
    return handle_api_event(
        event,
        context,
        catalog_service,
        config,
        operation='DeleteArtist',
        cloudwatch=cloudwatch
    )
