"""
Album creation Lambda handler.

This handler implements the API entry point for POST /album.
It follows the Lambda-per-operation pattern with clear separation of concerns:
- Handler: wire configuration and clients at cold start
- Router: parse request, map errors to HTTP responses (catalog_shared.router)
- Service: business logic (catalog_shared.service)

Configuration is read once at startup and validated on boot.
"""

from typing import Dict, Any

from catalog_shared.config import load_catalog_config
from catalog_shared.metrics import create_cloudwatch_client
from catalog_shared.router import handle_api_event
from catalog_shared.service import build_catalog_service


# Load configuration at module initialization (cold start)
# This will fail fast if configuration is invalid
config = load_catalog_config()

# Initialize clients and service once at cold start
cloudwatch = create_cloudwatch_client(config)
catalog_service = build_catalog_service(config)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for album creation.

    Args:
        event: API Gateway Lambda proxy integration event
        context: Lambda context object

    Returns:
        API Gateway Lambda proxy integration response

    Response codes:
        204: Album created (or replaced)
        400: Validation error (invalid JSON, missing artist/album, malformed tracks)
        500: Store unavailable or internal error
        503: Request deadline exceeded
    """
    return handle_api_event(
        event,
        context,
        catalog_service,
        config,
        operation='CreateAlbum',
        cloudwatch=cloudwatch
    )
