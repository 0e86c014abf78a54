"""
Album listing Lambda handler.

Entry point for GET /all: returns every album in the catalog as a JSON array.
"""

from typing import Dict, Any

from catalog_shared.config import load_catalog_config
from catalog_shared.metrics import create_cloudwatch_client
from catalog_shared.router import handle_api_event
from catalog_shared.service import build_catalog_service


config = load_catalog_config()

cloudwatch = create_cloudwatch_client(config)
catalog_service = build_catalog_service(config)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for GET /all (200 with an array, never null)."""
    return handle_api_event(
        event,
        context,
        catalog_service,
        config,
        operation='ListAlbums',
        cloudwatch=cloudwatch
    )
