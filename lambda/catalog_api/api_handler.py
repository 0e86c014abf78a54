"""
Catalog API router Lambda handler.

Single function serving every catalog route through an API Gateway proxy
integration. The operation is resolved from (httpMethod, resource):

    POST   /album                   -> CreateAlbum
    DELETE /album/{artist}/{album}  -> DeleteAlbum
    DELETE /artist/{artist}         -> DeleteArtist
    GET    /all                     -> ListAlbums

Any other route returns 404 ROUTE_NOT_FOUND.
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
    return handle_api_event(event, context, catalog_service, config, cloudwatch=cloudwatch)
