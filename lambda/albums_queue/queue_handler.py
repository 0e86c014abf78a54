"""
Catalog queue consumer Lambda handler.

Processes SQS batches (optionally fed by an SNS topic) carrying CreateAlbum,
DeleteAlbum and DeleteArtist messages. The function must be configured with
ReportBatchItemFailures so only failed messages are redelivered.

The operation of each message comes from the SNS 'http' attribute, the SQS
'operation' attribute, or QUEUE_OPERATION for queues dedicated to one
operation.
"""

from typing import Dict, Any

from catalog_shared.config import load_catalog_config
from catalog_shared.metrics import create_cloudwatch_client
from catalog_shared.router import handle_queue_event
from catalog_shared.service import build_catalog_service


# Load configuration at module initialization (cold start)
config = load_catalog_config()

cloudwatch = create_cloudwatch_client(config)
catalog_service = build_catalog_service(config)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for catalog queue messages.

    Args:
        event: SQS event
        context: Lambda context object

    Returns:
        Partial batch response {'batchItemFailures': [{'itemIdentifier': messageId}]}
    """
    return handle_queue_event(event, context, catalog_service, config, cloudwatch=cloudwatch)
