"""
Decoding of SQS records into catalog operations.

A record's operation is resolved, first match wins, from:
1. the 'http' attribute of an SNS notification envelope (topic fan-out)
2. the 'operation' SQS message attribute
3. the function's configured default (QUEUE_OPERATION)

SNS envelopes are unwrapped so the payload is always the original message.
"""

from typing import Any, Dict, NamedTuple, Optional

from catalog_shared.errors import ValidationError
from catalog_shared.transcoder import parse_json_body
from catalog_shared.types import Operation


# Attribute names carrying the operation
SNS_OPERATION_ATTRIBUTE = 'http'
SQS_OPERATION_ATTRIBUTE = 'operation'

# Publisher-side names accepted alongside the canonical operation names
OPERATION_ALIASES: Dict[str, Operation] = {
    'PostAlbum': 'CreateAlbum',
    'CreateAlbum': 'CreateAlbum',
    'DeleteAlbum': 'DeleteAlbum',
    'DeleteArtist': 'DeleteArtist',
    'ListAlbums': 'ListAlbums',
}

# Operations accepted from the queue
QUEUE_OPERATIONS = {'CreateAlbum', 'DeleteAlbum', 'DeleteArtist', 'ListAlbums'}


class QueueMessage(NamedTuple):
    """One decoded SQS record."""
    message_id: str
    operation: Operation
    payload: Any


def resolve_operation(name: Optional[str]) -> Optional[Operation]:
    """Map an operation name or alias to its canonical name (None when unknown)."""
    if not name:
        return None
    return OPERATION_ALIASES.get(name.strip())


def _sns_attribute(envelope: Dict[str, Any], name: str) -> Optional[str]:
    attribute = (envelope.get('MessageAttributes') or {}).get(name) or {}
    return attribute.get('Value')


def _sqs_attribute(record: Dict[str, Any], name: str) -> Optional[str]:
    attribute = (record.get('messageAttributes') or {}).get(name) or {}
    return attribute.get('stringValue')


def is_sns_envelope(body: Any) -> bool:
    return isinstance(body, dict) and body.get('Type') == 'Notification' and 'Message' in body


def decode_queue_record(
    record: Dict[str, Any],
    default_operation: Optional[str] = None
) -> QueueMessage:
    """
    Decode one SQS record.

    Args:
        record: Record from an SQS event's 'Records' list
        default_operation: Operation used when the record carries none

    Returns:
        QueueMessage with the canonical operation and the decoded payload

    Raises:
        ValidationError: If the body is not JSON, or no valid queue
            operation can be resolved
    """
    message_id = record.get('messageId', 'unknown')
    body = parse_json_body(record.get('body'))

    operation_name = None
    if is_sns_envelope(body):
        operation_name = _sns_attribute(body, SNS_OPERATION_ATTRIBUTE)
        body = parse_json_body(body['Message'])

    if not operation_name:
        operation_name = _sqs_attribute(record, SQS_OPERATION_ATTRIBUTE)

    if not operation_name:
        operation_name = default_operation

    if not operation_name:
        raise ValidationError(
            'Queue message does not name an operation',
            {'messageId': message_id}
        )

    operation = resolve_operation(operation_name)
    if operation not in QUEUE_OPERATIONS:
        raise ValidationError(
            f"Unsupported queue operation '{operation_name}'",
            {'messageId': message_id, 'operation': operation_name}
        )

    return QueueMessage(message_id=message_id, operation=operation, payload=body)
