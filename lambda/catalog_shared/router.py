"""
Ingress routing for the catalog.

Maps API Gateway proxy events and SQS batches onto CatalogService operations,
and maps results and errors back onto HTTP responses or per-message failure
reports.

Request flow (API):
1. Resolve the operation from (httpMethod, resource)
2. Create structured logger with correlation ID and log request start
3. Decode path parameters / body (fail fast on invalid input)
4. Delegate to the service under a request deadline
5. Map domain errors to HTTP responses
6. Log request completion and publish metrics

Queue flow: the same steps per record; a failing record is reported in
batchItemFailures and never aborts the rest of the batch.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from catalog_shared.errors import DomainError, NotFoundError, ValidationError
from catalog_shared.logger import StructuredLogger, create_logger
from catalog_shared.messages import QueueMessage, decode_queue_record
from catalog_shared.metrics import METRIC_NAMESPACE
from catalog_shared.responses import (
    create_error_response,
    create_no_content_response,
    create_success_response,
    status_code_for,
)
from catalog_shared.retry import Deadline
from catalog_shared.service import CatalogService
from catalog_shared.transcoder import decode_album_key, decode_artist, parse_json_body
from catalog_shared.types import BatchItemFailure, Operation


ROUTES: Dict[Tuple[str, str], Operation] = {
    ('POST', '/album'): 'CreateAlbum',
    ('DELETE', '/album/{artist}/{album}'): 'DeleteAlbum',
    ('DELETE', '/artist/{artist}'): 'DeleteArtist',
    ('GET', '/all'): 'ListAlbums',
}

# Operation name used for logs and the metrics 'Operation' dimension
METRIC_OPERATIONS = {
    'CreateAlbum': 'albums-create',
    'DeleteAlbum': 'albums-delete',
    'DeleteArtist': 'artists-delete',
    'ListAlbums': 'albums-list',
}

QUEUE_METRIC_OPERATION = 'albums-queue'

_PLACEHOLDER = re.compile(r'\{(\w+)\}')


def _template_pattern(template: str) -> 're.Pattern[str]':
    return re.compile('^' + _PLACEHOLDER.sub(r'(?P<\1>[^/]+)', template) + '/?$')


_ROUTE_PATTERNS = [
    (method, template, _template_pattern(template), operation)
    for (method, template), operation in ROUTES.items()
]


def resolve_route(event: Dict[str, Any]) -> Tuple[Optional[Operation], Dict[str, str], bool]:
    """
    Resolve the operation and path parameters of a proxy event.

    The 'resource' template is used when present; otherwise the raw 'path' is
    matched against the known templates.

    Returns:
        (operation or None, path parameters, whether the parameters are still
        URL-encoded). pathParameters arrive URL-encoded; segments cut from
        'path' have already been decoded by the gateway.
    """
    method = (event.get('httpMethod') or '').upper()
    resource = event.get('resource')
    path_parameters = event.get('pathParameters') or {}

    if resource and (method, resource) in ROUTES:
        return ROUTES[(method, resource)], dict(path_parameters), True

    path = event.get('path') or ''
    for route_method, _, pattern, operation in _ROUTE_PATTERNS:
        if route_method != method:
            continue
        match = pattern.match(path)
        if match:
            return operation, match.groupdict(), False

    return None, {}, True


def _dispatch(
    operation: str,
    event: Dict[str, Any],
    path_parameters: Dict[str, str],
    url_encoded: bool,
    service: CatalogService,
    deadline: Deadline,
    logger: StructuredLogger
) -> Dict[str, Any]:
    if operation == 'CreateAlbum':
        payload = parse_json_body(event.get('body'))
        record = service.create_album(payload, deadline=deadline)
        logger.log_request_complete(
            status_code=204,
            artist=record['artist'],
            album=record['album'],
            trackCount=len(record['tracks'])
        )
        return create_no_content_response()

    if operation == 'DeleteAlbum':
        key = decode_album_key(
            path_parameters.get('artist'),
            path_parameters.get('album'),
            url_encoded=url_encoded
        )
        result = service.delete_album(key['artist'], key['album'], deadline=deadline, logger=logger)
        logger.log_request_complete(status_code=200, artist=result['artist'], album=result['album'])
        return create_success_response(200, result)

    if operation == 'DeleteArtist':
        artist = decode_artist(path_parameters.get('artist'), url_encoded=url_encoded)
        status_code, body = service.delete_artist(artist, deadline=deadline, logger=logger)
        logger.log_request_complete(status_code=status_code, artist=artist)
        return create_success_response(status_code, body)

    if operation == 'ListAlbums':
        albums = service.list_albums(deadline=deadline)
        logger.log_request_complete(status_code=200, albumCount=len(albums))
        return create_success_response(200, albums)

    raise ValueError(f'Unknown operation: {operation}')


def handle_api_event(
    event: Dict[str, Any],
    context: Any,
    service: CatalogService,
    config: Dict[str, Any],
    operation: Optional[str] = None,
    cloudwatch: Any = None
) -> Dict[str, Any]:
    """
    Handle one API Gateway proxy event.

    Args:
        event: API Gateway Lambda proxy integration event
        context: Lambda context object
        service: Process-wide CatalogService
        config: Loaded catalog configuration
        operation: Fixed operation for single-operation functions; resolved
            from the route when omitted
        cloudwatch: Shared CloudWatch client (None disables metrics)

    Returns:
        API Gateway Lambda proxy integration response

    Response codes:
        200: Album deleted, artist deleted, albums listed
        204: Album created
        207: Artist partially deleted (only with PROPAGATE_PARTIAL_FAILURE)
        400: Validation error (invalid JSON, missing or blank fields)
        404: Album or route not found
        500: Store unavailable, corrupt record, internal error
        503: Request deadline exceeded
    """
    resolved, path_parameters, url_encoded = resolve_route(event)
    if operation is None:
        operation = resolved
    if not path_parameters:
        path_parameters = dict(event.get('pathParameters') or {})
        url_encoded = True

    namespace = config.get('metric_namespace', METRIC_NAMESPACE)
    logger = create_logger(
        event,
        operation=METRIC_OPERATIONS.get(operation, 'catalog-api'),
        cloudwatch=cloudwatch,
        namespace=namespace
    )
    logger.log_request_start(
        path=event.get('path', ''),
        method=event.get('httpMethod', '')
    )

    try:
        if operation is None:
            logger.log_domain_error(
                error_code='ROUTE_NOT_FOUND',
                error_message='No route matches the request'
            )
            return create_error_response(
                404,
                'ROUTE_NOT_FOUND',
                f"No route for {event.get('httpMethod', '')} {event.get('path', '')}"
            )

        deadline = Deadline.from_context(context, config['request_timeout_ms'])
        return _dispatch(operation, event, path_parameters, url_encoded, service, deadline, logger)

    except ValidationError as error:
        logger.log_validation_error(errors=error.details)
        return create_error_response(400, error.code, error.message, error.details)

    except DomainError as error:
        logger.log_domain_error(
            error_code=error.code,
            error_message=error.message,
            retryable=error.retryable
        )
        # Store and record details stay in the logs
        return create_error_response(status_code_for(error.code), error.code, error.message)

    except Exception as error:
        # Do not expose internal details to the client
        logger.log_unexpected_error(
            error_type=type(error).__name__,
            error_message=str(error)
        )
        return create_error_response(500, 'INTERNAL_ERROR', 'An unexpected error occurred')

    finally:
        logger.publish_metrics()


def _payload_object(message: QueueMessage) -> Dict[str, Any]:
    if not isinstance(message.payload, dict):
        raise ValidationError(
            'Queue message body must be a JSON object',
            {'messageId': message.message_id}
        )
    return message.payload


def _process_message(
    message: QueueMessage,
    service: CatalogService,
    deadline: Deadline,
    logger: StructuredLogger
) -> None:
    if message.operation == 'CreateAlbum':
        record = service.create_album(message.payload, deadline=deadline)
        logger.log_info(message='album_created', artist=record['artist'], album=record['album'])
        return

    if message.operation == 'DeleteAlbum':
        payload = _payload_object(message)
        try:
            service.delete_album(payload.get('artist'), payload.get('album'), deadline=deadline, logger=logger)
        except NotFoundError as error:
            # A redelivered delete finds nothing left to remove
            logger.log_info(message='album_already_absent', detail=error.message)
        return

    if message.operation == 'DeleteArtist':
        payload = _payload_object(message)
        status_code, body = service.delete_artist(payload.get('artist'), deadline=deadline, logger=logger)
        if status_code != 200:
            raise DomainError('PARTIAL_FAILURE', body['message'], {'unprocessed': body.get('unprocessed', [])})
        return

    if message.operation == 'ListAlbums':
        albums = service.list_albums(deadline=deadline)
        logger.log_info(message='albums_listed', albumCount=len(albums))
        return

    raise ValueError(f'Unknown queue operation: {message.operation}')


def handle_queue_event(
    event: Dict[str, Any],
    context: Any,
    service: CatalogService,
    config: Dict[str, Any],
    default_operation: Optional[str] = None,
    cloudwatch: Any = None
) -> Dict[str, List[BatchItemFailure]]:
    """
    Handle one SQS batch.

    Every record is processed independently. Records that fail (including
    invalid ones, so they end up in the dead-letter queue) are returned in
    batchItemFailures for redelivery; the others are deleted from the queue.

    Args:
        event: SQS event
        context: Lambda context object
        service: Process-wide CatalogService
        config: Loaded catalog configuration
        default_operation: Operation for records that carry none (falls back
            to config['queue_operation'])
        cloudwatch: Shared CloudWatch client (None disables metrics)

    Returns:
        SQS partial batch response {'batchItemFailures': [{'itemIdentifier': messageId}]}
    """
    default_operation = default_operation or config.get('queue_operation') or None
    namespace = config.get('metric_namespace', METRIC_NAMESPACE)
    failures: List[BatchItemFailure] = []

    for record in event.get('Records') or []:
        message_id = record.get('messageId', 'unknown')
        logger = create_logger(
            record,
            operation=QUEUE_METRIC_OPERATION,
            cloudwatch=cloudwatch,
            namespace=namespace,
            correlation_id=message_id
        )
        logger.log_request_start(path=record.get('eventSourceARN', 'sqs'), method='SQS')

        try:
            message = decode_queue_record(record, default_operation)
            deadline = Deadline.from_context(context, config['request_timeout_ms'])
            _process_message(message, service, deadline, logger)
            logger.log_request_complete(status_code=200, queueOperation=message.operation)

        except ValidationError as error:
            logger.log_validation_error(errors=error.details)
            failures.append({'itemIdentifier': message_id})

        except DomainError as error:
            logger.log_domain_error(
                error_code=error.code,
                error_message=error.message,
                retryable=error.retryable
            )
            failures.append({'itemIdentifier': message_id})

        except Exception as error:
            logger.log_unexpected_error(
                error_type=type(error).__name__,
                error_message=str(error)
            )
            failures.append({'itemIdentifier': message_id})

        finally:
            logger.publish_metrics()

    return {'batchItemFailures': failures}
