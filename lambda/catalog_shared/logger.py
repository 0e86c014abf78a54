"""
Structured logging utility for Lambda handlers.

This module provides a centralized logging utility that implements structured logging
with correlation IDs, latency tracking, and consistent JSON formatting across all
Lambda handlers. Each log entry is a single JSON object printed to stdout, which
Lambda forwards to CloudWatch Logs.
"""

import json
import time
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from catalog_shared.metrics import create_metrics_client, METRIC_NAMESPACE


# Sensitive field names (lower-cased) that should never be logged
SENSITIVE_FIELDS = {
    'password',
    'token',
    'secret',
    'apikey',
    'api_key',
    'authorization',
    'auth',
    'credentials',
    'privatekey',
    'private_key',
    'accesstoken',
    'access_token',
    'refreshtoken',
    'refresh_token',
    'sessionid',
    'session_id',
    'secretarn',
    'secret_arn'
}


class StructuredLogger:
    """
    Structured logger for Lambda handlers.

    This logger provides methods for logging request lifecycle events with
    correlation IDs, latency tracking, and consistent JSON formatting.
    It also integrates CloudWatch metrics emission.

    Usage:
        logger = StructuredLogger(correlation_id='abc-123', operation='albums-create')
        logger.log_request_start(path='/album', method='POST')
        # ... process request ...
        logger.log_request_complete(status_code=204, artist='A', album='X')
        logger.publish_metrics()
    """

    def __init__(
        self,
        correlation_id: str,
        operation: str,
        cloudwatch: Any = None,
        namespace: str = METRIC_NAMESPACE
    ):
        """
        Initialize the structured logger.

        Args:
            correlation_id: Unique identifier for request tracing
            operation: Operation name for metrics (e.g., 'albums-create')
            cloudwatch: Shared CloudWatch client; None disables metric publishing
            namespace: CloudWatch metric namespace
        """
        self.correlation_id = correlation_id
        self.operation = operation
        self.start_time = time.time()
        self.metrics = create_metrics_client(operation, cloudwatch=cloudwatch, namespace=namespace)

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Remove sensitive fields from log data.

        Recursively replaces the value of any field whose name looks like a
        credential with '[REDACTED]'.

        Args:
            data: Dictionary that may contain sensitive fields

        Returns:
            Sanitized dictionary with sensitive fields redacted
        """
        if not isinstance(data, dict):
            return data

        sanitized = {}
        for key, value in data.items():
            if isinstance(key, str) and key.lower() in SENSITIVE_FIELDS:
                sanitized[key] = '[REDACTED]'
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_data(value)
            elif isinstance(value, list):
                sanitized[key] = [
                    self._sanitize_data(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                sanitized[key] = value

        return sanitized

    def _latency_ms(self) -> int:
        return int((time.time() - self.start_time) * 1000)

    def _log(self, event: str, **kwargs: Any) -> None:
        """
        Internal method to write structured log entry.

        Args:
            event: Event type/name
            **kwargs: Additional fields to include in log entry
        """
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'correlationId': self.correlation_id,
            'operation': self.operation,
            'event': event,
            **self._sanitize_data(kwargs)
        }

        print(json.dumps(log_entry, default=str))

    def log_request_start(
        self,
        path: str,
        method: str,
        **additional_fields: Any
    ) -> None:
        """
        Log request start event.

        Args:
            path: Request path (e.g., '/album/{artist}/{album}')
            method: HTTP method (e.g., 'POST', 'DELETE')
            **additional_fields: Additional fields to include in log
        """
        self._log(
            'request_start',
            path=path,
            httpMethod=method,
            **additional_fields
        )

    def log_request_complete(
        self,
        status_code: int,
        **additional_fields: Any
    ) -> None:
        """
        Log request completion event with latency.

        Also emits CloudWatch metrics for request count and latency.

        Args:
            status_code: HTTP status code (e.g., 200, 204)
            **additional_fields: Additional fields to include in log
        """
        latency_ms = self._latency_ms()

        self._log(
            'request_complete',
            statusCode=status_code,
            latencyMs=latency_ms,
            **additional_fields
        )

        self.metrics.emit_request_count()
        self.metrics.emit_latency(latency_ms)

    def log_validation_error(
        self,
        errors: Any,
        **additional_fields: Any
    ) -> None:
        """
        Log validation error event.

        Args:
            errors: Validation error details
            **additional_fields: Additional fields to include in log
        """
        self._log(
            'validation_error',
            errors=errors,
            latencyMs=self._latency_ms(),
            **additional_fields
        )

        self.metrics.emit_error(error_code='VALIDATION_ERROR')

    def log_domain_error(
        self,
        error_code: str,
        error_message: str,
        **additional_fields: Any
    ) -> None:
        """
        Log domain error event.

        Domain errors are expected business logic errors (album not found,
        store throttled, corrupt record, deadline exceeded).
        Also emits CloudWatch error metric.

        Args:
            error_code: Error code (e.g., 'NOT_FOUND', 'STORE_UNAVAILABLE')
            error_message: Human-readable error message
            **additional_fields: Additional fields to include in log
        """
        latency_ms = self._latency_ms()

        self._log(
            'domain_error',
            errorCode=error_code,
            errorMessage=error_message,
            latencyMs=latency_ms,
            **additional_fields
        )

        self.metrics.emit_error(error_code=error_code)
        self.metrics.emit_latency(latency_ms)

    def log_unexpected_error(
        self,
        error_type: str,
        error_message: str,
        **additional_fields: Any
    ) -> None:
        """
        Log unexpected error event.

        Unexpected errors are system errors that should not occur during normal
        operation. Also emits CloudWatch error metric.

        Args:
            error_type: Error type/class name
            error_message: Error message
            **additional_fields: Additional fields to include in log
        """
        latency_ms = self._latency_ms()

        self._log(
            'unexpected_error',
            errorType=error_type,
            errorMessage=error_message,
            latencyMs=latency_ms,
            **additional_fields
        )

        self.metrics.emit_error(error_code='INTERNAL_ERROR')
        self.metrics.emit_latency(latency_ms)

    def log_info(
        self,
        message: str,
        **additional_fields: Any
    ) -> None:
        """
        Log informational event.

        Example:
            logger.log_info(message='album_created', artist='A', album='X')
        """
        self._log(
            'info',
            message=message,
            **additional_fields
        )

    def log_warning(
        self,
        message: str,
        **additional_fields: Any
    ) -> None:
        """
        Log a warning: the request continues but something was left undone.

        Example:
            logger.log_warning(message='unprocessed_items_remaining', unprocessedCount=2)
        """
        self._log(
            'warning',
            message=message,
            **additional_fields
        )

    def publish_metrics(self) -> None:
        """
        Publish all accumulated metrics to CloudWatch.

        Safe to call even if no metrics were emitted.
        """
        self.metrics.publish()


def create_logger(
    event: Dict[str, Any],
    operation: str,
    cloudwatch: Any = None,
    namespace: str = METRIC_NAMESPACE,
    correlation_id: Optional[str] = None
) -> StructuredLogger:
    """
    Create a structured logger from a Lambda event.

    The correlation ID is taken from the API Gateway request context unless
    one is passed explicitly (queue handlers pass the SQS message id).

    Args:
        event: API Gateway Lambda proxy event (or SQS record)
        operation: Operation name for metrics (e.g., 'albums-create')
        cloudwatch: Shared CloudWatch client (None disables publishing)
        namespace: CloudWatch metric namespace
        correlation_id: Explicit correlation ID (optional)

    Returns:
        StructuredLogger instance
    """
    if correlation_id is None:
        request_context = event.get('requestContext') or {}
        correlation_id = request_context.get('requestId', 'unknown')
    return StructuredLogger(correlation_id, operation, cloudwatch=cloudwatch, namespace=namespace)
