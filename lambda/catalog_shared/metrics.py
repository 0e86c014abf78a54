"""
CloudWatch metrics utility for Lambda handlers.

This module provides a centralized metrics utility that emits custom CloudWatch
metrics for request count, error rate, and latency across all Lambda handlers.

The CloudWatch client is built once per process by the handler module and
passed in; when metrics are disabled no client exists and publishing is a no-op.
"""

import boto3
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone


# Default metric namespace for all catalog metrics
METRIC_NAMESPACE = 'MusicCatalog'

# CloudWatch PutMetricData limit per request
PUBLISH_BATCH_SIZE = 20


class MetricsClient:
    """
    CloudWatch metrics client for Lambda handlers.

    This client accumulates custom metrics with consistent dimensions and
    namespace, then publishes them in a single pass at the end of a request.

    Usage:
        metrics = MetricsClient(operation='albums-create', cloudwatch=cloudwatch)
        metrics.emit_request_count()
        metrics.emit_latency(latency_ms=150)
        metrics.emit_error(error_code='VALIDATION_ERROR')
        metrics.publish()
    """

    def __init__(
        self,
        operation: str,
        cloudwatch: Any = None,
        namespace: str = METRIC_NAMESPACE
    ):
        """
        Initialize the metrics client.

        Args:
            operation: Operation name (e.g., 'albums-create', 'albums-list')
            cloudwatch: boto3 CloudWatch client, or None to skip publishing
            namespace: CloudWatch namespace to publish under
        """
        if not operation or not operation.strip():
            raise ValueError('Operation name is required for metrics')

        self.operation = operation
        self.cloudwatch = cloudwatch
        self.namespace = namespace
        self._metric_data: List[Dict[str, Any]] = []

    @property
    def pending(self) -> List[Dict[str, Any]]:
        """Metrics accumulated and not yet published."""
        return list(self._metric_data)

    def _add_metric(
        self,
        metric_name: str,
        value: float,
        unit: str,
        dimensions: Optional[List[Dict[str, str]]] = None
    ) -> None:
        """
        Add a metric to the batch for publishing.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit (e.g., 'Count', 'Milliseconds')
            dimensions: Additional dimensions (optional)
        """
        all_dimensions = [
            {
                'Name': 'Operation',
                'Value': self.operation
            }
        ]
        if dimensions:
            all_dimensions.extend(dimensions)

        self._metric_data.append({
            'MetricName': metric_name,
            'Value': value,
            'Unit': unit,
            'Timestamp': datetime.now(timezone.utc),
            'Dimensions': all_dimensions
        })

    def emit_request_count(self, count: int = 1) -> None:
        """Emit request count metric."""
        self._add_metric(
            metric_name='RequestCount',
            value=float(count),
            unit='Count'
        )

    def emit_error(self, error_code: Optional[str] = None) -> None:
        """
        Emit error metric.

        Optionally includes error code as a dimension for detailed error tracking.

        Args:
            error_code: Error code (e.g., 'VALIDATION_ERROR', 'NOT_FOUND') (optional)
        """
        dimensions = []
        if error_code:
            dimensions.append({
                'Name': 'ErrorCode',
                'Value': error_code
            })

        self._add_metric(
            metric_name='ErrorCount',
            value=1.0,
            unit='Count',
            dimensions=dimensions if dimensions else None
        )

    def emit_latency(self, latency_ms: int) -> None:
        """
        Emit latency metric.

        Args:
            latency_ms: Latency in milliseconds
        """
        if latency_ms < 0:
            raise ValueError('Latency must be non-negative')

        self._add_metric(
            metric_name='Latency',
            value=float(latency_ms),
            unit='Milliseconds'
        )

    def publish(self) -> None:
        """
        Publish all accumulated metrics to CloudWatch.

        Metrics are sent in batches of PUBLISH_BATCH_SIZE. Failures are printed
        and swallowed: metrics must never fail the request they describe.
        """
        if not self._metric_data:
            return

        if self.cloudwatch is None:
            self._metric_data = []
            return

        try:
            for i in range(0, len(self._metric_data), PUBLISH_BATCH_SIZE):
                batch = self._metric_data[i:i + PUBLISH_BATCH_SIZE]

                self.cloudwatch.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=batch
                )
        except Exception as error:
            print(f'Failed to publish metrics: {error}')
        finally:
            self._metric_data = []


def create_cloudwatch_client(config: Dict[str, Any]) -> Any:
    """
    Build the process-wide CloudWatch client, or None when metrics are disabled.

    Args:
        config: Loaded configuration containing 'metrics_enabled'

    Returns:
        boto3 CloudWatch client or None
    """
    if not config.get('metrics_enabled', True):
        return None
    return boto3.client('cloudwatch')


def create_metrics_client(
    operation: str,
    cloudwatch: Any = None,
    namespace: str = METRIC_NAMESPACE
) -> MetricsClient:
    """
    Create a metrics client for a Lambda operation.

    Args:
        operation: Operation name (e.g., 'albums-create')
        cloudwatch: Shared CloudWatch client (None disables publishing)
        namespace: CloudWatch namespace

    Returns:
        MetricsClient instance
    """
    return MetricsClient(operation, cloudwatch=cloudwatch, namespace=namespace)
