"""
Shared fixtures for the catalog test suite.

Handler modules read their configuration at import time, so the environment
is prepared here, before any test module imports them.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
import pytest
from moto import mock_aws

ROOT = Path(__file__).resolve().parent.parent
LAMBDA_DIR = ROOT / 'lambda'

# Shared library plus every function directory (handler module names are unique)
for function_dir in [
    '',
    'albums_create',
    'albums_delete',
    'artists_delete',
    'albums_list',
    'albums_queue',
    'catalog_api',
    'users_register_create',
    'users_schema_init',
]:
    path = str(LAMBDA_DIR / function_dir)
    if path not in sys.path:
        sys.path.insert(0, path)

TABLE_NAME = 'test-catalog-table'
REGION = 'us-east-1'

os.environ.update({
    'TABLE_NAME': TABLE_NAME,
    'METRICS_ENABLED': 'false',
    'RESOURCE_ARN': 'arn:aws:rds:us-east-1:123456789012:cluster:test-accounts',
    'SECRET_ARN': 'arn:aws:secretsmanager:us-east-1:123456789012:secret:test-accounts',
    'DATABASE_NAME': 'accounts',
    'AWS_DEFAULT_REGION': REGION,
    'AWS_ACCESS_KEY_ID': 'testing',
    'AWS_SECRET_ACCESS_KEY': 'testing',
    'AWS_SECURITY_TOKEN': 'testing',
    'AWS_SESSION_TOKEN': 'testing',
})

from catalog_shared.batch_delete import BatchDeleteOrchestrator  # noqa: E402
from catalog_shared.service import CatalogService  # noqa: E402
from catalog_shared.store import CatalogStore  # noqa: E402


class FakeLambdaContext:
    """Minimal stand-in for the Lambda context object."""

    def __init__(self, remaining_ms: int = 30000, request_id: str = 'test-request-id'):
        self.remaining_ms = remaining_ms
        self.aws_request_id = request_id
        self.function_name = 'test-function'

    def get_remaining_time_in_millis(self) -> int:
        return self.remaining_ms


class SleepRecorder:
    """Sleep replacement that records requested delays instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def dynamodb() -> Any:
    """Mocked DynamoDB resource with the catalog table created."""
    with mock_aws():
        resource = boto3.resource('dynamodb', region_name=REGION)
        resource.create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {'AttributeName': 'Artist', 'KeyType': 'HASH'},
                {'AttributeName': 'Album', 'KeyType': 'RANGE'},
            ],
            AttributeDefinitions=[
                {'AttributeName': 'Artist', 'AttributeType': 'S'},
                {'AttributeName': 'Album', 'AttributeType': 'S'},
            ],
            BillingMode='PAY_PER_REQUEST',
        )
        yield resource


@pytest.fixture
def catalog_table(dynamodb) -> Any:
    return dynamodb.Table(TABLE_NAME)


@pytest.fixture
def store(catalog_table) -> CatalogStore:
    return CatalogStore(catalog_table)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def service(store, sleeps) -> CatalogService:
    return CatalogService(store, BatchDeleteOrchestrator(store, sleep=sleeps))


@pytest.fixture
def catalog_config() -> Dict[str, Any]:
    """Configuration as returned by load_catalog_config() with test values."""
    return {
        'table_name': TABLE_NAME,
        'request_timeout_ms': 10000,
        'propagate_partial_failure': False,
        'metrics_enabled': False,
        'metric_namespace': 'MusicCatalog',
        'queue_operation': '',
    }


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


def make_api_event(
    method: str,
    resource: str,
    path: str,
    path_parameters: Optional[Dict[str, str]] = None,
    body: Any = None,
    request_id: str = 'test-request-id'
) -> Dict[str, Any]:
    """Build an API Gateway proxy event."""
    if body is not None and not isinstance(body, str):
        body = json.dumps(body)
    return {
        'httpMethod': method,
        'resource': resource,
        'path': path,
        'pathParameters': path_parameters,
        'body': body,
        'requestContext': {'requestId': request_id},
    }


def make_sqs_record(
    message_id: str,
    body: Any,
    operation: Optional[str] = None
) -> Dict[str, Any]:
    """Build one SQS record, optionally tagged with an 'operation' attribute."""
    if not isinstance(body, str):
        body = json.dumps(body)
    attributes = {}
    if operation:
        attributes['operation'] = {'stringValue': operation, 'dataType': 'String'}
    return {
        'messageId': message_id,
        'body': body,
        'messageAttributes': attributes,
        'eventSource': 'aws:sqs',
        'eventSourceARN': 'arn:aws:sqs:us-east-1:123456789012:catalog-queue',
    }


def make_sns_record(message_id: str, payload: Any, http: str) -> Dict[str, Any]:
    """Build an SQS record carrying an SNS notification envelope."""
    envelope = {
        'Type': 'Notification',
        'MessageId': f'sns-{message_id}',
        'TopicArn': 'arn:aws:sns:us-east-1:123456789012:catalog-topic',
        'Message': json.dumps(payload),
        'MessageAttributes': {'http': {'Type': 'String', 'Value': http}},
    }
    return make_sqs_record(message_id, envelope)


def response_body(response: Dict[str, Any]) -> Any:
    return json.loads(response['body']) if response['body'] else None
