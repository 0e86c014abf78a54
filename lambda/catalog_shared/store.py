"""
Catalog store adapter.

Typed access to the DynamoDB catalog table, keyed by Artist (partition key) and
Album (sort key). Items are stored as:

    {
        "Artist": "string",
        "Album": "string",
        "Tracks": [{"Title": "string", "Length": "string"}, ...]
    }

The adapter follows pagination internally, so query() and scan_all() always
return complete results. Throttling and connectivity failures surface as
StoreUnavailableError; items that cannot be read back surface as
CorruptRecordError and are never skipped.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from catalog_shared.errors import CorruptRecordError, StoreUnavailableError
from catalog_shared.retry import Deadline
from catalog_shared.types import AlbumKey, AlbumRecord, Track


# BatchWriteItem accepts at most 25 requests per call
MAX_BATCH_SIZE = 25

# DynamoDB error codes that describe a transient condition
RETRYABLE_ERROR_CODES = {
    'ProvisionedThroughputExceededException',
    'ThrottlingException',
    'RequestLimitExceeded',
    'InternalServerError',
    'ServiceUnavailable',
}

# Bounds every individual store call; the SDK's own retries stay short so the
# request deadline remains meaningful
DYNAMODB_CLIENT_CONFIG = Config(
    connect_timeout=2,
    read_timeout=5,
    retries={'max_attempts': 3, 'mode': 'standard'},
)


def build_catalog_table(table_name: str, dynamodb: Any = None) -> Any:
    """
    Build the DynamoDB Table resource for the catalog.

    Called once per process at cold start; the result is injected into
    CatalogStore.

    Args:
        table_name: Name of the catalog table
        dynamodb: Existing DynamoDB service resource (optional)
    """
    if dynamodb is None:
        dynamodb = boto3.resource('dynamodb', config=DYNAMODB_CLIENT_CONFIG)
    return dynamodb.Table(table_name)


def record_to_item(record: AlbumRecord) -> Dict[str, Any]:
    """Convert an album record into a DynamoDB item."""
    return {
        'Artist': record['artist'],
        'Album': record['album'],
        'Tracks': [
            {'Title': track['title'], 'Length': track['length']}
            for track in record.get('tracks') or []
        ],
    }


def key_to_item_key(key: AlbumKey) -> Dict[str, str]:
    return {'Artist': key['artist'], 'Album': key['album']}


def item_key_to_key(item_key: Dict[str, Any]) -> AlbumKey:
    return {'artist': item_key['Artist'], 'album': item_key['Album']}


def item_to_record(item: Dict[str, Any]) -> AlbumRecord:
    """
    Convert a DynamoDB item back into an album record.

    Items written without a Tracks attribute read back with an empty track list.

    Raises:
        CorruptRecordError: If keys are missing or tracks are malformed
    """
    artist = item.get('Artist')
    album = item.get('Album')
    if not isinstance(artist, str) or not artist or not isinstance(album, str) or not album:
        raise CorruptRecordError(
            'Stored album item is missing its Artist/Album key',
            {'artist': str(artist), 'album': str(album)}
        )

    raw_tracks = item.get('Tracks')
    if raw_tracks is None:
        raw_tracks = []
    if not isinstance(raw_tracks, list):
        raise CorruptRecordError(
            f"Stored album '{album}' by '{artist}' has a non-list Tracks attribute",
            {'artist': artist, 'album': album}
        )

    tracks: List[Track] = []
    for index, raw in enumerate(raw_tracks):
        if not isinstance(raw, dict):
            raise CorruptRecordError(
                f"Stored album '{album}' by '{artist}' has a malformed track at position {index}",
                {'artist': artist, 'album': album, 'track': index}
            )
        title = raw.get('Title', '')
        length = raw.get('Length', '')
        if not isinstance(title, str) or not isinstance(length, str):
            raise CorruptRecordError(
                f"Stored album '{album}' by '{artist}' has a non-string track field at position {index}",
                {'artist': artist, 'album': album, 'track': index}
            )
        tracks.append({'title': title, 'length': length})

    return {'artist': artist, 'album': album, 'tracks': tracks}


class CatalogStore:
    """
    Adapter over the catalog table.

    The table resource is created once per process and injected; the adapter
    keeps no per-request state and is safe to share between requests.
    """

    def __init__(self, table: Any):
        """
        Args:
            table: boto3 DynamoDB Table resource for the catalog
        """
        self.table = table
        self.table_name = table.name
        self.client = table.meta.client

    @contextmanager
    def _store_errors(self, operation: str, **context: Any) -> Iterator[None]:
        """Translate transient SDK failures into StoreUnavailableError."""
        try:
            yield
        except ClientError as error:
            code = error.response.get('Error', {}).get('Code', 'Unknown')
            if code in RETRYABLE_ERROR_CODES:
                raise StoreUnavailableError(
                    f"Catalog store unavailable during '{operation}'",
                    {'operation': operation, 'awsErrorCode': code, **context}
                ) from error
            raise
        except (EndpointConnectionError, ConnectTimeoutError,
                ReadTimeoutError, ConnectionClosedError) as error:
            raise StoreUnavailableError(
                f"Catalog store unreachable during '{operation}'",
                {'operation': operation, 'errorType': type(error).__name__, **context}
            ) from error

    def put(self, record: AlbumRecord) -> None:
        """
        Write an album, fully replacing any record under the same key.

        Raises:
            ValueError: If artist or album is empty
            StoreUnavailableError: If the store is throttling or unreachable
        """
        if not record.get('artist') or not record.get('album'):
            raise ValueError('artist and album are required to store an album')

        with self._store_errors('put', artist=record['artist'], album=record['album']):
            self.table.put_item(Item=record_to_item(record))

    def delete(self, artist: str, album: str, logger: Any = None) -> Optional[AlbumRecord]:
        """
        Atomically delete an album and return what was there.

        Uses ReturnValues=ALL_OLD, so existence check and deletion are a
        single store operation. A deleted item whose tracks cannot be read
        back is still reported as deleted, with an empty track list and a
        warning on `logger`.

        Returns:
            The deleted record, or None if nothing existed under the key
        """
        if not artist or not album:
            raise ValueError('artist and album are required to delete an album')

        with self._store_errors('delete', artist=artist, album=album):
            response = self.table.delete_item(
                Key={'Artist': artist, 'Album': album},
                ReturnValues='ALL_OLD'
            )

        attributes = response.get('Attributes')
        if not attributes:
            return None

        try:
            return item_to_record(attributes)
        except CorruptRecordError as error:
            # The item is already gone; confirm it by the key it was stored under
            if logger is not None:
                logger.log_warning(
                    message='deleted_corrupt_record',
                    artist=artist,
                    album=album,
                    detail=error.message
                )
            return {
                'artist': attributes.get('Artist', artist),
                'album': attributes.get('Album', album),
                'tracks': [],
            }

    def query(self, artist: str, deadline: Optional[Deadline] = None) -> List[AlbumRecord]:
        """
        Return every album of one artist, following LastEvaluatedKey until exhausted.
        """
        if not artist:
            raise ValueError('artist is required to query albums')

        query_params: Dict[str, Any] = {
            'KeyConditionExpression': '#artist = :artist',
            'ExpressionAttributeNames': {'#artist': 'Artist'},
            'ExpressionAttributeValues': {':artist': artist},
        }
        return self._collect('query', self.table.query, query_params, deadline, artist=artist)

    def query_keys(self, artist: str, deadline: Optional[Deadline] = None) -> List[AlbumKey]:
        """
        Return the keys of every album of one artist.

        Only Artist and Album are projected, so albums with unreadable tracks
        can still be addressed for deletion.
        """
        if not artist:
            raise ValueError('artist is required to query albums')

        query_params: Dict[str, Any] = {
            'KeyConditionExpression': '#artist = :artist',
            'ProjectionExpression': '#artist, #album',
            'ExpressionAttributeNames': {'#artist': 'Artist', '#album': 'Album'},
            'ExpressionAttributeValues': {':artist': artist},
        }
        return self._collect(
            'query', self.table.query, query_params, deadline,
            convert=item_key_to_key, artist=artist
        )

    def scan_all(self, deadline: Optional[Deadline] = None) -> List[AlbumRecord]:
        """Return every album in the table, following LastEvaluatedKey until exhausted."""
        return self._collect('scan', self.table.scan, {}, deadline)

    def _collect(
        self,
        operation: str,
        call: Any,
        params: Dict[str, Any],
        deadline: Optional[Deadline],
        convert: Callable[[Dict[str, Any]], Any] = item_to_record,
        **context: Any
    ) -> List[Any]:
        records: List[Any] = []
        start_key = None

        while True:
            if deadline is not None:
                deadline.check(operation)

            page_params = dict(params)
            if start_key:
                page_params['ExclusiveStartKey'] = start_key

            with self._store_errors(operation, **context):
                response = call(**page_params)

            for item in response.get('Items', []):
                records.append(convert(item))

            start_key = response.get('LastEvaluatedKey')
            if not start_key:
                return records

    def batch_delete(self, keys: List[AlbumKey]) -> List[AlbumKey]:
        """
        Delete up to MAX_BATCH_SIZE albums in one BatchWriteItem call.

        Returns:
            Keys the store reported as unprocessed (empty when all were deleted)

        Raises:
            ValueError: If more than MAX_BATCH_SIZE keys are given
        """
        if not keys:
            return []
        if len(keys) > MAX_BATCH_SIZE:
            raise ValueError(f'batch_delete accepts at most {MAX_BATCH_SIZE} keys, got {len(keys)}')

        request_items = {
            self.table_name: [
                {'DeleteRequest': {'Key': key_to_item_key(key)}}
                for key in keys
            ]
        }

        with self._store_errors('batch_delete', batchSize=len(keys)):
            response = self.client.batch_write_item(RequestItems=request_items)

        unprocessed = (response.get('UnprocessedItems') or {}).get(self.table_name, [])
        return [
            item_key_to_key(request['DeleteRequest']['Key'])
            for request in unprocessed
            if 'DeleteRequest' in request
        ]
