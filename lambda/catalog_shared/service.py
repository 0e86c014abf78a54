"""
Catalog service.

This module implements the four catalog operations on top of the store
adapter, the transcoder and the batch delete orchestrator:
- CreateAlbum: decode payload, write (full replace)
- DeleteAlbum: atomic read-and-delete, 404 when nothing existed
- DeleteArtist: delete every album of an artist in batches
- ListAlbums: full scan

Follows the same rules as the handlers that call it:
- Business logic in services, not handlers
- Fail fast on invalid input (decode before any store call)
- No global mutable state; collaborators are injected
"""

from typing import Any, Dict, List, Optional, Tuple

from catalog_shared.batch_delete import BatchDeleteOrchestrator
from catalog_shared.retry import Deadline
from catalog_shared.store import CatalogStore, build_catalog_table
from catalog_shared.transcoder import (
    decode_album_key,
    decode_album_request,
    decode_artist,
    encode_album_list,
    encode_artist_deletion,
    encode_delete_result,
)
from catalog_shared.types import AlbumRecord


class CatalogService:
    """
    Service class for catalog operations.

    One instance is built per process at cold start and shared by every
    request; it holds no per-request state.
    """

    def __init__(
        self,
        store: CatalogStore,
        batch_deleter: Optional[BatchDeleteOrchestrator] = None,
        propagate_partial_failure: bool = False
    ):
        """
        Args:
            store: Catalog store adapter
            batch_deleter: Orchestrator for artist deletion (built from store when omitted)
            propagate_partial_failure: Report leftover keys of an artist
                deletion as a 207 instead of a plain success
        """
        self.store = store
        self.batch_deleter = batch_deleter or BatchDeleteOrchestrator(store)
        self.propagate_partial_failure = propagate_partial_failure

    def create_album(self, payload: Any, deadline: Optional[Deadline] = None) -> AlbumRecord:
        """
        Create or fully replace an album.

        Args:
            payload: Decoded JSON payload {artist, album, tracks?}
            deadline: Request deadline

        Returns:
            The record as written

        Raises:
            ValidationError: If the payload is invalid (nothing is written)
            StoreUnavailableError: If the store is throttling or unreachable
            RequestTimeoutError: If the deadline is already spent
        """
        record = decode_album_request(payload)

        if deadline is not None:
            deadline.check('put')
        self.store.put(record)

        return record

    def delete_album(
        self,
        artist: str,
        album: str,
        deadline: Optional[Deadline] = None,
        logger: Any = None
    ) -> Dict[str, str]:
        """
        Delete one album.

        Args:
            logger: StructuredLogger for the warning about unreadable tracks (optional)

        Returns:
            {'artist', 'album'} of the removed record

        Raises:
            ValidationError: If artist or album is blank
            NotFoundError: If nothing existed under the key
        """
        key = decode_album_key(artist, album)

        if deadline is not None:
            deadline.check('delete')
        previous = self.store.delete(key['artist'], key['album'], logger=logger)

        return encode_delete_result(previous, key['artist'], key['album'])

    def delete_artist(
        self,
        artist: str,
        deadline: Optional[Deadline] = None,
        logger: Any = None
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Delete every album of an artist.

        An artist with no albums is not an error. Keys the store never
        confirms are logged as a warning; they only change the status code
        when partial failures are propagated.

        Returns:
            (status code, body): 200 normally, 207 for a degraded result
        """
        artist = decode_artist(artist)
        result = self.batch_deleter.delete_artist(artist, deadline=deadline, logger=logger)
        return encode_artist_deletion(result, self.propagate_partial_failure)

    def list_albums(self, deadline: Optional[Deadline] = None) -> List[Dict[str, Any]]:
        """Return every album in the catalog; an empty catalog lists as []."""
        return encode_album_list(self.store.scan_all(deadline=deadline))


def build_catalog_service(config: Dict[str, Any], dynamodb: Any = None) -> CatalogService:
    """
    Build the process-wide service from loaded configuration.

    Args:
        config: Output of load_catalog_config()
        dynamodb: Existing DynamoDB service resource (optional)
    """
    store = CatalogStore(build_catalog_table(config['table_name'], dynamodb=dynamodb))
    return CatalogService(
        store,
        BatchDeleteOrchestrator(store),
        propagate_partial_failure=config.get('propagate_partial_failure', False)
    )
