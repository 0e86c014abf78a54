"""
Artist deletion: remove every album of one artist in bounded batches.

Flow:
1. Query the keys of the artist's partition (empty -> nothing to do, still a success)
2. Split the keys into batches of BATCH_SIZE
3. Issue one bulk delete per batch
4. Retry whatever the store reports as unprocessed, per the backoff policy
5. Report keys still unprocessed after the last retry
"""

import time
from typing import Any, Callable, List, Optional

from catalog_shared.retry import BackoffPolicy, Deadline, retry_with_backoff
from catalog_shared.store import CatalogStore, MAX_BATCH_SIZE
from catalog_shared.types import AlbumKey, ArtistDeletion


BATCH_SIZE = MAX_BATCH_SIZE

# Fixed retry policy for unprocessed keys: 100, 200, 400 ms
ARTIST_DELETE_POLICY = BackoffPolicy(max_retries=3, base_delay_ms=100, multiplier=2.0)


def partition_keys(keys: List[AlbumKey], size: int = BATCH_SIZE) -> List[List[AlbumKey]]:
    """Split keys into consecutive batches of at most `size`."""
    if size < 1:
        raise ValueError('Batch size must be positive')
    return [keys[i:i + size] for i in range(0, len(keys), size)]


class BatchDeleteOrchestrator:
    """
    Deletes all albums of an artist through the store's bulk delete.

    Usage:
        orchestrator = BatchDeleteOrchestrator(store)
        result = orchestrator.delete_artist('B', deadline=deadline, logger=logger)
        if result['unprocessed']:
            ...  # keys the store never confirmed
    """

    def __init__(
        self,
        store: CatalogStore,
        policy: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Args:
            store: Catalog store adapter
            policy: Retry policy for unprocessed keys (defaults to ARTIST_DELETE_POLICY)
            sleep: Sleep function taking seconds, injectable for tests
        """
        self.store = store
        self.policy = policy or ARTIST_DELETE_POLICY
        self.sleep = sleep

    def delete_artist(
        self,
        artist: str,
        deadline: Optional[Deadline] = None,
        logger: Any = None
    ) -> ArtistDeletion:
        """
        Delete every album of `artist`.

        Args:
            artist: Artist whose albums are removed
            deadline: Request deadline, checked before each store call and wait
            logger: StructuredLogger used for the leftover warning (optional)

        Returns:
            ArtistDeletion summarising what was found, deleted and left behind

        Raises:
            StoreUnavailableError: If the store fails outright
            RequestTimeoutError: If the deadline runs out
        """
        keys: List[AlbumKey] = self.store.query_keys(artist, deadline=deadline)

        if not keys:
            return {
                'artist': artist,
                'found': False,
                'requested': 0,
                'deleted': 0,
                'batches': 0,
                'unprocessed': [],
            }

        batches = partition_keys(keys)
        leftovers: List[AlbumKey] = []

        for index, batch in enumerate(batches):
            if deadline is not None:
                deadline.check('batch_delete')

            unprocessed = self.store.batch_delete(batch)
            if unprocessed:
                outcome = retry_with_backoff(
                    self.store.batch_delete,
                    unprocessed,
                    policy=self.policy,
                    sleep=self.sleep,
                    deadline=deadline,
                    operation='batch_delete'
                )
                unprocessed = outcome.remaining

                if logger is not None and outcome.retries:
                    logger.log_info(
                        message='batch_retried',
                        artist=artist,
                        batch=index,
                        retries=outcome.retries,
                        remainingCount=len(unprocessed)
                    )

            leftovers.extend(unprocessed)

        if leftovers and logger is not None:
            logger.log_warning(
                message='unprocessed_items_remaining',
                artist=artist,
                unprocessedCount=len(leftovers),
                unprocessed=leftovers
            )

        return {
            'artist': artist,
            'found': True,
            'requested': len(keys),
            'deleted': len(keys) - len(leftovers),
            'batches': len(batches),
            'unprocessed': leftovers,
        }
