"""
Tests for the catalog service against a moto-backed table.
"""

from unittest.mock import MagicMock

import pytest

from catalog_shared.batch_delete import BatchDeleteOrchestrator
from catalog_shared.errors import NotFoundError, RequestTimeoutError, ValidationError
from catalog_shared.retry import Deadline
from catalog_shared.service import CatalogService, build_catalog_service
from catalog_shared.store import CatalogStore


ALBUM = {'artist': 'A', 'album': 'X', 'tracks': [{'title': 'T1', 'length': '3:00'}]}


class TestCatalogService:

    def test_create_then_list(self, service):
        service.create_album(ALBUM)
        assert service.list_albums() == [ALBUM]

    def test_create_replaces_tracks(self, service):
        service.create_album(ALBUM)
        service.create_album({'artist': 'A', 'album': 'X', 'tracks': [{'title': 'T2', 'length': '2:00'}]})

        albums = service.list_albums()
        assert len(albums) == 1
        assert albums[0]['tracks'] == [{'title': 'T2', 'length': '2:00'}]

    def test_invalid_payload_never_reaches_store(self):
        store = MagicMock(spec=CatalogStore)
        service = CatalogService(store)

        with pytest.raises(ValidationError):
            service.create_album({'artist': 'A', 'tracks': 'nope'})

        store.put.assert_not_called()

    def test_list_empty(self, service):
        assert service.list_albums() == []

    def test_delete_album(self, service):
        service.create_album(ALBUM)
        assert service.delete_album('A', 'X') == {'artist': 'A', 'album': 'X'}
        with pytest.raises(NotFoundError) as exc_info:
            service.delete_album('A', 'X')
        assert "'A'" in exc_info.value.message and "'X'" in exc_info.value.message

    def test_delete_album_blank_key(self, service):
        with pytest.raises(ValidationError):
            service.delete_album('A', ' ')

    def test_empty_album_distinct_from_missing(self, service):
        service.create_album({'artist': 'A', 'album': 'Silence'})
        assert service.list_albums() == [{'artist': 'A', 'album': 'Silence', 'tracks': []}]
        assert service.delete_album('A', 'Silence') == {'artist': 'A', 'album': 'Silence'}

    def test_delete_artist(self, service):
        for i in range(30):
            service.create_album({'artist': 'B', 'album': f'album-{i:02d}'})

        status, body = service.delete_artist('B')

        assert status == 200
        assert 'message' in body
        assert service.list_albums() == []

    def test_delete_unknown_artist(self, service):
        status, body = service.delete_artist('Nobody')
        assert status == 200
        assert 'not found' in body['message']

    def test_partial_failure_propagated(self, store, sleeps):
        deleter = BatchDeleteOrchestrator(store, sleep=sleeps)
        deleter.delete_artist = MagicMock(return_value={
            'artist': 'B',
            'found': True,
            'requested': 2,
            'deleted': 1,
            'batches': 1,
            'unprocessed': [{'artist': 'B', 'album': 'Y'}],
        })

        quiet = CatalogService(store, deleter)
        loud = CatalogService(store, deleter, propagate_partial_failure=True)

        assert quiet.delete_artist('B')[0] == 200
        assert loud.delete_artist('B')[0] == 207

    def test_expired_deadline(self, service):
        with pytest.raises(RequestTimeoutError):
            service.create_album(ALBUM, deadline=Deadline(0))
        assert service.list_albums() == []


class TestBuildCatalogService:

    def test_builds_from_config(self, dynamodb, catalog_config):
        catalog_config['propagate_partial_failure'] = True
        service = build_catalog_service(catalog_config, dynamodb=dynamodb)

        assert service.propagate_partial_failure is True
        assert service.store.table_name == catalog_config['table_name']
        assert service.batch_deleter.store is service.store
