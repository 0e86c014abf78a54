"""
End-to-end tests for the API entry points.
Events go through the real router and service against a moto-backed table.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from catalog_shared.router import handle_api_event, resolve_route
from catalog_shared.errors import StoreUnavailableError
from catalog_shared.service import CatalogService

from conftest import make_api_event, response_body


def post_album(body):
    return make_api_event('POST', '/album', '/album', body=body)


def delete_album(artist, album):
    return make_api_event(
        'DELETE', '/album/{artist}/{album}', f'/album/{artist}/{album}',
        path_parameters={'artist': artist, 'album': album}
    )


def delete_artist(artist):
    return make_api_event(
        'DELETE', '/artist/{artist}', f'/artist/{artist}',
        path_parameters={'artist': artist}
    )


def list_all():
    return make_api_event('GET', '/all', '/all')


@pytest.fixture
def api(service, catalog_config, lambda_context):
    """Call the API router with the test service."""
    def call(event, **kwargs):
        return handle_api_event(event, lambda_context, service, catalog_config, **kwargs)
    return call


class TestResolveRoute:

    def test_resource_template(self):
        operation, params, url_encoded = resolve_route(delete_album('A', 'X'))
        assert operation == 'DeleteAlbum'
        assert params == {'artist': 'A', 'album': 'X'}
        assert url_encoded is True

    def test_raw_path(self):
        event = {'httpMethod': 'DELETE', 'path': '/artist/AC%2FDC'}
        assert resolve_route(event) == ('DeleteArtist', {'artist': 'AC%2FDC'}, False)

    def test_unknown(self):
        assert resolve_route({'httpMethod': 'PUT', 'path': '/album'}) == (None, {}, True)


class TestCatalogApiScenarios:

    def test_create_then_list(self, api):
        created = api(post_album({'artist': 'A', 'album': 'X', 'tracks': [{'title': 'T1', 'length': '3:00'}]}))
        assert created['statusCode'] == 204
        assert created['body'] == ''

        listed = api(list_all())
        assert listed['statusCode'] == 200
        assert response_body(listed) == [
            {'artist': 'A', 'album': 'X', 'tracks': [{'title': 'T1', 'length': '3:00'}]}
        ]

    def test_list_empty_catalog(self, api):
        listed = api(list_all())
        assert listed['statusCode'] == 200
        assert listed['body'] == '[]'

    def test_delete_album_then_again(self, api):
        api(post_album({'artist': 'A', 'album': 'X'}))

        first = api(delete_album('A', 'X'))
        assert first['statusCode'] == 200
        assert response_body(first) == {'artist': 'A', 'album': 'X'}

        second = api(delete_album('A', 'X'))
        body = response_body(second)
        assert second['statusCode'] == 404
        assert set(body) == {'error', 'message'}
        assert body['error'] == 'NOT_FOUND'
        assert "'A'" in body['message'] and "'X'" in body['message']

    def test_delete_album_url_encoded_path(self, api):
        api(post_album({'artist': "Guns N' Roses", 'album': 'Use Your Illusion I'}))

        response = api(delete_album('Guns%20N%27%20Roses', 'Use%20Your%20Illusion%20I'))

        assert response['statusCode'] == 200
        assert response_body(response) == {'artist': "Guns N' Roses", 'album': 'Use Your Illusion I'}

    def test_delete_artist_with_thirty_albums(self, api):
        for i in range(30):
            api(post_album({'artist': 'B', 'album': f'album-{i:02d}'}))

        response = api(delete_artist('B'))

        assert response['statusCode'] == 200
        assert 'message' in response_body(response)
        assert response_body(api(list_all())) == []

    def test_delete_unknown_artist_is_success(self, api):
        response = api(delete_artist('Nobody'))
        assert response['statusCode'] == 200
        assert 'Nobody' in response_body(response)['message']

    def test_missing_album_field(self, api):
        response = api(post_album({'artist': 'A'}))
        body = response_body(response)

        assert response['statusCode'] == 400
        assert body['error'] == 'VALIDATION_ERROR'
        assert body['details']['errors'] == [{'field': 'album', 'message': 'Field is required'}]
        assert response_body(api(list_all())) == []

    def test_invalid_json(self, api):
        response = api(post_album('{"artist": '))
        assert response['statusCode'] == 400
        assert response_body(response)['message'] == 'Invalid JSON in request body'

    def test_unknown_route(self, api):
        response = api(make_api_event('PATCH', '/album', '/album'))
        assert response['statusCode'] == 404
        assert response_body(response)['error'] == 'ROUTE_NOT_FOUND'

    def test_store_unavailable(self, catalog_config, lambda_context):
        service = MagicMock(spec=CatalogService)
        service.list_albums.side_effect = StoreUnavailableError('Catalog store unavailable during \'scan\'', {'awsErrorCode': 'ThrottlingException'})

        response = handle_api_event(list_all(), lambda_context, service, catalog_config)
        body = response_body(response)

        assert response['statusCode'] == 500
        assert body['error'] == 'STORE_UNAVAILABLE'
        assert 'details' not in body

    def test_unexpected_error_hides_details(self, catalog_config, lambda_context):
        service = MagicMock(spec=CatalogService)
        service.list_albums.side_effect = RuntimeError('secret internals')

        response = handle_api_event(list_all(), lambda_context, service, catalog_config)
        body = response_body(response)

        assert response['statusCode'] == 500
        assert body == {'error': 'INTERNAL_ERROR', 'message': 'An unexpected error occurred'}

    def test_exhausted_deadline(self, service, catalog_config, lambda_context):
        lambda_context.remaining_ms = 100

        response = handle_api_event(list_all(), lambda_context, service, catalog_config)

        assert response['statusCode'] == 503
        assert response_body(response)['error'] == 'TIMEOUT'

    def test_metrics_published(self, service, catalog_config, lambda_context):
        cloudwatch = MagicMock()

        handle_api_event(list_all(), lambda_context, service, catalog_config, cloudwatch=cloudwatch)

        cloudwatch.put_metric_data.assert_called_once()
        kwargs = cloudwatch.put_metric_data.call_args.kwargs
        assert kwargs['Namespace'] == 'MusicCatalog'
        names = [metric['MetricName'] for metric in kwargs['MetricData']]
        assert names == ['RequestCount', 'Latency']

    def test_structured_log_lines(self, api, capsys):
        api(list_all())

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        events = [line['event'] for line in lines]
        assert events == ['request_start', 'request_complete']
        assert all(line['correlationId'] == 'test-request-id' for line in lines)

    def test_raw_path_segments_decoded_once(self, api):
        api(post_album({'artist': 'Rate%25', 'album': 'X'}))
        event = {'httpMethod': 'DELETE', 'path': '/album/Rate%25/X', 'requestContext': {'requestId': 'r-1'}}

        response = api(event)

        assert response['statusCode'] == 200
        assert response_body(response) == {'artist': 'Rate%25', 'album': 'X'}


class TestPartialFailureMode:

    def test_degraded_result_with_propagation(self, store, sleeps, catalog_config, lambda_context):
        from catalog_shared.batch_delete import BatchDeleteOrchestrator

        class StuckStore(type(store)):
            def batch_delete(self, keys):
                return keys

        stuck = StuckStore(store.table)
        stuck.put({'artist': 'B', 'album': 'X', 'tracks': []})
        service = CatalogService(stuck, BatchDeleteOrchestrator(stuck, sleep=sleeps), propagate_partial_failure=True)

        response = handle_api_event(delete_artist('B'), lambda_context, service, catalog_config)

        assert response['statusCode'] == 207
        assert response_body(response)['unprocessed'] == [{'artist': 'B', 'album': 'X'}]
        assert sleeps.calls == [0.1, 0.2, 0.4]

    def test_leftovers_logged_but_success_by_default(self, store, sleeps, catalog_config, lambda_context, capsys):
        from catalog_shared.batch_delete import BatchDeleteOrchestrator

        class StuckStore(type(store)):
            def batch_delete(self, keys):
                return keys

        stuck = StuckStore(store.table)
        stuck.put({'artist': 'B', 'album': 'X', 'tracks': []})
        service = CatalogService(stuck, BatchDeleteOrchestrator(stuck, sleep=sleeps))

        response = handle_api_event(delete_artist('B'), lambda_context, service, catalog_config)

        assert response['statusCode'] == 200
        warnings = [
            json.loads(line) for line in capsys.readouterr().out.splitlines()
            if json.loads(line)['event'] == 'warning'
        ]
        assert warnings[0]['message'] == 'unprocessed_items_remaining'


class TestHandlerModules:
    """The per-function modules wire the router with their fixed operation."""

    def test_create_handler(self, service, monkeypatch, lambda_context):
        import create_handler
        monkeypatch.setattr(create_handler, 'catalog_service', service)

        response = create_handler.handler(post_album({'artist': 'A', 'album': 'X'}), lambda_context)

        assert response['statusCode'] == 204

    def test_list_handler(self, service, monkeypatch, lambda_context):
        import list_handler
        monkeypatch.setattr(list_handler, 'catalog_service', service)
        service.create_album({'artist': 'A', 'album': 'X'})

        response = list_handler.handler(list_all(), lambda_context)

        assert response_body(response) == [{'artist': 'A', 'album': 'X', 'tracks': []}]

    def test_delete_handler(self, service, monkeypatch, lambda_context):
        import delete_handler
        monkeypatch.setattr(delete_handler, 'catalog_service', service)

        response = delete_handler.handler(delete_album('A', 'X'), lambda_context)

        assert response['statusCode'] == 404

    def test_artist_handler(self, service, monkeypatch, lambda_context):
        import artist_handler
        monkeypatch.setattr(artist_handler, 'catalog_service', service)

        response = artist_handler.handler(delete_artist('B'), lambda_context)

        assert response['statusCode'] == 200

    def test_api_handler_routes(self, service, monkeypatch, lambda_context):
        import api_handler
        monkeypatch.setattr(api_handler, 'catalog_service', service)

        assert api_handler.handler(post_album({'artist': 'A', 'album': 'X'}), lambda_context)['statusCode'] == 204
        assert api_handler.handler(delete_album('A', 'X'), lambda_context)['statusCode'] == 200
        assert api_handler.handler(make_api_event('GET', '/nope', '/nope'), lambda_context)['statusCode'] == 404

    def test_configuration_loaded_at_import(self):
        import api_handler
        assert api_handler.config['table_name'] == 'test-catalog-table'
        assert api_handler.cloudwatch is None


class TestAlbumsWithUnreadableTracks:
    """Items with a numeric track Length, as older writers stored them."""

    @staticmethod
    def _seed(table, artist='B', album='X'):
        table.put_item(Item={
            'Artist': artist,
            'Album': album,
            'Tracks': [{'Title': 't', 'Length': Decimal(3)}]
        })

    def test_delete_album_confirmed_by_key(self, api, catalog_table, capsys):
        self._seed(catalog_table)

        response = api(delete_album('B', 'X'))

        assert response['statusCode'] == 200
        assert response_body(response) == {'artist': 'B', 'album': 'X'}
        assert catalog_table.scan()['Items'] == []
        warnings = [
            json.loads(line) for line in capsys.readouterr().out.splitlines()
            if json.loads(line)['event'] == 'warning'
        ]
        assert warnings[0]['message'] == 'deleted_corrupt_record'

    def test_delete_artist(self, api, catalog_table):
        self._seed(catalog_table)
        api(post_album({'artist': 'B', 'album': 'Y'}))

        response = api(delete_artist('B'))

        assert response['statusCode'] == 200
        assert catalog_table.scan()['Items'] == []

    def test_listing_still_reports_corruption(self, api, catalog_table):
        self._seed(catalog_table)

        response = api(list_all())

        assert response['statusCode'] == 500
        assert response_body(response)['error'] == 'CORRUPT_RECORD'
