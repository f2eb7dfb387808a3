"""
RestMissionStore Unit Tests

Request shapes and error mapping, against a recorded stand-in session.
"""

import asyncio
import json

import aiohttp
import pytest

from mission_monitor.errors import UpstreamFetchError, WriteFailure
from mission_monitor.logging_manager import logging_manager
from mission_monitor.rest_store import RestMissionStore
from tests.fixtures.mock_http import MockResponse, MockSession


pytestmark = [pytest.mark.unit, pytest.mark.store]

BASE_URL = "https://example.test"


def make_store(*responses, **kwargs):
    session = MockSession(list(responses))
    return RestMissionStore(BASE_URL + "/", api_key="anon-key", session=session, **kwargs), session


class TestConstruction:
    """Tests for constructor and from_parameters()."""

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            RestMissionStore("")

    def test_from_parameters(self, raw_config, monkeypatch):
        monkeypatch.delenv('MISSION_STORE_URL', raising=False)
        monkeypatch.delenv('MISSION_STORE_KEY', raising=False)
        store = RestMissionStore.from_parameters(raw_config['Store'])

        assert store.base_url == BASE_URL
        assert store.api_key == 'anon-key'
        assert store.status_row_id == 1
        assert store.timeout_s == 5.0

    def test_environment_overrides(self, raw_config, monkeypatch):
        monkeypatch.setenv('MISSION_STORE_URL', 'https://other.test')
        monkeypatch.setenv('MISSION_STORE_KEY', 'secret')
        store = RestMissionStore.from_parameters(raw_config['Store'])

        assert store.base_url == 'https://other.test'
        assert store.api_key == 'secret'


class TestFetch:
    """Tests for the select requests."""

    @pytest.mark.asyncio
    async def test_fetch_status(self):
        store, session = make_store(MockResponse(200, [{'id': 1, 'mission_start': 'selesai'}]))
        row = await store.fetch_status()

        assert row['mission_start'] == 'selesai'
        request = session.requests[0]
        assert request['method'] == 'GET'
        assert request['url'] == f"{BASE_URL}/rest/v1/data_mission"
        assert request['params'] == {'select': '*', 'id': 'eq.1'}
        assert request['headers']['apikey'] == 'anon-key'
        assert request['headers']['Authorization'] == 'Bearer anon-key'

    @pytest.mark.asyncio
    async def test_status_row_id(self):
        store, session = make_store(MockResponse(200, [{'id': 7}]), status_row_id=7)
        await store.fetch_map_state()
        assert session.requests[0]['url'].endswith('/map_state')
        assert session.requests[0]['params']['id'] == 'eq.7'

    @pytest.mark.asyncio
    async def test_missing_row(self):
        store, _ = make_store(MockResponse(200, []))
        with pytest.raises(UpstreamFetchError, match="not found"):
            await store.fetch_status()

    @pytest.mark.asyncio
    async def test_waypoint_rows(self):
        rows = [{'mission_name': 'lintasan1', 'waypoint_type': 'start', 'latitude': 1.0, 'longitude': 2.0}]
        store, session = make_store(MockResponse(200, rows))

        assert await store.fetch_waypoint_rows() == rows
        assert session.requests[0]['url'].endswith('/mission_waypoints')

    @pytest.mark.asyncio
    async def test_center_rows_renamed(self):
        store, session = make_store(MockResponse(200, [
            {'Lintasan': 'lintasan1', 'Latitude': -7.9, 'Longititude': 112.6},
            {'Lintasan': 'lintasan2', 'Latitude': None, 'Longititude': None},
        ]))
        rows = await store.fetch_center_rows()

        assert rows == [
            {'variant_id': 'lintasan1', 'latitude': -7.9, 'longitude': 112.6},
            {'variant_id': 'lintasan2', 'latitude': None, 'longitude': None},
        ]
        assert session.requests[0]['url'].endswith('/Center_Lintasan')

    @pytest.mark.asyncio
    async def test_http_error(self):
        store, _ = make_store(MockResponse(503, None, "Service Unavailable"))
        with pytest.raises(UpstreamFetchError) as exc_info:
            await store.fetch_waypoint_rows()
        assert exc_info.value.resource == 'mission_waypoints'
        assert "HTTP 503" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        store, _ = make_store(MockResponse(200, {'message': 'not a list'}))
        with pytest.raises(UpstreamFetchError, match="unexpected response shape"):
            await store.fetch_center_rows()

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        body_error = json.JSONDecodeError("Expecting value", "<html>", 0)
        store, _ = make_store(MockResponse(200, json_error=body_error))
        with pytest.raises(UpstreamFetchError, match="invalid JSON body") as exc_info:
            await store.fetch_waypoint_rows()
        assert exc_info.value.__cause__ is body_error
        assert logging_manager.store_stats('MissionStore').failures == 1

    @pytest.mark.asyncio
    async def test_non_object_rows(self):
        store, _ = make_store(MockResponse(200, [1, 2, 3]))
        with pytest.raises(UpstreamFetchError, match="unexpected response shape"):
            await store.fetch_waypoint_rows()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("connection refused"),
        asyncio.TimeoutError(),
    ])
    async def test_transport_errors(self, error):
        store, _ = make_store(error)
        with pytest.raises(UpstreamFetchError):
            await store.fetch_status()


class TestWriteStatus:
    """Tests for the partial status update."""

    @pytest.mark.asyncio
    async def test_patch_request(self):
        store, session = make_store(MockResponse(204))
        await store.write_status({'mission_buoys': 'selesai'})

        request = session.requests[0]
        assert request['method'] == 'PATCH'
        assert request['url'] == f"{BASE_URL}/rest/v1/data_mission"
        assert request['params'] == {'id': 'eq.1'}
        assert request['json'] == {'mission_buoys': 'selesai'}
        assert request['headers']['Prefer'] == 'return=minimal'

    @pytest.mark.asyncio
    async def test_http_error(self):
        store, _ = make_store(MockResponse(409, None, "conflict"))
        with pytest.raises(WriteFailure) as exc_info:
            await store.write_status({'mission_buoys': 'selesai'})
        assert exc_info.value.fields == {'mission_buoys': 'selesai'}
        assert "HTTP 409" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_transport_error(self):
        store, _ = make_store(aiohttp.ServerDisconnectedError())
        with pytest.raises(WriteFailure):
            await store.write_status({'image_atas': 'proses'})


class TestClose:

    @pytest.mark.asyncio
    async def test_external_session_not_closed(self):
        store, session = make_store()
        await store.close()
        assert session.closed is False

    @pytest.mark.asyncio
    async def test_owned_session_closed(self):
        store = RestMissionStore(BASE_URL)
        session = MockSession()
        store._session = session
        await store.close()
        assert session.closed is True
        assert store._session is None
