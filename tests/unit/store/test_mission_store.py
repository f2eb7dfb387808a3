"""
InMemoryMissionStore tests.
"""

import pytest

from mission_monitor.errors import UpstreamFetchError, WriteFailure
from mission_monitor.mission_store import InMemoryMissionStore, MissionStore


pytestmark = [pytest.mark.unit, pytest.mark.store]


class TestInMemoryMissionStore:
    """Tests for the process-local store."""

    def test_is_a_mission_store(self):
        assert isinstance(InMemoryMissionStore(), MissionStore)

    def test_abstract_store_cannot_be_built(self):
        with pytest.raises(TypeError):
            MissionStore()

    @pytest.mark.asyncio
    async def test_initial_status_all_belum(self):
        status = await InMemoryMissionStore().fetch_status()
        assert set(status.values()) == {'belum'}
        assert len(status) == 6

    @pytest.mark.asyncio
    async def test_write_updates_and_records(self):
        store = InMemoryMissionStore()
        await store.write_status({'mission_persiapan': 'proses'})

        assert store.writes == [{'mission_persiapan': 'proses'}]
        assert (await store.fetch_status())['mission_persiapan'] == 'proses'

    @pytest.mark.asyncio
    async def test_fetches_return_copies(self, waypoint_rows):
        store = InMemoryMissionStore(waypoint_rows=waypoint_rows)
        rows = await store.fetch_waypoint_rows()
        rows[0]['latitude'] = 0.0
        assert store.waypoint_rows[0]['latitude'] != 0.0

    @pytest.mark.asyncio
    async def test_default_map_state(self):
        assert (await InMemoryMissionStore().fetch_map_state())['view_type'] is None

    @pytest.mark.asyncio
    async def test_fail_writes(self):
        store = InMemoryMissionStore()
        store.fail_writes = True
        with pytest.raises(WriteFailure) as exc_info:
            await store.write_status({'mission_start': 'selesai'})

        assert exc_info.value.fields == {'mission_start': 'selesai'}
        assert store.writes == []
        assert store.status['mission_start'] == 'belum'

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", [
        'fetch_status', 'fetch_waypoint_rows', 'fetch_center_rows', 'fetch_map_state'])
    async def test_fail_fetches(self, method):
        store = InMemoryMissionStore()
        store.fail_fetches = True
        with pytest.raises(UpstreamFetchError):
            await getattr(store, method)()

    @pytest.mark.asyncio
    async def test_close_is_noop(self):
        assert await InMemoryMissionStore().close() is None
