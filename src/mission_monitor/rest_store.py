# src/mission_monitor/rest_store.py
"""
REST mission store backed by a PostgREST-style HTTP API.

Tables:
- data_mission       one status row, selected by STATUS_ROW_ID
- mission_waypoints  mission_name, waypoint_type, latitude, longitude
- Center_Lintasan    Lintasan, Latitude, Longititude (column names as deployed)
- map_state          one row with view_type / is_refreshed

Requests time out after TIMEOUT_S; transport errors and HTTP status >= 400
become UpstreamFetchError or WriteFailure.
"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from mission_monitor.errors import UpstreamFetchError, WriteFailure
from mission_monitor.logging_manager import logging_manager
from mission_monitor.mission_store import MissionStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "MissionStore"


class RestMissionStore(MissionStore):
    """MissionStore over HTTP using a shared aiohttp session."""

    def __init__(self, base_url: str, api_key: str = "", status_row_id: int = 1,
                 timeout_s: float = 5.0, session: Optional[aiohttp.ClientSession] = None):
        """
        Args:
            base_url (str): Project URL, e.g. https://xyz.supabase.co
            api_key (str): Anon/service key sent as apikey and bearer token.
            status_row_id (int): Id of the status and map-state rows.
            timeout_s (float): Per-request timeout in seconds.
            session (aiohttp.ClientSession): Optional externally owned session.
        """
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.status_row_id = status_row_id
        self.timeout_s = timeout_s
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_parameters(cls, store_section: Mapping[str, Any]) -> 'RestMissionStore':
        """Build from the 'Store' config section; env vars override URL and key."""
        return cls(
            base_url=os.environ.get('MISSION_STORE_URL') or store_section.get('BASE_URL', ''),
            api_key=os.environ.get('MISSION_STORE_KEY') or store_section.get('API_KEY', ''),
            status_row_id=int(store_section.get('STATUS_ROW_ID', 1)),
            timeout_s=float(store_section.get('TIMEOUT_S', 5.0)),
        )

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['apikey'] = self.api_key
            headers['Authorization'] = f"Bearer {self.api_key}"
        return headers

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_s))
        return self._session

    async def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        session = self._get_session()
        try:
            async with session.get(self._url(table), params=params, headers=self._headers()) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise UpstreamFetchError(table, f"HTTP {response.status}: {body[:80]}")
                try:
                    rows = await response.json()
                except ValueError as e:
                    raise UpstreamFetchError(table, "invalid JSON body") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logging_manager.log_connection_status(logger, SERVICE_NAME, False, f"({type(e).__name__})")
            logging_manager.log_store_activity(logger, SERVICE_NAME, False, str(e)[:50])
            raise UpstreamFetchError(table, str(e) or type(e).__name__) from e
        except UpstreamFetchError as e:
            logging_manager.log_store_activity(logger, SERVICE_NAME, False, e.reason)
            raise

        logging_manager.log_connection_status(logger, SERVICE_NAME, True, f"to {self.base_url}")
        logging_manager.log_store_activity(logger, SERVICE_NAME, True)
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise UpstreamFetchError(table, "unexpected response shape")
        return rows

    async def _select_row(self, table: str) -> Dict[str, Any]:
        rows = await self._select(table, {'select': '*', 'id': f"eq.{self.status_row_id}"})
        if not rows:
            raise UpstreamFetchError(table, f"row {self.status_row_id} not found")
        return rows[0]

    async def fetch_status(self) -> Dict[str, Any]:
        return await self._select_row('data_mission')

    async def fetch_map_state(self) -> Dict[str, Any]:
        return await self._select_row('map_state')

    async def fetch_waypoint_rows(self) -> List[Dict[str, Any]]:
        return await self._select('mission_waypoints',
                                  {'select': 'mission_name,waypoint_type,latitude,longitude'})

    async def fetch_center_rows(self) -> List[Dict[str, Any]]:
        rows = await self._select('Center_Lintasan', {'select': 'Lintasan,Latitude,Longititude'})
        return [
            {
                'variant_id': row.get('Lintasan'),
                'latitude': row.get('Latitude'),
                'longitude': row.get('Longititude'),
            }
            for row in rows
        ]

    async def write_status(self, fields: Mapping[str, str]) -> None:
        session = self._get_session()
        headers = dict(self._headers(), Prefer='return=minimal')
        params = {'id': f"eq.{self.status_row_id}"}
        try:
            async with session.patch(self._url('data_mission'), params=params,
                                     json=dict(fields), headers=headers) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise WriteFailure(dict(fields), f"HTTP {response.status}: {body[:80]}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logging_manager.log_connection_status(logger, SERVICE_NAME, False, f"({type(e).__name__})")
            logging_manager.log_store_activity(logger, SERVICE_NAME, False, str(e)[:50])
            raise WriteFailure(dict(fields), str(e) or type(e).__name__) from e
        except WriteFailure as e:
            logging_manager.log_store_activity(logger, SERVICE_NAME, False, e.reason)
            raise
        logging_manager.log_store_activity(logger, SERVICE_NAME, True)
        logger.debug(f"[updateMissionStatus] OK {dict(fields)}")

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
