"""
Tests for SelectionState and the DashboardSession wiring.
"""

import httpx
import pytest

from damwatch.auth import TokenStore
from damwatch.client import DamWatchClient
from damwatch.exceptions import ValidationError
from damwatch.models import ALL_SENSOR_TYPES, ObservationWindow, SensorKind
from damwatch.selection import SelectionState
from damwatch.session import DashboardSession

from .conftest import api_response, make_point


class TestSelectionState:
    def test_defaults(self):
        selection = SelectionState()
        assert selection.selected_sensor_type == ALL_SENSOR_TYPES
        assert selection.selected_sensor is None

    def test_select_and_clear(self):
        selection = SelectionState()
        point = make_point("EX-01")
        selection.select_sensor(point)
        assert selection.selected_sensor is point
        selection.select_sensor(None)
        assert selection.selected_sensor is None

    def test_set_sensor_type(self):
        selection = SelectionState()
        selection.set_sensor_type("TC")
        assert selection.selected_sensor_type is SensorKind.TC
        selection.set_sensor_type("all")
        assert selection.selected_sensor_type == ALL_SENSOR_TYPES

    def test_set_sensor_type_rejects_unknown(self):
        selection = SelectionState()
        with pytest.raises(ValidationError):
            selection.set_sensor_type("XX")
        assert selection.selected_sensor_type == ALL_SENSOR_TYPES

    def test_matches(self):
        selection = SelectionState()
        ex, ip = make_point("EX-01", "EX"), make_point("IP-01", "IP")
        assert selection.matches(ex) and selection.matches(ip)
        selection.set_sensor_type(SensorKind.IP)
        assert not selection.matches(ex)
        assert selection.matches(ip)


def _dashboard_api(calls):
    def handler(request):
        calls.append(request.url.path)
        if request.url.path == "/api/points":
            return api_response(
                [
                    {"code": "EX-01", "sensor_type": "EX", "status": 1},
                    {"code": "TC-01", "sensor_type": "TC", "status": 0},
                ]
            )
        if request.url.path == "/api/data/EX-01/extensometer":
            return api_response(
                [{"sensor_code": "EX-01", "ob_time": "2024-01-01T00:00:00", "value": 0.5}]
            )
        return httpx.Response(404)

    return handler


class TestDashboardSession:
    @pytest.mark.asyncio
    async def test_selection_does_not_fetch(self, config):
        calls = []
        async with DashboardSession(
            config, transport=httpx.MockTransport(_dashboard_api(calls))
        ) as session:
            await session.load_catalog()
            session.selection.select_sensor(session.catalog.find("EX-01"))
            session.selection.set_sensor_type("EX")

            assert calls == ["/api/points"]
            assert session.cache.chart("EX") == ()

    @pytest.mark.asyncio
    async def test_fetch_selected(self, config):
        calls = []
        async with DashboardSession(
            config, transport=httpx.MockTransport(_dashboard_api(calls))
        ) as session:
            await session.load_catalog()
            session.selection.select_sensor(session.catalog.ex_points[0])

            records = await session.fetch_selected(ObservationWindow(start="2024-01-01"))

            assert len(records) == 1
            assert session.cache.chart(SensorKind.EX) == records
            assert calls[-1] == "/api/data/EX-01/extensometer"

    @pytest.mark.asyncio
    async def test_fetch_selected_requires_selection(self, config):
        async with DashboardSession(config) as session:
            with pytest.raises(ValidationError):
                await session.fetch_selected()

    @pytest.mark.asyncio
    async def test_visible_points_follow_filter(self, config):
        async with DashboardSession(
            config, transport=httpx.MockTransport(_dashboard_api([]))
        ) as session:
            await session.load_catalog()
            assert len(session.visible_points()) == 2
            session.selection.set_sensor_type("TC")
            assert [p.code for p in session.visible_points()] == ["TC-01"]

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, config):
        async with DashboardSession(config) as first, DashboardSession(config) as second:
            first.cache.replace("EX", [])
            first.selection.set_sensor_type("IP")

            assert second.selection.selected_sensor_type == ALL_SENSOR_TYPES
            assert first.cache is not second.cache
            assert first.catalog is not second.catalog
            assert first.client.token_store is not second.client.token_store

    @pytest.mark.asyncio
    async def test_components_share_client_and_cache(self, config):
        async with DashboardSession(config) as session:
            assert session.coordinator.gateway is session.client
            assert session.coordinator.cache is session.cache
            assert session.auth.store is session.client.token_store

    @pytest.mark.asyncio
    async def test_existing_client_brings_its_own_token_store(self, config):
        store = TokenStore()
        async with DamWatchClient(config, token_store=store) as client:
            session = DashboardSession(client=client)
            assert session.auth.store is store
            assert session.config is config

            with pytest.raises(ValueError, match="token_store"):
                DashboardSession(client=client, token_store=TokenStore())
