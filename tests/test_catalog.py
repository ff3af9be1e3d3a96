"""
Tests for the sensor catalog and its derived counts.
"""

import pytest

from damwatch.catalog import SensorCatalog
from damwatch.exceptions import GatewayConnectionError
from damwatch.models import SensorKind

from .conftest import make_point


class TestSensorCatalog:
    def test_empty_catalog(self):
        catalog = SensorCatalog()
        assert catalog.total == 0
        assert catalog.online == 0
        assert catalog.offline == 0
        assert catalog.ex_points == []
        assert not catalog.loading

    @pytest.mark.asyncio
    async def test_seven_of_ten_online(self, gateway, ten_points):
        gateway.get_points.return_value = ten_points
        catalog = SensorCatalog()

        points = await catalog.load_all(gateway)

        assert len(points) == 10
        assert catalog.total == 10
        assert len(catalog.online_points) == 7
        assert len(catalog.offline_points) == 3
        assert catalog.online == 7
        assert catalog.offline == 3

    @pytest.mark.asyncio
    async def test_counts_and_kinds_partition_points(self, gateway, ten_points):
        gateway.get_points.return_value = ten_points
        catalog = SensorCatalog()
        await catalog.load_all(gateway)

        assert catalog.online + catalog.offline == catalog.total == len(catalog.points)

        subsets = [catalog.ex_points, catalog.tc_points, catalog.ip_points]
        assert sum(len(s) for s in subsets) == catalog.total
        assert {p.code for s in subsets for p in s} == {p.code for p in ten_points}
        assert [len(s) for s in subsets] == [4, 3, 3]
        assert catalog.by_kind()[SensorKind.TC] == catalog.tc_points
        assert catalog.points_of("ip") == catalog.ip_points

    @pytest.mark.asyncio
    async def test_reload_replaces_wholesale(self, gateway, ten_points):
        catalog = SensorCatalog()
        gateway.get_points.return_value = ten_points
        await catalog.load_all(gateway)

        gateway.get_points.return_value = [make_point("TC-09", "TC", 0)]
        await catalog.load_all(gateway)

        assert catalog.total == 1
        assert catalog.offline == 1
        assert catalog.find("EX-01") is None
        assert catalog.find("TC-09").sensor_type is SensorKind.TC

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_list(self, gateway, ten_points):
        catalog = SensorCatalog()
        gateway.get_points.return_value = ten_points
        await catalog.load_all(gateway)

        gateway.get_points.side_effect = GatewayConnectionError("Network error: down")
        with pytest.raises(GatewayConnectionError):
            await catalog.load_all(gateway)

        assert catalog.total == 10
        assert not catalog.loading

    @pytest.mark.asyncio
    async def test_loading_flag_set_during_fetch(self, gateway, ten_points):
        catalog = SensorCatalog()
        observed = []

        async def get_points():
            observed.append(catalog.loading)
            return ten_points

        gateway.get_points.side_effect = get_points
        await catalog.load_all(gateway)

        assert observed == [True]
        assert not catalog.loading
