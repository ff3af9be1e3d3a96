"""
Shared fixtures and record builders for damwatch tests.
"""

from datetime import date, datetime
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from damwatch.client import DamWatchClient
from damwatch.config import ClientConfig
from damwatch.models import (
    ExtensometerRecord,
    HydrostaticLevelRecord,
    InvertedPlumbLineRecord,
    SensorKind,
    SensorPoint,
)

TEST_BASE_URL = "https://dam.example.test/api"


def make_point(code, sensor_type="EX", status=1, section="S1"):
    return SensorPoint(
        code=code,
        sensor_type=SensorKind(sensor_type),
        height=120.5,
        install_date=date(2020, 5, 1),
        section=section,
        status=status,
        updated_at=datetime(2024, 1, 1, 8, 0),
    )


def ex_records(code, days, month=1):
    return [
        ExtensometerRecord(code, datetime(2024, month, day), 0.1 * day, 150.0)
        for day in days
    ]


def tc_records(code, days, month=1):
    return [HydrostaticLevelRecord(code, datetime(2024, month, day), 1.0 + day) for day in days]


def ip_records(code, days, month=1):
    return [
        InvertedPlumbLineRecord(code, datetime(2024, month, day), 0.5, -0.5)
        for day in days
    ]


@pytest.fixture
def config():
    """Config pointed at a fake API host."""
    return ClientConfig(base_url=TEST_BASE_URL, timeout=5)


@pytest.fixture
def gateway():
    """A stand-in for DamWatchClient with every read mocked."""
    mock = Mock(spec=DamWatchClient)
    mock.get_points = AsyncMock(return_value=[])
    mock.get_stats = AsyncMock()
    mock.get_extensometer = AsyncMock(return_value=[])
    mock.get_hydrostatic_level = AsyncMock(return_value=[])
    mock.get_inverted_plumb_line = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def ten_points():
    """Ten catalog points, seven of them online, spread over all kinds."""
    return [
        make_point("EX-01", "EX", 1),
        make_point("EX-02", "EX", 1),
        make_point("EX-03", "EX", 0),
        make_point("EX-04", "EX", 1),
        make_point("TC-01", "TC", 1),
        make_point("TC-02", "TC", 2),
        make_point("TC-03", "TC", 1),
        make_point("IP-01", "IP", 1),
        make_point("IP-02", "IP", 0),
        make_point("IP-03", "IP", 1),
    ]


def api_response(data, status_code=200):
    """Wrap ``data`` in the API's JSON envelope."""
    return httpx.Response(status_code, json={"code": status_code, "data": data})


@pytest.fixture
def make_client(config):
    """Build a DamWatchClient whose HTTP traffic goes to ``handler``."""

    def _make(handler, token_store=None):
        return DamWatchClient(
            config, token_store=token_store, transport=httpx.MockTransport(handler)
        )

    return _make
