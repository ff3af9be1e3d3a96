"""
High-level convenience functions for one-off reads.

These skip the dashboard state entirely: each call goes straight to the API
and returns plain model objects. Pass ``client`` to reuse a connection;
otherwise a temporary client is created. Every function also has a ``.sync``
variant.
"""

from typing import Any, List, Optional

from .cache import records_to_dataframe
from .client import DamWatchClient
from .coordinator import FETCH_OPERATIONS
from .models import (
    DateLike,
    ObservationRecord,
    ObservationWindow,
    SensorKind,
    SensorPoint,
    SensorStats,
)
from .utils import add_sync_version


@add_sync_version
async def get_sensor_points(
    sensor_type: Optional[str] = None,
    online_only: bool = False,
    client: Optional[DamWatchClient] = None,
) -> List[SensorPoint]:
    """
    Get monitoring points, optionally filtered by kind and online status.

    Args:
        sensor_type: 'EX', 'TC', 'IP', or None/'all' for every kind
        online_only: Keep only points whose status is online
        client: Optional client instance

    Returns:
        List of SensorPoint objects in API order

    Examples:
        # All online extensometers
        points = await get_sensor_points("EX", online_only=True)
    """
    if client is None:
        async with DamWatchClient() as client:
            return await get_sensor_points(sensor_type, online_only, client=client)

    points = await client.get_points()
    if sensor_type and sensor_type.lower() != "all":
        kind = SensorKind.coerce(sensor_type)
        points = [p for p in points if p.sensor_type is kind]
    if online_only:
        points = [p for p in points if p.is_online]
    return points


@add_sync_version
async def get_observations(
    sensor_type: str,
    code: str,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    client: Optional[DamWatchClient] = None,
) -> List[ObservationRecord]:
    """
    Get observations for one point, ascending by observation time.

    Examples:
        records = await get_observations("TC", "TC-03", start="2024-01-01", end="2024-01-31")
    """
    if client is None:
        async with DamWatchClient() as client:
            return await get_observations(
                sensor_type, code, start, end, limit, offset, client=client
            )

    kind = SensorKind.coerce(sensor_type)
    window = ObservationWindow(start=start, end=end, limit=limit, offset=offset)
    read = getattr(client, FETCH_OPERATIONS[kind])
    return list(await read(code, window))


@add_sync_version
async def get_observations_dataframe(
    sensor_type: str,
    code: str,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    client: Optional[DamWatchClient] = None,
) -> Any:
    """Same as :func:`get_observations`, returned as a pandas DataFrame."""
    records = await get_observations(
        sensor_type, code, start, end, limit, offset, client=client
    )
    return records_to_dataframe(records)


@add_sync_version
async def get_sensor_stats(
    code: str, client: Optional[DamWatchClient] = None
) -> SensorStats:
    """Get the server-side observation aggregate for one point."""
    if client is None:
        async with DamWatchClient() as client:
            return await client.get_stats(code)
    return await client.get_stats(code)
