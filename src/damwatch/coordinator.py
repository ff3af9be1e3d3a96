"""
Fetch coordination between the API client and the observation cache.

A fetch picks the client read for the sensor kind, awaits it, and applies
the result to one cache bucket according to the fetch mode:

    REPLACE       chart[kind] := records
    APPEND        chart[kind] := chart[kind] ++ records
    PAGE_REPLACE  chart[kind] := records   (caller is paging)
    LOAD_TABLE    table[kind] := records

Errors from the client are never caught here. The per-kind loading flag is
set before the request and cleared on every exit path.

Concurrent fetches for the same (kind, bucket) are not cancelled. By default
whichever response settles last is what the bucket ends up holding, even if
it was issued first. With ``ClientConfig.fence_stale_responses`` each
(kind, bucket) gets a request sequence number and only the latest issued
request may write.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

from .cache import Bucket, ObservationCache, Records
from .config import ClientConfig
from .exceptions import ValidationError
from .models import (
    DateLike,
    ObservationWindow,
    SensorKind,
    SensorStats,
    validate_point_code,
)

if TYPE_CHECKING:
    from .client import DamWatchClient

logger = logging.getLogger(__name__)


class FetchMode(str, Enum):
    REPLACE = "replace"
    APPEND = "append"
    PAGE_REPLACE = "page_replace"
    LOAD_TABLE = "load_table"


# kind -> client read
FETCH_OPERATIONS: Dict[SensorKind, str] = {
    SensorKind.EX: "get_extensometer",
    SensorKind.TC: "get_hydrostatic_level",
    SensorKind.IP: "get_inverted_plumb_line",
}

# mode -> (bucket written, cache mutation)
MODE_TARGETS: Dict[FetchMode, Tuple[Bucket, str]] = {
    FetchMode.REPLACE: (Bucket.CHART, "replace"),
    FetchMode.APPEND: (Bucket.CHART, "append"),
    FetchMode.PAGE_REPLACE: (Bucket.CHART, "page_replace"),
    FetchMode.LOAD_TABLE: (Bucket.TABLE, "load_table"),
}

_unmapped = (set(SensorKind) - set(FETCH_OPERATIONS)) | (set(FetchMode) - set(MODE_TARGETS))
if _unmapped:
    raise RuntimeError(f"No fetch dispatch entry for: {sorted(_unmapped)}")


class FetchCoordinator:
    """Runs windowed reads against the client and writes them into the cache."""

    def __init__(
        self,
        gateway: "DamWatchClient",
        cache: Optional[ObservationCache] = None,
        config: Optional[ClientConfig] = None,
    ):
        self.gateway = gateway
        self.cache = cache if cache is not None else ObservationCache()
        self.config = config or ClientConfig()
        self.loading: Dict[SensorKind, bool] = {kind: False for kind in SensorKind}
        self._issued: Dict[Tuple[SensorKind, Bucket], int] = {}

        self.sensor_stats: Optional[SensorStats] = None
        self.stats_loading = False

    def is_loading(self, kind: Union[SensorKind, str]) -> bool:
        return self.loading[SensorKind.coerce(kind)]

    @property
    def data_loading(self) -> bool:
        """True while any kind has a fetch outstanding."""
        return any(self.loading.values())

    async def fetch(
        self,
        mode: Union[FetchMode, str],
        kind: Union[SensorKind, str],
        point_code: str,
        window: Optional[ObservationWindow] = None,
    ) -> Records:
        """
        Fetch observations for one point and apply them to the cache.

        Args:
            mode: How the result is written (see module docstring)
            kind: Sensor kind of the point
            point_code: Monitoring point code
            window: Optional start/end/limit/offset bounds

        Returns:
            The records returned by the API, whether or not they were written

        Raises:
            ValidationError: Bad mode, kind, code or window; nothing is sent
            TransportError: Propagated unchanged from the client
        """
        try:
            mode = FetchMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown fetch mode {mode!r}") from None
        kind = SensorKind.coerce(kind)
        point_code = validate_point_code(point_code)
        window = (window or ObservationWindow()).validate()

        bucket, mutation = MODE_TARGETS[mode]
        key = (kind, bucket)
        sequence = self._issued.get(key, 0) + 1
        self._issued[key] = sequence

        read = getattr(self.gateway, FETCH_OPERATIONS[kind])

        self.loading[kind] = True
        try:
            records = tuple(await read(point_code, window))
        finally:
            self.loading[kind] = False

        if self.config.fence_stale_responses and sequence != self._issued[key]:
            logger.debug(
                f"Discarding stale {kind.value} {bucket.value} response #{sequence} "
                f"for {point_code} (latest is #{self._issued[key]})"
            )
            return records

        getattr(self.cache, mutation)(kind, records)
        logger.debug(
            f"{mode.value} {kind.value} {bucket.value}: {len(records)} records for {point_code}"
        )
        return records

    async def fetch_data(
        self,
        kind: Union[SensorKind, str],
        point_code: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        limit: Optional[int] = None,
    ) -> Records:
        """Replace the chart bucket with a fresh query."""
        window = ObservationWindow(start=start, end=end, limit=limit)
        return await self.fetch(FetchMode.REPLACE, kind, point_code, window)

    async def fetch_more_data(
        self,
        kind: Union[SensorKind, str],
        point_code: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Records:
        """Extend the chart bucket ("load more"). Overlapping windows duplicate rows."""
        window = ObservationWindow(start=start, end=end, limit=limit, offset=offset)
        return await self.fetch(FetchMode.APPEND, kind, point_code, window)

    async def fetch_page(
        self,
        kind: Union[SensorKind, str],
        point_code: str,
        page: int,
        page_size: Optional[int] = None,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> Records:
        """Replace the chart bucket with one page of results (1-based)."""
        window = ObservationWindow.page(
            page, page_size or self.config.table_page_size, start=start, end=end
        )
        return await self.fetch(FetchMode.PAGE_REPLACE, kind, point_code, window)

    async def fetch_table(
        self,
        kind: Union[SensorKind, str],
        point_code: str,
        page: int = 1,
        page_size: Optional[int] = None,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> Records:
        """Load one page of results into the table bucket."""
        window = ObservationWindow.page(
            page, page_size or self.config.table_page_size, start=start, end=end
        )
        return await self.fetch(FetchMode.LOAD_TABLE, kind, point_code, window)

    async def fetch_sensor_stats(self, point_code: str) -> SensorStats:
        """Fetch and keep the aggregate stats for one point."""
        point_code = validate_point_code(point_code)
        self.stats_loading = True
        try:
            stats = await self.gateway.get_stats(point_code)
        finally:
            self.stats_loading = False
        self.sensor_stats = stats
        return stats
