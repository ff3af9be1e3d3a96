"""
The sensor catalog: every monitoring point plus counts derived from it.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union

from .models import SensorKind, SensorPoint

if TYPE_CHECKING:
    from .client import DamWatchClient

logger = logging.getLogger(__name__)


class SensorCatalog:
    """
    Holds the full list of monitoring points.

    The list is only ever swapped as a whole by :meth:`load_all`; every count
    and subset is recomputed from it on read, so they cannot drift apart.
    """

    def __init__(self) -> None:
        self._points: Tuple[SensorPoint, ...] = ()
        self.loading = False

    async def load_all(self, gateway: "DamWatchClient") -> List[SensorPoint]:
        """
        Fetch all points and replace the catalog with them.

        On failure the previous list is kept and the error propagates.
        """
        self.loading = True
        try:
            points = await gateway.get_points()
        finally:
            self.loading = False
        self._points = tuple(points)
        logger.info(
            f"Loaded {self.total} sensor points ({self.online} online, {self.offline} offline)"
        )
        return list(self._points)

    @property
    def points(self) -> Tuple[SensorPoint, ...]:
        return self._points

    @property
    def total(self) -> int:
        return len(self._points)

    @property
    def online_points(self) -> List[SensorPoint]:
        return [p for p in self._points if p.is_online]

    @property
    def offline_points(self) -> List[SensorPoint]:
        return [p for p in self._points if not p.is_online]

    @property
    def online(self) -> int:
        return len(self.online_points)

    @property
    def offline(self) -> int:
        return len(self.offline_points)

    def points_of(self, kind: Union[SensorKind, str]) -> List[SensorPoint]:
        kind = SensorKind.coerce(kind)
        return [p for p in self._points if p.sensor_type is kind]

    @property
    def ex_points(self) -> List[SensorPoint]:
        return self.points_of(SensorKind.EX)

    @property
    def tc_points(self) -> List[SensorPoint]:
        return self.points_of(SensorKind.TC)

    @property
    def ip_points(self) -> List[SensorPoint]:
        return self.points_of(SensorKind.IP)

    def by_kind(self) -> Dict[SensorKind, List[SensorPoint]]:
        return {kind: self.points_of(kind) for kind in SensorKind}

    def find(self, code: str) -> Optional[SensorPoint]:
        for point in self._points:
            if point.code == code:
                return point
        return None

    def __len__(self) -> int:
        return len(self._points)
