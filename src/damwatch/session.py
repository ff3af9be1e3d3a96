"""
The per-dashboard state object.

One :class:`DashboardSession` is built per application instance and handed to
whatever needs it; there is no module-level store. Two sessions never share
a catalog, cache or selection.
"""

from typing import Any, List, Optional, Union

import httpx

from .auth import AuthSession, TokenStore
from .cache import ObservationCache, Records
from .catalog import SensorCatalog
from .client import DamWatchClient
from .config import ClientConfig
from .coordinator import FetchCoordinator, FetchMode
from .exceptions import ValidationError
from .models import ObservationWindow, SensorPoint
from .selection import SelectionState


class DashboardSession:
    """
    Wires the client, auth, catalog, cache, coordinator and selection together.

    Examples:
        >>> async with DashboardSession() as session:
        ...     await session.auth.login("username", "alice", "secret")
        ...     await session.load_catalog()
        ...     session.selection.select_sensor(session.catalog.ex_points[0])
        ...     await session.fetch_selected(ObservationWindow(start="2024-01-01"))
        ...     df = session.cache.to_pandas("EX")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        token_store: Optional[TokenStore] = None,
        client: Optional[DamWatchClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Client settings; defaults to the given client's config, or
                to :class:`ClientConfig` read from the environment.
            token_store: Token store for a client built here.
            client: An existing client to use. It brings its own token store,
                so ``token_store`` must not be given alongside it.
            transport: Optional httpx transport for a client built here.

        Raises:
            ValueError: If both ``client`` and ``token_store`` are given.
        """
        if client is not None and token_store is not None:
            raise ValueError(
                "Pass token_store to the DamWatchClient, not alongside an existing client"
            )
        self.config = config or (client.config if client else ClientConfig())
        self.client = client or DamWatchClient(
            self.config, token_store=token_store, transport=transport
        )
        self.auth = AuthSession(self.client)
        self.catalog = SensorCatalog()
        self.cache = ObservationCache()
        self.coordinator = FetchCoordinator(self.client, self.cache, self.config)
        self.selection = SelectionState()

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "DashboardSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def load_catalog(self) -> List[SensorPoint]:
        return await self.catalog.load_all(self.client)

    def visible_points(self) -> List[SensorPoint]:
        """Catalog points that pass the current sensor-kind filter."""
        return [p for p in self.catalog.points if self.selection.matches(p)]

    async def fetch_selected(
        self,
        window: Optional[ObservationWindow] = None,
        mode: Union[FetchMode, str] = FetchMode.REPLACE,
    ) -> Records:
        """Fetch observations for the currently selected point."""
        point = self.selection.selected_sensor
        if point is None:
            raise ValidationError("No sensor point is selected")
        return await self.coordinator.fetch(mode, point.sensor_type, point.code, window)
