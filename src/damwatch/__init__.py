"""
Python client for the dam-monitoring dashboard API.

Fetch, cache and page time-series readings from extensometers, hydrostatic
level sensors and inverted plumb lines.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .auth import AuthSession, TokenStore, guard_route
from .cache import Bucket, ObservationCache, records_to_dataframe
from .catalog import SensorCatalog
from .client import DamWatchClient
from .config import ClientConfig
from .convenience import (
    get_observations,
    get_observations_dataframe,
    get_sensor_points,
    get_sensor_stats,
)
from .coordinator import FetchCoordinator, FetchMode
from .exceptions import (
    AuthenticationError,
    DamWatchError,
    GatewayConnectionError,
    GatewayResponseError,
    TransportError,
    ValidationError,
)
from .models import (
    ExtensometerRecord,
    HydrostaticLevelRecord,
    InvertedPlumbLineRecord,
    ObservationRecord,
    ObservationWindow,
    SensorKind,
    SensorPoint,
    SensorStats,
    UserInfo,
)
from .selection import SelectionState
from .session import DashboardSession
from .sync import (
    AsyncSyncBridge,
    get_observations_sync,
    get_sensor_points_sync,
    get_sensor_stats_sync,
)

__all__ = [
    # Core classes
    "DashboardSession",
    "DamWatchClient",
    "ClientConfig",
    "SensorCatalog",
    "ObservationCache",
    "Bucket",
    "FetchCoordinator",
    "FetchMode",
    "SelectionState",
    # Session layer
    "AuthSession",
    "TokenStore",
    "guard_route",
    # Models
    "SensorKind",
    "SensorPoint",
    "SensorStats",
    "ExtensometerRecord",
    "HydrostaticLevelRecord",
    "InvertedPlumbLineRecord",
    "ObservationRecord",
    "ObservationWindow",
    "UserInfo",
    # Exceptions
    "DamWatchError",
    "TransportError",
    "GatewayConnectionError",
    "GatewayResponseError",
    "AuthenticationError",
    "ValidationError",
    # Async convenience functions
    "get_sensor_points",
    "get_observations",
    "get_observations_dataframe",
    "get_sensor_stats",
    "records_to_dataframe",
    # Sync convenience functions
    "AsyncSyncBridge",
    "get_sensor_points_sync",
    "get_observations_sync",
    "get_sensor_stats_sync",
]
