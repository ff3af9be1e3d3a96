"""
Synchronous wrappers for damwatch.

For scripts and notebooks that cannot use async/await. Each call runs the
async function to completion in a fresh event loop, creating (and closing) a
temporary DamWatchClient when none is passed in.

Usage:
    # Instead of this async code:
    async with DamWatchClient() as client:
        points = await get_sensor_points(client=client)

    # Use this sync code:
    from damwatch.sync import get_sensor_points_sync
    points = get_sensor_points_sync()
"""

import asyncio
import inspect
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    List,
    Optional,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

if TYPE_CHECKING:
    from .models import ObservationRecord, SensorPoint, SensorStats

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async damwatch functions from blocking code."""

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        client_class: Optional[type] = None,
    ) -> R:
        """Run an async function synchronously.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function
            client_class: Client class to instantiate when the function takes
                a ``client`` argument and none was given

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within a running event loop
        """
        if kwargs is None:
            kwargs = {}

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        async def _call_and_cleanup() -> R:
            # The client is created inside the loop that will use it.
            call_args, call_kwargs = args, dict(kwargs)
            temp_client = None
            if client_class:
                signature = inspect.signature(async_fn)
                if "client" in signature.parameters:
                    # A client may arrive positionally as well as by keyword.
                    bound = signature.bind_partial(*call_args, **call_kwargs)
                    if bound.arguments.get("client") is None:
                        temp_client = client_class()
                        bound.arguments["client"] = temp_client
                        call_args, call_kwargs = bound.args, bound.kwargs
            try:
                return await async_fn(*call_args, **call_kwargs)
            finally:
                if temp_client is not None:
                    await temp_client.close()

        return asyncio.run(_call_and_cleanup())

    @staticmethod
    def extract_client_class(annotation: Any) -> Optional[type]:
        """Extract the client class from an ``Optional[Client]`` style annotation."""
        if annotation is None:
            return None

        if get_origin(annotation) is Union:
            non_none_args = [arg for arg in get_args(annotation) if arg is not type(None)]
            if non_none_args and isinstance(non_none_args[0], type):
                return non_none_args[0]
        elif isinstance(annotation, type):
            return annotation

        return None


def get_sensor_points_sync(
    sensor_type: Optional[str] = None,
    online_only: bool = False,
    client: Optional[Any] = None,
) -> List["SensorPoint"]:
    """Synchronous version of :func:`damwatch.convenience.get_sensor_points`.

    Examples:
        >>> points = get_sensor_points_sync("EX", online_only=True)
    """
    from .client import DamWatchClient
    from .convenience import get_sensor_points

    return AsyncSyncBridge.run_async(
        get_sensor_points,
        kwargs={"sensor_type": sensor_type, "online_only": online_only, "client": client},
        client_class=DamWatchClient,
    )


def get_observations_sync(
    sensor_type: str,
    code: str,
    start: Optional[Any] = None,
    end: Optional[Any] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    client: Optional[Any] = None,
) -> List["ObservationRecord"]:
    """Synchronous version of :func:`damwatch.convenience.get_observations`."""
    from .client import DamWatchClient
    from .convenience import get_observations

    return AsyncSyncBridge.run_async(
        get_observations,
        args=(sensor_type, code),
        kwargs={
            "start": start,
            "end": end,
            "limit": limit,
            "offset": offset,
            "client": client,
        },
        client_class=DamWatchClient,
    )


def get_sensor_stats_sync(code: str, client: Optional[Any] = None) -> "SensorStats":
    """Synchronous version of :func:`damwatch.convenience.get_sensor_stats`."""
    from .client import DamWatchClient
    from .convenience import get_sensor_stats

    return AsyncSyncBridge.run_async(
        get_sensor_stats,
        args=(code,),
        kwargs={"client": client},
        client_class=DamWatchClient,
    )
