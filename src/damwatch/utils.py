"""
Internal utility functions for damwatch.
"""

import inspect
from typing import (
    Any,
    Awaitable,
    Callable,
    TypeVar,
)

R = TypeVar("R")


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    A decorator that adds a .sync attribute to an async function, allowing it
    to be called synchronously.

    If the function takes a ``client`` argument annotated with a client class
    and the caller does not pass one, a temporary client is created for the
    call and closed afterwards.

    Example:
        >>> @add_sync_version
        ... async def count_points(client: Optional[DamWatchClient] = None):
        ...     ...

        >>> # Async usage
        >>> n = await count_points()

        >>> # Sync usage
        >>> n = count_points.sync()
    """
    from .sync import AsyncSyncBridge

    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        """Synchronous wrapper for the async function."""
        client_param = inspect.signature(async_fn).parameters.get("client")
        client_class = None
        if client_param is not None:
            client_class = AsyncSyncBridge.extract_client_class(client_param.annotation)

        return AsyncSyncBridge.run_async(
            async_fn, args=args, kwargs=kwargs, client_class=client_class
        )

    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn
