"""
Client configuration for damwatch.

Values come from environment variables with built-in defaults, so a dashboard
process can be pointed at another API deployment without code changes.
"""

import os
from dataclasses import dataclass, field

DEFAULT_BASE_URL = "https://zlawrance.online/api"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


@dataclass
class ClientConfig:
    """Runtime configuration loaded from environment variables."""

    base_url: str = field(
        default_factory=lambda: os.getenv("DAMWATCH_BASE_URL", DEFAULT_BASE_URL)
    )
    timeout: float = field(default_factory=lambda: _env_float("DAMWATCH_TIMEOUT", 30.0))
    user_agent: str = field(
        default_factory=lambda: os.getenv("DAMWATCH_USER_AGENT", "damwatch-client/0.1.0")
    )

    # Rows per page for table windows.
    table_page_size: int = field(
        default_factory=lambda: _env_int("DAMWATCH_TABLE_PAGE_SIZE", 50)
    )

    # When enabled, only the most recently issued fetch per (kind, bucket)
    # may write to the cache.
    fence_stale_responses: bool = field(
        default_factory=lambda: _env_bool("DAMWATCH_FENCE_STALE", False)
    )

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.table_page_size <= 0:
            raise ValueError("table_page_size must be positive")
