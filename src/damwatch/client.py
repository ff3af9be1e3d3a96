"""
HTTP client for the dam-monitoring REST API.

Every endpoint wraps its payload in a ``{"data": ...}`` envelope; the client
unwraps it, turns rows into model objects and maps transport failures onto
the damwatch exception hierarchy. It never retries.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx

from .auth import TokenStore
from .config import ClientConfig
from .exceptions import (
    AuthenticationError,
    DamWatchError,
    GatewayConnectionError,
    GatewayResponseError,
)
from .models import (
    ExtensometerRecord,
    HydrostaticLevelRecord,
    InvertedPlumbLineRecord,
    ObservationWindow,
    SensorPoint,
    SensorStats,
    UserInfo,
    validate_point_code,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _segment(code: str) -> str:
    """Validate a point code and percent-encode it as one path segment."""
    return quote(validate_point_code(code), safe="")


class DamWatchClient:
    """
    Async client for the sensor points, observation data, stats and auth
    endpoints.

    Use as an async context manager, or call :meth:`close` when done. A bearer
    token is read from ``token_store`` on every request, so logging in or out
    through an :class:`~damwatch.auth.AuthSession` sharing the same store takes
    effect immediately.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ClientConfig()
        self.token_store = token_store if token_store is not None else TokenStore()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "DamWatchClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _auth_headers(self) -> Dict[str, str]:
        token = self.token_store.token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make a request to the API and return the unwrapped ``data`` field."""
        logger.debug(f"{method} {endpoint} params={params}")

        try:
            response = await self._client.request(
                method,
                endpoint,
                params=params,
                json=payload,
                headers=self._auth_headers(),
            )
            response.raise_for_status()
            body = response.json()

        except httpx.TimeoutException as e:
            raise GatewayConnectionError(
                f"Request timeout after {self.config.timeout}s"
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise AuthenticationError(
                    f"Not authorized ({status})", details={"status": status}
                ) from e
            elif status == 404:
                raise GatewayResponseError(
                    f"Not found: {endpoint}", details={"status": status}
                ) from e
            elif status == 429:
                raise GatewayConnectionError(
                    "Rate limit exceeded", details={"status": status}
                ) from e
            elif status >= 500:
                raise GatewayConnectionError(
                    "Monitoring API temporarily unavailable", details={"status": status}
                ) from e
            else:
                raise GatewayResponseError(
                    f"HTTP error {status}: {e}", details={"status": status}
                ) from e
        except httpx.RequestError as e:
            raise GatewayConnectionError(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise GatewayResponseError(f"Invalid JSON response: {e}") from e

        if not isinstance(body, dict) or "data" not in body:
            raise GatewayResponseError(
                f"Response from {endpoint} has no 'data' envelope"
            )
        return body["data"]

    def _parse_rows(
        self, rows: Any, model: Type[T], endpoint: str
    ) -> List[T]:
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise GatewayResponseError(
                f"Expected a list from {endpoint}, got {type(rows).__name__}"
            )
        parsed = []
        for index, row in enumerate(rows):
            try:
                parsed.append(model.from_dict(row))  # type: ignore[attr-defined]
            except (KeyError, ValueError, TypeError, AttributeError, DamWatchError) as e:
                raise GatewayResponseError(
                    f"Malformed row {index} from {endpoint}: {e}",
                    details={"row": index, "received": len(rows)},
                ) from e
        return parsed

    async def _get_records(
        self,
        code: str,
        resource: str,
        model: Type[T],
        window: Optional[ObservationWindow],
    ) -> List[T]:
        segment = _segment(code)
        window = (window or ObservationWindow()).validate()
        endpoint = f"/data/{segment}/{resource}"
        rows = await self._request("GET", endpoint, params=window.to_params())
        return self._parse_rows(rows, model, endpoint)

    # Sensor points and stats

    async def get_points(
        self, window: Optional[ObservationWindow] = None
    ) -> List[SensorPoint]:
        """
        Get the full list of monitoring points.

        Args:
            window: Optional limit/offset/start/end filter passed through to
                the API.

        Returns:
            List of SensorPoint objects
        """
        params = window.validate().to_params() if window else None
        rows = await self._request("GET", "/points", params=params)
        return self._parse_rows(rows, SensorPoint, "/points")

    async def get_point(self, code: str) -> SensorPoint:
        """Get a single monitoring point by code."""
        code = validate_point_code(code)
        data = await self._request("GET", f"/points/{_segment(code)}")
        try:
            return SensorPoint.from_dict(data)
        except (KeyError, ValueError, TypeError, AttributeError, DamWatchError) as e:
            raise GatewayResponseError(f"Malformed point {code}: {e}") from e

    async def get_stats(self, code: str) -> SensorStats:
        """Get the server-side observation aggregate for one point."""
        code = validate_point_code(code)
        data = await self._request("GET", f"/stats/points/{_segment(code)}")
        try:
            return SensorStats.from_dict(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise GatewayResponseError(f"Malformed stats for {code}: {e}") from e

    # Observation data

    async def get_extensometer(
        self, code: str, window: Optional[ObservationWindow] = None
    ) -> List[ExtensometerRecord]:
        """Get extensometer readings for a point, ascending by ``ob_time``."""
        return await self._get_records(code, "extensometer", ExtensometerRecord, window)

    async def get_hydrostatic_level(
        self, code: str, window: Optional[ObservationWindow] = None
    ) -> List[HydrostaticLevelRecord]:
        """Get hydrostatic-level readings for a point, ascending by ``ob_time``."""
        return await self._get_records(
            code, "hydrostatic-level", HydrostaticLevelRecord, window
        )

    async def get_inverted_plumb_line(
        self, code: str, window: Optional[ObservationWindow] = None
    ) -> List[InvertedPlumbLineRecord]:
        """Get inverted plumb line readings for a point, ascending by ``ob_time``."""
        return await self._get_records(
            code, "inverted-plumb-line", InvertedPlumbLineRecord, window
        )

    async def _add_record(self, code: str, resource: str, fields: Dict[str, Any]) -> Any:
        segment = _segment(code)
        payload = {key: value for key, value in fields.items() if value is not None}
        return await self._request("POST", f"/data/{segment}/{resource}", payload=payload)

    async def add_extensometer(
        self,
        sensor_code: str,
        observation_time: str,
        value: float,
        reservoir_level: Optional[float] = None,
    ) -> Any:
        """Submit a new extensometer reading."""
        return await self._add_record(
            sensor_code,
            "extensometer",
            {
                "observation_time": observation_time,
                "reservoir_level": reservoir_level,
                "value": value,
            },
        )

    async def add_hydrostatic_level(
        self, sensor_code: str, observation_time: str, value: float
    ) -> Any:
        """Submit a new hydrostatic-level reading."""
        return await self._add_record(
            sensor_code,
            "hydrostatic-level",
            {"observation_time": observation_time, "value": value},
        )

    async def add_inverted_plumb_line(
        self,
        sensor_code: str,
        observation_time: str,
        lr_value: float,
        ud_value: float,
        reservoir_level: Optional[float] = None,
    ) -> Any:
        """Submit a new inverted plumb line reading."""
        return await self._add_record(
            sensor_code,
            "inverted-plumb-line",
            {
                "observation_time": observation_time,
                "reservoir_level": reservoir_level,
                "lr_value": lr_value,
                "ud_value": ud_value,
            },
        )

    # Authentication

    async def login(self, login_type: str, id: str, password: str) -> str:
        """Exchange credentials for a token. ``login_type`` is 'username' or 'phone'."""
        token = await self._request(
            "POST",
            "/auth/login",
            payload={"login_type": login_type, "id": id, "password": password},
        )
        if not isinstance(token, str) or not token:
            raise GatewayResponseError("Login response did not contain a token")
        return token

    async def get_me(self) -> UserInfo:
        """Get the profile of the user the current token belongs to."""
        data = await self._request("GET", "/auth/me")
        try:
            return UserInfo.from_dict(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise GatewayResponseError(f"Malformed user profile: {e}") from e

    async def get_oauth_providers(self) -> List[Dict[str, str]]:
        """List the configured OAuth providers as ``{"id", "name"}`` dicts."""
        return await self._request("GET", "/auth/oauth/providers") or []

    async def handle_oauth_callback(self, provider: str, code: str, state: str) -> Any:
        """Complete an OAuth login; returns whatever the API issues (a token)."""
        return await self._request(
            "GET",
            f"/auth/oauth/{quote(provider, safe='')}/callback",
            params={"code": code, "state": state},
        )
