"""
Exceptions for damwatch operations.
"""

from typing import Any, Dict, Optional


class DamWatchError(Exception):
    """Base exception for damwatch-related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class TransportError(DamWatchError):
    """Error talking to the monitoring API (network, status or body)."""

    pass


class GatewayConnectionError(TransportError):
    """Network failure, timeout, rate limit or server-side error."""

    pass


class GatewayResponseError(TransportError):
    """Client-side HTTP error or a response body that cannot be used."""

    pass


class AuthenticationError(TransportError):
    """The API rejected the request's credentials (401/403)."""

    pass


class ValidationError(DamWatchError):
    """Request arguments rejected before anything was sent."""

    pass
