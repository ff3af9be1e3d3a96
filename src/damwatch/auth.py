"""
Session layer: token storage, login/logout and the route guard.

The observation core never authenticates by itself; it relies on the client
attaching whatever token is in the shared :class:`TokenStore`.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .exceptions import DamWatchError
from .models import UserInfo

if TYPE_CHECKING:
    from .client import DamWatchClient

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"

LOGIN_PATH = "/login"
HOME_PATH = "/"


class TokenStore:
    """In-memory key/value store for the auth token and cached user profile."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._items: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._items.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    @property
    def token(self) -> Optional[str]:
        return self._items.get(TOKEN_KEY)

    @property
    def user(self) -> Optional[UserInfo]:
        data = self._items.get(USER_KEY)
        return UserInfo.from_dict(data) if data else None


class AuthSession:
    """
    Login state for one dashboard instance.

    ``login`` reports failure through its return value and :attr:`error`
    rather than raising, and a failed :meth:`fetch_user` is taken to mean the
    stored token is no longer valid, so the session is cleared.
    """

    def __init__(self, client: "DamWatchClient", store: Optional[TokenStore] = None):
        self.client = client
        self.store = store if store is not None else client.token_store
        self.loading = False
        self.error: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self.store.token

    @property
    def user(self) -> Optional[UserInfo]:
        return self.store.user

    @property
    def is_authenticated(self) -> bool:
        return bool(self.store.token)

    @property
    def is_admin(self) -> bool:
        user = self.store.user
        return user is not None and user.is_admin

    async def login(self, login_type: str, id: str, password: str) -> bool:
        """Log in and store the token. Returns False and sets ``error`` on failure."""
        self.loading = True
        self.error = None
        try:
            token = await self.client.login(login_type, id, password)
            self.store.set(TOKEN_KEY, token)
            logger.info(f"Logged in as {id}")
            return True
        except DamWatchError as e:
            logger.warning(f"Login failed for {id}: {e}")
            self.error = e.message or "Login failed"
            return False
        finally:
            self.loading = False

    def logout(self) -> None:
        self.store.remove(TOKEN_KEY)
        self.store.remove(USER_KEY)

    async def fetch_user(self) -> Optional[UserInfo]:
        """Refresh the cached profile; clears the session if the API refuses."""
        if not self.store.token:
            return None
        try:
            user = await self.client.get_me()
        except DamWatchError as e:
            logger.info(f"Session invalidated while fetching user: {e}")
            self.logout()
            return None
        self.store.set(USER_KEY, user.to_dict())
        return user


def guard_route(path: str, requires_auth: bool, is_authenticated: bool) -> Optional[str]:
    """
    Decide where navigation to ``path`` should go.

    Returns the redirect target, or None to let navigation proceed.
    """
    if requires_auth and not is_authenticated:
        return LOGIN_PATH
    if path == LOGIN_PATH and is_authenticated:
        return HOME_PATH
    return None
