"""
Tests for the session layer: token store, login/logout and route guard.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from damwatch.auth import (
    HOME_PATH,
    LOGIN_PATH,
    TOKEN_KEY,
    USER_KEY,
    AuthSession,
    TokenStore,
    guard_route,
)
from damwatch.client import DamWatchClient
from damwatch.exceptions import AuthenticationError, GatewayResponseError
from damwatch.models import UserInfo


@pytest.fixture
def store():
    return TokenStore()


@pytest.fixture
def auth_client(store):
    client = Mock(spec=DamWatchClient)
    client.token_store = store
    client.login = AsyncMock(return_value="jwt-token")
    client.get_me = AsyncMock(
        return_value=UserInfo(id=1, username="alice", role="admin")
    )
    return client


class TestTokenStore:
    def test_get_set_remove(self, store):
        assert store.get("missing", "default") == "default"
        store.set(TOKEN_KEY, "abc")
        assert store.token == "abc"
        store.remove(TOKEN_KEY)
        store.remove(TOKEN_KEY)
        assert store.token is None

    def test_user_round_trip(self, store):
        user = UserInfo(id=3, username="bob", role="viewer", department="Hydro")
        store.set(USER_KEY, user.to_dict())
        assert store.user == user


class TestAuthSession:
    @pytest.mark.asyncio
    async def test_login_stores_token(self, auth_client, store):
        auth = AuthSession(auth_client)
        assert not auth.is_authenticated

        assert await auth.login("username", "alice", "pw") is True

        auth_client.login.assert_awaited_once_with("username", "alice", "pw")
        assert store.token == "jwt-token"
        assert auth.is_authenticated
        assert auth.error is None
        assert not auth.loading

    @pytest.mark.asyncio
    async def test_login_failure_sets_error(self, auth_client, store):
        auth_client.login.side_effect = AuthenticationError("Not authorized (401)")
        auth = AuthSession(auth_client)

        assert await auth.login("phone", "13800000000", "bad") is False

        assert auth.error == "Not authorized (401)"
        assert store.token is None
        assert not auth.loading

    @pytest.mark.asyncio
    async def test_fetch_user_caches_profile(self, auth_client, store):
        store.set(TOKEN_KEY, "jwt-token")
        auth = AuthSession(auth_client)

        user = await auth.fetch_user()

        assert user.username == "alice"
        assert auth.user == user
        assert auth.is_admin

    @pytest.mark.asyncio
    async def test_fetch_user_without_token_is_noop(self, auth_client):
        auth = AuthSession(auth_client)
        assert await auth.fetch_user() is None
        auth_client.get_me.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_user_failure_logs_out(self, auth_client, store):
        store.set(TOKEN_KEY, "expired")
        store.set(USER_KEY, {"id": 1, "username": "alice", "role": "admin"})
        auth_client.get_me.side_effect = GatewayResponseError("Malformed user profile")
        auth = AuthSession(auth_client)

        assert await auth.fetch_user() is None

        assert store.token is None
        assert store.user is None
        assert not auth.is_authenticated
        assert not auth.is_admin

    def test_logout(self, auth_client, store):
        store.set(TOKEN_KEY, "jwt-token")
        auth = AuthSession(auth_client)
        auth.logout()
        assert not auth.is_authenticated


class TestGuardRoute:
    def test_protected_route_requires_login(self):
        assert guard_route("/data", requires_auth=True, is_authenticated=False) == LOGIN_PATH

    def test_protected_route_allowed_when_logged_in(self):
        assert guard_route("/data", requires_auth=True, is_authenticated=True) is None

    def test_login_page_redirects_home_when_logged_in(self):
        assert guard_route(LOGIN_PATH, requires_auth=False, is_authenticated=True) == HOME_PATH

    def test_login_page_open_when_logged_out(self):
        assert guard_route(LOGIN_PATH, requires_auth=False, is_authenticated=False) is None
