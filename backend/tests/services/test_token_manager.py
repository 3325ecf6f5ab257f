"""
Test suite for service-account token caching and refresh
"""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from app.core.config import settings
from app.core.exceptions import SpotifyAuthError
from app.services.token_manager import SpotifyTokenManager


async def no_redis():
    return None


class FakeRedis:
    def __init__(self):
        self.hashes = {}
        self.values = {}

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def hset(self, key, mapping):
        self.hashes.setdefault(key, {}).update(mapping)

    async def expire(self, key, seconds):
        return True

    async def delete(self, key):
        self.hashes.pop(key, None)
        self.values.pop(key, None)

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        return True


@pytest.fixture
def service_account(monkeypatch):
    monkeypatch.setattr(settings, "spotify_client_id", "client_id")
    monkeypatch.setattr(settings, "spotify_client_secret", "client_secret")
    monkeypatch.setattr(settings, "spotify_service_refresh_token", "refresh_token")


def token_response(token, expires_in=3600):
    return {"access_token": token, "expires_in": expires_in, "scope": "user-top-read"}


class TestWithoutServiceAccount:
    def test_missing_configuration_is_auth_error(self, monkeypatch):
        monkeypatch.setattr(settings, "spotify_service_refresh_token", None)
        manager = SpotifyTokenManager(redis_factory=no_redis)

        with pytest.raises(SpotifyAuthError):
            asyncio.run(manager.get_valid_token())


class TestLocalCache:
    def test_token_is_cached_in_memory(self, service_account):
        manager = SpotifyTokenManager(redis_factory=no_redis)
        manager._request_token_refresh = AsyncMock(return_value=token_response("token1"))

        async def fetch_twice():
            return await manager.get_valid_token(), await manager.get_valid_token()

        assert asyncio.run(fetch_twice()) == ("token1", "token1")
        manager._request_token_refresh.assert_awaited_once()

    def test_token_close_to_expiry_is_refreshed(self, service_account):
        manager = SpotifyTokenManager(redis_factory=no_redis)
        manager._request_token_refresh = AsyncMock(
            side_effect=[token_response("short", expires_in=60), token_response("fresh")]
        )

        async def fetch_twice():
            return await manager.get_valid_token(), await manager.get_valid_token()

        assert asyncio.run(fetch_twice()) == ("short", "fresh")

    def test_refresh_failure_propagates(self, service_account):
        manager = SpotifyTokenManager(redis_factory=no_redis)
        manager._request_token_refresh = AsyncMock(side_effect=SpotifyAuthError("refresh failed"))

        with pytest.raises(SpotifyAuthError):
            asyncio.run(manager.get_valid_token())


class TestRedisCache:
    def test_cached_token_is_reused(self, service_account):
        redis_client = FakeRedis()
        redis_client.hashes[SpotifyTokenManager.TOKEN_KEY] = {
            "access_token": "cached",
            "expires_at": str(time.time() + 3600),
        }

        async def factory():
            return redis_client

        manager = SpotifyTokenManager(redis_factory=factory)
        manager._request_token_refresh = AsyncMock()

        assert asyncio.run(manager.get_valid_token()) == "cached"
        manager._request_token_refresh.assert_not_awaited()

    def test_expired_token_is_refreshed_and_cached(self, service_account):
        redis_client = FakeRedis()
        redis_client.hashes[SpotifyTokenManager.TOKEN_KEY] = {
            "access_token": "stale",
            "expires_at": str(time.time() + 10),
        }

        async def factory():
            return redis_client

        manager = SpotifyTokenManager(redis_factory=factory)
        manager._request_token_refresh = AsyncMock(return_value=token_response("fresh"))

        assert asyncio.run(manager.get_valid_token()) == "fresh"
        assert redis_client.hashes[SpotifyTokenManager.TOKEN_KEY]["access_token"] == "fresh"
        # The refresh lock is released afterwards
        assert SpotifyTokenManager.LOCK_KEY not in redis_client.values

    def test_invalid_expiry_counts_as_expired(self):
        manager = SpotifyTokenManager(redis_factory=no_redis)

        assert manager._is_token_still_valid({"access_token": "x", "expires_at": "soon"}) is False
        assert manager._is_token_still_valid({}) is False
