"""
Service-account access token management.

Used only when a request arrives without its own bearer token. The access
token obtained from the configured refresh token is cached in Redis (shared
between workers, refresh guarded by a lock) or in process memory when Redis
is unavailable.
"""

import asyncio
import base64
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx

from ..core.config import settings
from ..core.exceptions import SpotifyAuthError
from ..core.redis import get_redis_client

logger = logging.getLogger(__name__)


class SpotifyTokenManager:
    TOKEN_KEY = "spotify:service_access_token"
    LOCK_KEY = "spotify:service_token_lock"

    REFRESH_THRESHOLD_SECONDS = 300  # refresh five minutes before expiry
    LOCK_TIMEOUT_SECONDS = 30
    REDIS_TTL_BUFFER = 60

    def __init__(self, redis_factory=get_redis_client):
        self._redis_factory = redis_factory
        self._local_token: Dict[str, str] = {}
        self._local_lock = asyncio.Lock()

    async def get_valid_token(self) -> str:
        if not settings.service_account_configured:
            raise SpotifyAuthError("No Spotify access token provided and no service account configured")

        redis_client = await self._redis_factory()
        if redis_client is None:
            return await self._get_local_token()

        token_data = await redis_client.hgetall(self.TOKEN_KEY)
        if self._is_token_still_valid(token_data):
            logger.debug("Using cached service access token")
            return token_data["access_token"]

        async with self._acquire_refresh_lock(redis_client):
            # Another worker may have refreshed while we waited for the lock
            token_data = await redis_client.hgetall(self.TOKEN_KEY)
            if self._is_token_still_valid(token_data):
                return token_data["access_token"]
            return await self._refresh_and_cache(redis_client)

    def _is_token_still_valid(self, token_data: Optional[Dict[str, str]]) -> bool:
        if not token_data or not token_data.get("expires_at"):
            return False
        try:
            expires_at = float(token_data["expires_at"])
        except (ValueError, TypeError):
            logger.warning("Invalid expires_at in cached token data")
            return False
        return expires_at - time.time() > self.REFRESH_THRESHOLD_SECONDS

    async def _get_local_token(self) -> str:
        async with self._local_lock:
            if not self._is_token_still_valid(self._local_token):
                token_response = await self._request_token_refresh()
                self._local_token = self._token_data(token_response)
            return self._local_token["access_token"]

    @asynccontextmanager
    async def _acquire_refresh_lock(self, redis_client):
        lock_acquired = False
        try:
            for _ in range(self.LOCK_TIMEOUT_SECONDS):
                lock_acquired = await redis_client.set(
                    self.LOCK_KEY, "locked", nx=True, ex=self.LOCK_TIMEOUT_SECONDS
                )
                if lock_acquired:
                    break
                await asyncio.sleep(1)
            else:
                logger.warning("Could not acquire token refresh lock, refreshing without it")
            yield
        finally:
            if lock_acquired:
                await redis_client.delete(self.LOCK_KEY)

    async def _refresh_and_cache(self, redis_client) -> str:
        token_data = self._token_data(await self._request_token_refresh())
        ttl_seconds = int(float(token_data["expires_at"]) - time.time() - self.REDIS_TTL_BUFFER)
        if ttl_seconds > 0:
            await redis_client.hset(self.TOKEN_KEY, mapping=token_data)
            await redis_client.expire(self.TOKEN_KEY, ttl_seconds)
            logger.debug(f"Cached service token with TTL of {ttl_seconds} seconds")
        return token_data["access_token"]

    @staticmethod
    def _token_data(token_response: Dict[str, Any]) -> Dict[str, str]:
        expires_at = time.time() + token_response.get("expires_in", 3600)
        return {
            "access_token": token_response["access_token"],
            "expires_at": str(expires_at),
            "scope": token_response.get("scope", ""),
        }

    async def _request_token_refresh(self) -> Dict[str, Any]:
        credentials = base64.b64encode(
            f"{settings.spotify_client_id}:{settings.spotify_client_secret}".encode()
        ).decode()

        async with httpx.AsyncClient() as client:
            response = await client.post(
                settings.spotify_token_url,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": settings.spotify_service_refresh_token,
                },
                headers={
                    "Authorization": f"Basic {credentials}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                timeout=10.0,
            )

        if response.status_code != 200:
            logger.error(f"Token refresh failed: Status {response.status_code}, Body: {response.text}")
            raise SpotifyAuthError(f"Spotify token refresh failed with status {response.status_code}")

        token_response = response.json()
        if not token_response.get("access_token"):
            raise SpotifyAuthError("No access token in refresh response")

        if token_response.get("refresh_token"):
            logger.warning("Spotify issued a new refresh token - update SPOTIFY_SERVICE_REFRESH_TOKEN")

        logger.info("Refreshed service access token")
        return token_response


# Global token manager instance
spotify_token_manager = SpotifyTokenManager()
