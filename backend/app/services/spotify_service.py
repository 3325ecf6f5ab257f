"""
Builds Spotify catalog clients for incoming requests
"""

import logging
from typing import Optional

import spotipy

from ..core.config import settings
from .spotify_catalog import SpotifyCatalogClient
from .token_manager import spotify_token_manager

logger = logging.getLogger(__name__)


class SpotifyServiceClient:
    """Hands out catalog clients bound to the caller's token or the service account"""

    def __init__(self, token_manager=spotify_token_manager):
        self.token_manager = token_manager
        self._service_client: Optional[spotipy.Spotify] = None
        self._service_token: Optional[str] = None

    def _build_client(self, access_token: str) -> spotipy.Spotify:
        return spotipy.Spotify(
            auth=access_token,
            requests_timeout=settings.spotify_requests_timeout,
            retries=0,
            status_retries=0,
        )

    async def get_client(self, access_token: Optional[str] = None) -> spotipy.Spotify:
        """Spotify client for the user's bearer token, or the service account when none is given.

        Raises SpotifyAuthError when neither is available.
        """
        if access_token:
            return self._build_client(access_token)

        service_token = await self.token_manager.get_valid_token()
        # Reuse the service client until the token rotates
        if not self._service_client or self._service_token != service_token:
            self._service_client = self._build_client(service_token)
            self._service_token = service_token
            logger.debug("Created Spotify service client with refreshed token")
        return self._service_client

    async def get_catalog(self, access_token: Optional[str] = None) -> SpotifyCatalogClient:
        client = await self.get_client(access_token)
        return SpotifyCatalogClient(client, market=settings.spotify_market)


# Global service client instance
spotify_service = SpotifyServiceClient()
