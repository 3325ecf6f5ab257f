"""
Async facade over the blocking spotipy client.

Every call runs in a worker thread so that independent requests made by the
playlist builder can be awaited together.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import spotipy
from spotipy.exceptions import SpotifyException

from ..core.config import settings
from ..core.exceptions import CatalogError, SpotifyAuthError
from ..playlist.models import Artist, Track

logger = logging.getLogger(__name__)

PLAYLIST_ADD_CHUNK_SIZE = 100


def _parse_tracks(items: Iterable[Optional[Dict[str, Any]]]) -> List[Track]:
    tracks = []
    for item in items:
        # Local files and removed tracks come back without an id
        if not item or not item.get("id"):
            continue
        tracks.append(Track.from_spotify_track(item))
    return tracks


def _playlist_to_dict(playlist: Dict[str, Any]) -> Dict[str, Any]:
    tracks = _parse_tracks(
        item.get("track") for item in playlist.get("tracks", {}).get("items", [])
    )
    return {
        "id": playlist["id"],
        "name": playlist["name"],
        "description": playlist.get("description") or "",
        "public": bool(playlist.get("public")),
        "collaborative": bool(playlist.get("collaborative")),
        "total_tracks": playlist.get("tracks", {}).get("total", len(tracks)),
        "owner": (playlist.get("owner") or {}).get("display_name") or "Unknown",
        "tracks": [track.to_dict() for track in tracks],
        "images": playlist.get("images") or [],
        "external_urls": playlist.get("external_urls") or {},
    }


class SpotifyCatalogClient:
    """Catalog operations used by playlist generation and user sync"""

    def __init__(self, client: spotipy.Spotify, market: Optional[str] = None):
        self._client = client
        self.market = market or settings.spotify_market

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        logger.debug(f"Spotify call: {operation}")
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except SpotifyException as e:
            if e.http_status == 401:
                raise SpotifyAuthError(f"Spotify rejected the access token during {operation}") from e
            raise CatalogError(
                f"Spotify error during {operation}: {e.http_status} {e.msg}",
                status_code=e.http_status,
            ) from e

    async def get_current_user(self) -> Dict[str, Any]:
        return await self._call("current user", self._client.current_user)

    async def get_top_tracks(self, limit: int = 50, time_range: str = "medium_term") -> List[Track]:
        results = await self._call(
            "top tracks",
            self._client.current_user_top_tracks,
            limit=limit,
            time_range=time_range,
        )
        return _parse_tracks(results.get("items", []))

    async def get_top_artists(self, limit: int = 50, time_range: str = "medium_term") -> List[Artist]:
        results = await self._call(
            "top artists",
            self._client.current_user_top_artists,
            limit=limit,
            time_range=time_range,
        )
        return [Artist.from_spotify_artist(item) for item in results.get("items", [])]

    async def get_recently_played(self, limit: int = 50) -> List[Track]:
        results = await self._call(
            "recently played", self._client.current_user_recently_played, limit=limit
        )
        return _parse_tracks(item.get("track") for item in results.get("items", []))

    async def search_tracks(self, query: str, limit: int = 20) -> List[Track]:
        results = await self._call(
            f"search '{query}'",
            self._client.search,
            q=query,
            type="track",
            limit=limit,
            market=self.market,
        )
        tracks = _parse_tracks(results.get("tracks", {}).get("items", []))
        logger.debug(f"Found {len(tracks)} tracks for query '{query}'")
        return tracks

    async def get_related_artists(self, artist_id: str) -> List[Artist]:
        results = await self._call(
            f"related artists of {artist_id}",
            self._client.artist_related_artists,
            artist_id,
        )
        return [Artist.from_spotify_artist(item) for item in results.get("artists", [])]

    async def get_artist_top_tracks(self, artist_id: str) -> List[Track]:
        results = await self._call(
            f"top tracks of {artist_id}",
            self._client.artist_top_tracks,
            artist_id,
            country=self.market,
        )
        return _parse_tracks(results.get("tracks", []))

    async def create_playlist(
        self, user_id: str, name: str, description: str, public: bool = False
    ) -> Dict[str, Any]:
        return await self._call(
            f"create playlist '{name}'",
            self._client.user_playlist_create,
            user=user_id,
            name=name,
            public=public,
            description=description,
        )

    async def add_tracks(self, playlist_id: str, track_uris: List[str]) -> Dict[str, Any]:
        """Append tracks in order, 100 per request (the Web API maximum)."""
        result: Dict[str, Any] = {"snapshot_id": None}
        for i in range(0, len(track_uris), PLAYLIST_ADD_CHUNK_SIZE):
            chunk = track_uris[i : i + PLAYLIST_ADD_CHUNK_SIZE]
            result = await self._call(
                f"add tracks to {playlist_id}",
                self._client.playlist_add_items,
                playlist_id,
                chunk,
            )
        return result

    async def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        playlist = await self._call(
            f"playlist {playlist_id}", self._client.playlist, playlist_id
        )
        return _playlist_to_dict(playlist)
