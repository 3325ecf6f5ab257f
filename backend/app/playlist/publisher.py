"""
Publishes the assembled track list as a new Spotify playlist
"""

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.exceptions import CatalogWriteError, SpotifyAuthError
from .allocator import track_uris
from .models import MoodDescriptor, PublishedPlaylist, Track

logger = logging.getLogger(__name__)

PROMPT_ECHO_LENGTH = 100


def build_playlist_name(mood: MoodDescriptor, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{mood.primary_mood} vibes - {today.month}/{today.day}/{today.year}"


def build_playlist_description(prompt: str, mood: MoodDescriptor) -> str:
    return f'Generated from: "{prompt[:PROMPT_ECHO_LENGTH]}..." | Energy: {mood.energy}/10'


class PlaylistPublisher:
    def __init__(self, catalog):
        self.catalog = catalog

    async def publish(
        self,
        user_id: str,
        prompt: str,
        mood: MoodDescriptor,
        tracks: Sequence[Track],
        today: Optional[date] = None,
    ) -> PublishedPlaylist:
        """Create the playlist and append the tracks in their final order.

        Any failure here fails the whole generation; a playlist that was
        created but could not be filled is left as is.
        """
        name = build_playlist_name(mood, today)
        description = build_playlist_description(prompt, mood)

        try:
            playlist = await self.catalog.create_playlist(user_id, name, description)
        except (SpotifyAuthError, CatalogWriteError):
            raise
        except Exception as e:
            raise CatalogWriteError(f"Failed to create playlist '{name}': {e}") from e
        logger.info(f"Created playlist '{name}' ({playlist['id']})")

        try:
            await self.catalog.add_tracks(playlist["id"], track_uris(tracks))
        except (SpotifyAuthError, CatalogWriteError):
            raise
        except Exception as e:
            raise CatalogWriteError(
                f"Failed to add {len(tracks)} tracks to playlist {playlist['id']}: {e}"
            ) from e
        logger.info(f"Added {len(tracks)} tracks to playlist {playlist['id']}")

        return PublishedPlaylist(
            playlist=playlist, name=name, description=description, tracks=list(tracks)
        )
