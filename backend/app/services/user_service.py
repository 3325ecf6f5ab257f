"""
Refreshes the user's genre preferences from their top artists
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List

from ..playlist.models import Artist
from .store import UserProfile, utc_now_iso

logger = logging.getLogger(__name__)

TOP_ARTISTS_LIMIT = 50
MAX_TOP_GENRES = 10


def rank_genres(artists: Iterable[Artist], limit: int = MAX_TOP_GENRES) -> List[str]:
    """Genres ordered by how many artists carry them; ties keep first-seen order."""
    counts = Counter(genre for artist in artists for genre in artist.genres)
    # Counter preserves insertion order and sorted() is stable
    return [genre for genre, _ in sorted(counts.items(), key=lambda item: -item[1])][:limit]


async def sync_user(catalog, store) -> Dict[str, Any]:
    top_artists = await catalog.get_top_artists(TOP_ARTISTS_LIMIT)
    top_genres = rank_genres(top_artists)

    spotify_user = await catalog.get_current_user()
    profile = await store.save_user(
        UserProfile(
            spotify_id=spotify_user["id"],
            display_name=spotify_user.get("display_name"),
            top_genres=top_genres,
            last_sync=utc_now_iso(),
        )
    )
    logger.info(
        f"Synced user {profile.spotify_id}: {len(top_genres)} genres from {len(top_artists)} top artists"
    )
    return {"top_genres": top_genres, "user": profile.model_dump()}
