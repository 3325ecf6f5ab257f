"""
Request-level playlist generation: prompt in, published playlist out.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..core.exceptions import InvalidPromptError
from ..services.store import GenerationRecord
from .allocator import assemble_playlist, compute_targets
from .models import Track
from .pool_builder import TrackPoolBuilder
from .publisher import PlaylistPublisher

logger = logging.getLogger(__name__)


@dataclass
class GeneratedPlaylist:
    record: GenerationRecord
    playlist: Dict[str, Any]
    tracks: List[Track]


def validate_prompt(prompt: Any, max_length: int) -> str:
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidPromptError("Invalid prompt")
    if len(prompt.strip()) > max_length:
        raise InvalidPromptError(f"Prompt is longer than {max_length} characters")
    return prompt


class PlaylistGenerator:
    """Runs one generation: mood analysis, sourcing, assembly, publishing, persistence.

    ``rng`` drives every random step (energy fallback draws and the shuffles);
    pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(
        self,
        catalog,
        mood_analyzer,
        store,
        rng: Optional[random.Random] = None,
        target_size: Optional[int] = None,
        top_tracks_limit: Optional[int] = None,
        prompt_max_length: Optional[int] = None,
    ):
        self.catalog = catalog
        self.mood_analyzer = mood_analyzer
        self.store = store
        self.rng = rng or random.SystemRandom()
        self.target_size = target_size if target_size is not None else settings.playlist_target_size
        self.top_tracks_limit = top_tracks_limit or settings.top_tracks_limit
        self.prompt_max_length = prompt_max_length or settings.prompt_max_length

    async def generate(self, prompt: Any) -> GeneratedPlaylist:
        prompt = validate_prompt(prompt, self.prompt_max_length)

        spotify_user = await self.catalog.get_current_user()
        user_id = spotify_user["id"]
        known_genres = await self.store.get_user_genres(user_id)

        mood = await self.mood_analyzer.analyze(prompt, known_genres)
        top_tracks = await self.catalog.get_top_tracks(self.top_tracks_limit)
        logger.info(
            f"Generating for user {user_id}: mood={mood.primary_mood}, energy={mood.energy}, "
            f"{len(top_tracks)} top tracks, {len(known_genres)} known genres"
        )

        targets = compute_targets(self.target_size)
        builder = TrackPoolBuilder(self.catalog, targets, rng=self.rng)
        pool = await builder.build(top_tracks, mood)
        final_tracks = assemble_playlist(pool, targets.total, self.rng)

        published = await PlaylistPublisher(self.catalog).publish(
            user_id, prompt, mood, final_tracks
        )

        record = await self.store.save_record(
            GenerationRecord(
                user_id=user_id,
                spotify_playlist_id=published.playlist_id,
                name=published.name,
                prompt=prompt,
                mood_analysis=mood,
                track_ids=[track.id for track in final_tracks],
            )
        )
        logger.info(f"Saved generation record {record.id} for playlist {published.playlist_id}")

        full_playlist = await self.catalog.get_playlist(published.playlist_id)
        return GeneratedPlaylist(record=record, playlist=full_playlist, tracks=final_tracks)
