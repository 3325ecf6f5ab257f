"""
Track pool construction from three sources: the user's own top tracks,
keyword searches derived from the mood, and top tracks of related artists.

Sources run one after another because each one deduplicates against the
tracks already pooled. Network calls inside a source are issued together.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from .allocator import (
    FALLBACK_INCLUDE_PROBABILITY,
    SourceTargets,
    shuffled,
    unique_tracks,
)
from .energy import classify
from .models import MoodDescriptor, Track

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_SEARCH_TERMS = 3
SEARCH_RESULTS_PER_TERM = 10
SEED_TRACKS_FOR_DISCOVERY = 5
RELATED_ARTISTS_PER_SEED = 3
MAX_DISCOVERY_ARTISTS = 5


@dataclass
class FetchResult(Generic[T]):
    """Outcome of one branch of a fan-out: the items, or the error that replaced them."""

    label: str
    items: List[T] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def fetch_isolated(
    label: str, fetch: Callable[..., Awaitable[Sequence[T]]], *args: Any
) -> FetchResult[T]:
    """Run one fetch, turning any failure into an empty result.

    Only ``Exception`` is caught, so cancellation of the surrounding request
    still propagates.
    """
    try:
        items = await fetch(*args)
    except Exception as e:
        logger.warning(f"{label} failed, continuing without it: {e}")
        return FetchResult(label=label, error=e)
    return FetchResult(label=label, items=list(items))


def matches_energy(track: Track, energy: int, rng: random.Random) -> bool:
    """Decide whether a top track fits the requested energy level.

    Energy 7 and 3 sit outside the middle band, so a neutral track at
    those levels only gets in through the random fallback.
    """
    energy_class = classify(track)
    if energy >= 7 and energy_class.prefers_high:
        return True
    if energy <= 3 and energy_class.prefers_low:
        return True
    if 3 < energy < 7 and not energy_class.prefers_high and not energy_class.prefers_low:
        return True
    return rng.random() < FALLBACK_INCLUDE_PROBABILITY


class TrackPoolBuilder:
    """Accumulates candidate tracks for a single generation request."""

    def __init__(
        self,
        catalog,
        targets: SourceTargets,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.targets = targets
        self.rng = rng or random.SystemRandom()
        self.pool: Dict[str, Track] = {}
        self.contributions: Dict[str, int] = {"taste": 0, "search": 0, "discovery": 0}

    def _add(self, tracks: Sequence[Track], source: str) -> List[Track]:
        added = []
        for track in tracks:
            if track.id in self.pool:
                continue
            self.pool[track.id] = track
            added.append(track)
        self.contributions[source] += len(added)
        return added

    def add_taste_tracks(self, top_tracks: Sequence[Track], energy: int) -> List[Track]:
        """Pool the user's top tracks whose energy fits, in their original order."""
        # Every track is evaluated before slicing, so the number of random
        # draws depends on the full list and not on the quota.
        filtered = [
            track for track in top_tracks if matches_energy(track, energy, self.rng)
        ]
        added = self._add(filtered[: self.targets.taste], "taste")
        logger.info(
            f"Taste source: {len(filtered)}/{len(top_tracks)} top tracks matched energy {energy}, "
            f"pooled {len(added)} (target {self.targets.taste})"
        )
        return added

    async def add_search_tracks(self, search_terms: Sequence[str]) -> List[Track]:
        """Pool a random selection of search results for the first mood search terms."""
        terms = list(search_terms[:MAX_SEARCH_TERMS])
        if not terms or self.targets.search <= 0:
            logger.info("Search source skipped (no search terms or zero target)")
            return []

        results = await asyncio.gather(
            *(
                self.catalog.search_tracks(term, SEARCH_RESULTS_PER_TERM)
                for term in terms
            ),
            return_exceptions=True,
        )
        # Siblings are allowed to finish before a failed search fails the request
        for result in results:
            if isinstance(result, Exception):
                raise result

        candidates = unique_tracks(chain.from_iterable(results), exclude=self.pool)
        selected = shuffled(candidates, self.rng)[: self.targets.search]
        added = self._add(selected, "search")
        logger.info(
            f"Search source: {len(candidates)} new candidates from {len(terms)} terms, "
            f"pooled {len(added)} (target {self.targets.search})"
        )
        return added

    async def add_discovery_tracks(self, top_tracks: Sequence[Track]) -> List[Track]:
        """Pool top tracks of artists related to the artists of the user's top tracks.

        Failed related-artist or top-track lookups count as empty results.
        """
        target = self.targets.total - len(self.pool)
        if not top_tracks or target <= 0:
            logger.info(f"Discovery source skipped (top tracks: {len(top_tracks)}, remaining: {target})")
            return []

        seed_artist_ids = list(
            dict.fromkeys(
                track.first_artist.id
                for track in top_tracks[:SEED_TRACKS_FOR_DISCOVERY]
                if track.first_artist and track.first_artist.id
            )
        )

        related_results = await asyncio.gather(
            *(
                fetch_isolated(
                    f"Related artists for {artist_id}",
                    self.catalog.get_related_artists,
                    artist_id,
                )
                for artist_id in seed_artist_ids
            )
        )
        candidate_artists = [
            artist
            for result in related_results
            for artist in result.items[:RELATED_ARTISTS_PER_SEED]
        ][:MAX_DISCOVERY_ARTISTS]

        track_results = await asyncio.gather(
            *(
                fetch_isolated(
                    f"Top tracks for {artist.id}",
                    self.catalog.get_artist_top_tracks,
                    artist.id,
                )
                for artist in candidate_artists
            )
        )
        candidates = unique_tracks(
            chain.from_iterable(result.items for result in track_results),
            exclude=self.pool,
        )
        selected = shuffled(candidates, self.rng)[:target]
        added = self._add(selected, "discovery")

        failures = sum(1 for result in chain(related_results, track_results) if not result.ok)
        logger.info(
            f"Discovery source: {len(seed_artist_ids)} seed artists, {len(candidate_artists)} related artists, "
            f"{len(candidates)} new candidates, pooled {len(added)} (target {target}, {failures} failed lookups)"
        )
        return added

    async def build(self, top_tracks: Sequence[Track], mood: MoodDescriptor) -> Dict[str, Track]:
        self.add_taste_tracks(top_tracks, mood.energy)
        await self.add_search_tracks(mood.search_terms)
        await self.add_discovery_tracks(top_tracks)
        logger.info(f"Track pool ready: {len(self.pool)} tracks {self.contributions}")
        return dict(self.pool)
