"""
Per-source target counts, random selection and final playlist assembly
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, TypeVar

from .models import Track

logger = logging.getLogger(__name__)

T = TypeVar("T")

TASTE_SHARE = 0.4
SEARCH_SHARE = 0.3
FALLBACK_INCLUDE_PROBABILITY = 0.3


@dataclass(frozen=True)
class SourceTargets:
    total: int
    taste: int
    search: int

    @property
    def discovery(self) -> int:
        return self.total - self.taste - self.search


def compute_targets(total: int) -> SourceTargets:
    """Split the playlist size into taste, search and discovery quotas.

    Discovery gets whatever is left after the floored taste and search
    quotas, so the three always add up to ``total``.
    """
    if total < 0:
        raise ValueError("target size must not be negative")
    return SourceTargets(
        total=total,
        taste=math.floor(total * TASTE_SHARE),
        search=math.floor(total * SEARCH_SHARE),
    )


def shuffled(items: Iterable[T], rng: random.Random) -> List[T]:
    """Return a uniformly shuffled copy of ``items`` (Fisher-Yates)."""
    result = list(items)
    rng.shuffle(result)
    return result


def unique_tracks(tracks: Iterable[Track], exclude: Iterable[str] = ()) -> List[Track]:
    """Drop tracks whose id is in ``exclude`` or repeats an earlier track."""
    seen = set(exclude)
    result = []
    for track in tracks:
        if track.id in seen:
            continue
        seen.add(track.id)
        result.append(track)
    return result


def assemble_playlist(
    pool: Dict[str, Track], total: int, rng: random.Random
) -> List[Track]:
    """Shuffle the whole pool once and cut it to the playlist size.

    The ordering produced by the individual sources is discarded here.
    """
    final_tracks = shuffled(pool.values(), rng)[: max(total, 0)]
    logger.info(f"Assembled {len(final_tracks)} tracks from a pool of {len(pool)}")
    return final_tracks


def track_uris(tracks: Sequence[Track]) -> List[str]:
    return [track.uri for track in tracks]
