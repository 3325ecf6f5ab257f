"""
Keyword heuristic approximating a track's energy from its title and artist.

There is no audio analysis behind this: the track name and the first listed
artist are lower-cased and scanned for substrings. Both flags may be false,
and a string like "Party Sleep" sets both.
"""

from typing import NamedTuple

from .models import Track

HIGH_ENERGY_WORDS = frozenset({"party", "dance", "pump", "hype", "rock", "metal"})
LOW_ENERGY_WORDS = frozenset({"sleep", "calm", "relax", "chill", "ambient", "quiet"})


class EnergyClass(NamedTuple):
    prefers_high: bool
    prefers_low: bool


def classify_text(track_name: str, artist_name: str) -> EnergyClass:
    text = f"{track_name} {artist_name}".lower()
    return EnergyClass(
        prefers_high=any(word in text for word in HIGH_ENERGY_WORDS),
        prefers_low=any(word in text for word in LOW_ENERGY_WORDS),
    )


def classify(track: Track) -> EnergyClass:
    first_artist = track.first_artist
    return classify_text(track.name, first_artist.name if first_artist else "")
