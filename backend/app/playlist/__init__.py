"""Mood-driven track sourcing and playlist assembly"""

from .allocator import SourceTargets, compute_targets, assemble_playlist
from .energy import classify
from .models import Artist, ArtistRef, MoodDescriptor, Track
from .pool_builder import TrackPoolBuilder

__all__ = [
    "SourceTargets",
    "compute_targets",
    "assemble_playlist",
    "classify",
    "Artist",
    "ArtistRef",
    "MoodDescriptor",
    "Track",
    "TrackPoolBuilder",
]
