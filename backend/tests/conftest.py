"""
Pytest configuration and fixtures for the playlist generator tests
"""

import random

import pytest
from unittest.mock import Mock

from app.core.exceptions import CatalogWriteError
from app.playlist.models import Artist, ArtistRef, MoodDescriptor, Track


def build_track(track_id, name=None, artist="Test Artist", artist_id=None):
    return Track(
        id=track_id,
        name=name or f"Track {track_id}",
        artists=(ArtistRef(name=artist, id=artist_id or f"artist_{track_id}"),),
        album=f"Album {track_id}",
        uri=f"spotify:track:{track_id}",
        duration_ms=200000,
    )


def build_mood(energy=5, primary_mood="calm", search_terms=None, genres=None):
    return MoodDescriptor(
        primary_mood=primary_mood,
        energy=energy,
        genres=genres or ["pop"],
        search_terms=search_terms if search_terms is not None else ["term a", "term b", "term c"],
        artist_styles=["Artist Style"],
    )


class FakeCatalog:
    """In-memory stand-in for SpotifyCatalogClient.

    Values in ``search_results``, ``related_artists`` and ``artist_top_tracks``
    may be exceptions, which are raised when that key is requested.
    """

    def __init__(self):
        self.user = {"id": "test_user", "display_name": "Test User"}
        self.top_tracks = []
        self.top_artists = []
        self.recently_played = []
        self.search_results = {}
        self.related_artists = {}
        self.artist_top_tracks = {}
        self.user_error = None
        self.create_error = None
        self.add_error = None
        self.playlist_error = None
        self.calls = []
        self.created_playlists = []
        self.added_tracks = []
        self._tracks_by_uri = {}

    def _remember(self, tracks):
        for track in tracks:
            self._tracks_by_uri[track.uri] = track
        return list(tracks)

    @staticmethod
    def _lookup(mapping, key):
        value = mapping.get(key, [])
        if isinstance(value, Exception):
            raise value
        return value

    async def get_current_user(self):
        self.calls.append(("get_current_user",))
        if self.user_error:
            raise self.user_error
        return self.user

    async def get_top_tracks(self, limit=50):
        self.calls.append(("get_top_tracks", limit))
        return self._remember(self.top_tracks[:limit])

    async def get_top_artists(self, limit=50):
        self.calls.append(("get_top_artists", limit))
        return list(self.top_artists[:limit])

    async def get_recently_played(self, limit=50):
        self.calls.append(("get_recently_played", limit))
        return self._remember(self.recently_played[:limit])

    async def search_tracks(self, query, limit=20):
        self.calls.append(("search_tracks", query, limit))
        return self._remember(self._lookup(self.search_results, query)[:limit])

    async def get_related_artists(self, artist_id):
        self.calls.append(("get_related_artists", artist_id))
        return list(self._lookup(self.related_artists, artist_id))

    async def get_artist_top_tracks(self, artist_id):
        self.calls.append(("get_artist_top_tracks", artist_id))
        return self._remember(self._lookup(self.artist_top_tracks, artist_id))

    async def create_playlist(self, user_id, name, description):
        self.calls.append(("create_playlist", user_id, name, description))
        if self.create_error:
            raise self.create_error
        playlist = {"id": "playlist123", "name": name, "description": description}
        self.created_playlists.append(playlist)
        return playlist

    async def add_tracks(self, playlist_id, track_uris):
        self.calls.append(("add_tracks", playlist_id, list(track_uris)))
        if self.add_error:
            raise self.add_error
        self.added_tracks.append((playlist_id, list(track_uris)))
        return {"snapshot_id": "abc123"}

    async def get_playlist(self, playlist_id):
        self.calls.append(("get_playlist", playlist_id))
        if self.playlist_error:
            raise self.playlist_error
        uris = [uri for pid, batch in self.added_tracks if pid == playlist_id for uri in batch]
        created = next((p for p in self.created_playlists if p["id"] == playlist_id), None)
        return {
            "id": playlist_id,
            "name": created["name"] if created else "Test Playlist",
            "description": created["description"] if created else "",
            "public": False,
            "collaborative": False,
            "total_tracks": len(uris),
            "owner": "Test User",
            "tracks": [self._tracks_by_uri[uri].to_dict() for uri in uris],
            "images": [],
            "external_urls": {},
        }

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


class StubMoodAnalyzer:
    def __init__(self, mood):
        self.mood = mood
        self.calls = []

    async def analyze(self, prompt, known_genres):
        self.calls.append((prompt, list(known_genres)))
        return self.mood


class ScriptedRandom(random.Random):
    """Random source whose ``random()`` always returns ``value``.

    Shuffles still work (they draw through ``getrandbits``), seeded by ``seed``.
    """

    def __init__(self, value, seed=0):
        super().__init__(seed)
        self.value = value
        self.draws = 0

    def random(self):
        self.draws += 1
        return self.value

    # Defining getrandbits keeps shuffle() on the bit-based path instead of random()
    def getrandbits(self, k):
        return super().getrandbits(k)


@pytest.fixture
def make_track():
    return build_track


@pytest.fixture
def make_mood():
    return build_mood


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def stub_mood_analyzer():
    return StubMoodAnalyzer


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def write_error():
    return CatalogWriteError("Spotify error during create playlist: 500 boom", status_code=500)


@pytest.fixture
def sample_artists():
    return [
        Artist(id="artist1", name="Test Artist 1", genres=("pop", "rock")),
        Artist(id="artist2", name="Test Artist 2", genres=("indie", "pop")),
        Artist(id="artist3", name="Test Artist 3", genres=("rock", "pop", "jazz")),
    ]


@pytest.fixture
def mock_spotify_client():
    """Create a mock spotipy client for testing"""
    client = Mock()

    client.search.return_value = {
        "tracks": {
            "items": [
                {
                    "id": "track1",
                    "name": "Test Track 1",
                    "artists": [{"name": "Test Artist 1", "id": "artist1"}],
                    "album": {
                        "name": "Test Album 1",
                        "images": [{"url": "https://example.com/album1.jpg"}],
                    },
                    "uri": "spotify:track:track1",
                    "popularity": 80,
                    "duration_ms": 210000,
                },
                {
                    "id": "track2",
                    "name": "Test Track 2",
                    "artists": [{"name": "Test Artist 2", "id": "artist2"}],
                    "album": {"name": "Test Album 2", "images": []},
                    "uri": "spotify:track:track2",
                    "popularity": 70,
                    "duration_ms": 180000,
                },
            ]
        }
    }

    client.current_user_top_tracks.return_value = {
        "items": [
            {
                "id": "top1",
                "name": "Pump It",
                "artists": [{"name": "Hype Crew", "id": "artist_top1"}],
                "album": {"name": "Top Album", "images": []},
                "uri": "spotify:track:top1",
                "duration_ms": 200000,
            },
            {
                # Local files come back without an id
                "id": None,
                "name": "Local File",
                "artists": [{"name": "Someone", "id": None}],
                "album": {"name": "", "images": []},
                "uri": "spotify:local:abc",
                "duration_ms": 100000,
            },
        ]
    }

    client.current_user_top_artists.return_value = {
        "items": [
            {"id": "artist1", "name": "Test Artist 1", "genres": ["pop", "rock"], "images": []},
            {"id": "artist2", "name": "Test Artist 2", "genres": ["indie"], "images": []},
        ]
    }

    client.current_user_recently_played.return_value = {
        "items": [
            {
                "played_at": "2024-03-05T10:00:00Z",
                "track": {
                    "id": "recent1",
                    "name": "Recent Track",
                    "artists": [{"name": "Recent Artist", "id": "artist_recent"}],
                    "album": {"name": "Recent Album", "images": []},
                    "uri": "spotify:track:recent1",
                    "duration_ms": 190000,
                },
            }
        ]
    }

    client.artist_related_artists.return_value = {
        "artists": [
            {"id": "related1", "name": "Related Artist 1", "genres": ["pop"], "images": []},
            {"id": "related2", "name": "Related Artist 2", "genres": [], "images": []},
        ]
    }

    client.artist_top_tracks.return_value = {
        "tracks": [
            {
                "id": "top1",
                "name": "Top Track 1",
                "artists": [{"name": "Test Artist", "id": "artist1"}],
                "album": {"name": "Top Album 1", "images": []},
                "uri": "spotify:track:top1",
                "popularity": 95,
                "duration_ms": 240000,
            }
        ]
    }

    client.current_user.return_value = {
        "id": "test_user",
        "display_name": "Test User",
        "followers": {"total": 100},
        "country": "US",
    }

    client.user_playlist_create.return_value = {
        "id": "playlist123",
        "name": "Test Playlist",
        "description": "Test Description",
        "public": False,
        "collaborative": False,
        "owner": {"display_name": "Test User"},
        "images": [],
    }

    client.playlist_add_items.return_value = {"snapshot_id": "abc123"}

    client.playlist.return_value = {
        "id": "playlist123",
        "name": "Test Playlist",
        "description": "Test Description",
        "public": False,
        "collaborative": False,
        "owner": {"display_name": "Test User"},
        "images": [{"url": "https://example.com/playlist.jpg"}],
        "external_urls": {"spotify": "https://open.spotify.com/playlist/playlist123"},
        "tracks": {
            "total": 2,
            "items": [
                {
                    "track": {
                        "id": "track1",
                        "name": "Playlist Track 1",
                        "artists": [{"name": "Artist 1", "id": "a1"}],
                        "album": {
                            "name": "Album 1",
                            "images": [{"url": "https://example.com/album1.jpg"}],
                        },
                        "uri": "spotify:track:track1",
                        "duration_ms": 210000,
                        "popularity": 80,
                        "preview_url": "https://example.com/preview1.mp3",
                        "external_urls": {"spotify": "https://open.spotify.com/track/track1"},
                    }
                },
                {"track": None},
            ],
        },
    }

    return client
