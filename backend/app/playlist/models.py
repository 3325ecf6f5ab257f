from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

PRIMARY_MOODS = (
    "happy",
    "sad",
    "energetic",
    "calm",
    "angry",
    "nostalgic",
    "confident",
    "anxious",
)


@dataclass(frozen=True)
class ArtistRef:
    name: str
    id: Optional[str] = None


@dataclass(frozen=True)
class Track:
    id: str
    name: str
    artists: Tuple[ArtistRef, ...]
    album: str
    uri: str
    duration_ms: int
    album_images: Tuple[str, ...] = ()
    popularity: int = 0
    preview_url: Optional[str] = None
    external_urls: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def first_artist(self) -> Optional[ArtistRef]:
        return self.artists[0] if self.artists else None

    @property
    def artist_names(self) -> str:
        return ", ".join(artist.name for artist in self.artists)

    @classmethod
    def from_spotify_track(cls, track_data: Dict[str, Any]) -> "Track":
        album = track_data.get("album") or {}
        return cls(
            id=track_data["id"],
            name=track_data["name"],
            artists=tuple(
                ArtistRef(name=artist.get("name", ""), id=artist.get("id"))
                for artist in track_data.get("artists", [])
            ),
            album=album.get("name", ""),
            uri=track_data["uri"],
            duration_ms=track_data.get("duration_ms", 0),
            album_images=tuple(
                image["url"] for image in album.get("images", []) if image.get("url")
            ),
            popularity=track_data.get("popularity", 0),
            preview_url=track_data.get("preview_url"),
            external_urls=dict(track_data.get("external_urls") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "artist": self.artist_names,
            "album": self.album,
            "uri": self.uri,
            "duration_ms": self.duration_ms,
            "popularity": self.popularity,
            "album_cover": self.album_images[0] if self.album_images else None,
            "preview_url": self.preview_url,
            "external_urls": self.external_urls,
        }


@dataclass(frozen=True)
class Artist:
    id: str
    name: str
    genres: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()

    @classmethod
    def from_spotify_artist(cls, artist_data: Dict[str, Any]) -> "Artist":
        return cls(
            id=artist_data["id"],
            name=artist_data.get("name", ""),
            genres=tuple(artist_data.get("genres") or ()),
            images=tuple(
                image["url"]
                for image in artist_data.get("images") or []
                if image.get("url")
            ),
        )


class MoodDescriptor(BaseModel):
    """Structured reading of a mood prompt.

    The language model answers in camelCase (``primaryMood``, ``searchTerms``,
    ``artistStyles``); both spellings are accepted and camelCase is emitted
    when dumping ``by_alias``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    primary_mood: str = Field(alias="primaryMood")
    energy: int = Field(ge=1, le=10)
    genres: List[str] = Field(default_factory=list)
    search_terms: List[str] = Field(default_factory=list, alias="searchTerms")
    artist_styles: List[str] = Field(default_factory=list, alias="artistStyles")

    @field_validator("primary_mood")
    @classmethod
    def _normalize_mood(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("primaryMood must not be empty")
        return value


@dataclass
class PublishedPlaylist:
    playlist: Dict[str, Any]
    name: str
    description: str
    tracks: List[Track]

    @property
    def playlist_id(self) -> str:
        return self.playlist["id"]
