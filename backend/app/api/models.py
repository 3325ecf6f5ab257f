from typing import Optional, List, Dict, Any
from pydantic import BaseModel


class PlaylistTrack(BaseModel):
    id: str
    name: str
    artist: str
    album: str
    uri: str
    duration_ms: int
    popularity: int = 0
    album_cover: Optional[str] = None
    preview_url: Optional[str] = None
    external_urls: Dict[str, str] = {}


class PlaylistData(BaseModel):
    id: str
    name: str
    description: str
    public: bool
    collaborative: bool
    total_tracks: int
    owner: str
    tracks: List[PlaylistTrack]
    images: Optional[List[Dict[str, Any]]] = []
    external_urls: Dict[str, str] = {}


class GenerateRequest(BaseModel):
    # Length and emptiness are checked by the generator so that every
    # malformed prompt gets the same 400 response
    prompt: Any = None


class MoodAnalysis(BaseModel):
    primaryMood: str
    energy: int
    genres: List[str]
    searchTerms: List[str]
    artistStyles: List[str]


class GeneratedPlaylistResponse(BaseModel):
    id: str
    userId: str
    spotifyPlaylistId: str
    name: str
    prompt: str
    moodAnalysis: MoodAnalysis
    trackIds: List[str]
    createdAt: str
    playlist: PlaylistData
    tracks: List[PlaylistTrack]


class PlaylistRecord(BaseModel):
    id: str
    spotifyPlaylistId: str
    name: str
    prompt: str
    moodAnalysis: MoodAnalysis
    trackIds: List[str]
    createdAt: str


class UserData(BaseModel):
    spotify_id: str
    display_name: Optional[str] = None
    top_genres: List[str] = []
    last_sync: Optional[str] = None


class SyncResponse(BaseModel):
    top_genres: List[str]
    user: UserData

