"""
API router - playlist generation, user sync and playlist lookup
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.deps import get_catalog, get_mood_analyzer, get_prompt, get_store
from ..api.models import (
    GeneratedPlaylistResponse,
    PlaylistData,
    PlaylistRecord,
    SyncResponse,
)
from ..core.exceptions import CatalogError, InvalidPromptError, SpotifyAuthError
from ..playlist.generator import PlaylistGenerator
from ..services.store import GenerationRecord
from ..services.user_service import sync_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _record_fields(record: GenerationRecord) -> dict:
    return {
        "id": record.id,
        "spotifyPlaylistId": record.spotify_playlist_id,
        "name": record.name,
        "prompt": record.prompt,
        "moodAnalysis": record.mood_analysis.model_dump(by_alias=True),
        "trackIds": record.track_ids,
        "createdAt": record.created_at,
    }


@router.post("/playlists/generate", response_model=GeneratedPlaylistResponse)
async def generate_playlist(
    prompt: str = Depends(get_prompt),
    catalog=Depends(get_catalog),
    store=Depends(get_store),
    mood_analyzer=Depends(get_mood_analyzer),
):
    """Generate and publish a playlist from a mood prompt"""
    logger.info("🎧 Playlist generation request received")
    generator = PlaylistGenerator(catalog, mood_analyzer, store)

    try:
        result = await generator.generate(prompt)
    except InvalidPromptError as e:
        logger.info(f"Rejected prompt: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid prompt")
    except SpotifyAuthError as e:
        logger.warning(f"Spotify authorization failed: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except Exception as e:
        logger.error(f"💥 Error generating playlist: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate playlist",
        )

    logger.info(f"✅ Generated playlist {result.record.spotify_playlist_id} with {len(result.tracks)} tracks")
    return GeneratedPlaylistResponse(
        userId=result.record.user_id,
        playlist=PlaylistData(**result.playlist),
        tracks=[track.to_dict() for track in result.tracks],
        **_record_fields(result.record),
    )


@router.post("/user/sync", response_model=SyncResponse)
async def sync_user_data(catalog=Depends(get_catalog), store=Depends(get_store)):
    """Refresh the user's genre preferences from their top artists"""
    try:
        return await sync_user(catalog, store)
    except SpotifyAuthError as e:
        logger.warning(f"Spotify authorization failed during sync: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except Exception as e:
        logger.error(f"Error syncing user data: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sync user data",
        )


@router.get("/playlists", response_model=List[PlaylistRecord])
async def list_playlists(
    limit: int = Query(default=20, ge=1, le=100),
    catalog=Depends(get_catalog),
    store=Depends(get_store),
):
    """List the caller's generated playlists, newest first"""
    try:
        spotify_user = await catalog.get_current_user()
        records = await store.list_records(spotify_user["id"], limit=limit)
    except SpotifyAuthError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except Exception as e:
        logger.error(f"Error listing playlists: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list playlists",
        )

    return [PlaylistRecord(**_record_fields(record)) for record in records]


@router.get("/playlist/{playlist_id}", response_model=PlaylistData)
async def get_playlist(playlist_id: str, catalog=Depends(get_catalog)):
    """Get playlist information with its tracks"""
    try:
        playlist_data = await catalog.get_playlist(playlist_id)
    except SpotifyAuthError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except CatalogError as e:
        if e.status_code == 404:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playlist not found")
        logger.error(f"Error fetching playlist {playlist_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch playlist",
        )

    return PlaylistData(**playlist_data)
