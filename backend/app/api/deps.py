"""
FastAPI dependencies shared by the routers
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from ..core.config import settings
from ..core.exceptions import InvalidPromptError, SpotifyAuthError
from ..playlist.generator import validate_prompt
from ..services.mood_service import MoodAnalyzer
from ..services.spotify_catalog import SpotifyCatalogClient
from ..services.spotify_service import spotify_service
from ..services.store import get_record_store
from .models import GenerateRequest

logger = logging.getLogger(__name__)

_mood_analyzer = MoodAnalyzer()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )
    return token.strip()


async def get_catalog(
    authorization: Optional[str] = Header(default=None),
) -> SpotifyCatalogClient:
    """Catalog client for the caller's Spotify token (or the service account)."""
    try:
        return await spotify_service.get_catalog(_bearer_token(authorization))
    except SpotifyAuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )


async def get_store():
    return await get_record_store()


def get_mood_analyzer() -> MoodAnalyzer:
    return _mood_analyzer


async def get_prompt(request: Optional[GenerateRequest] = None) -> str:
    """Validated prompt from the request body.

    Declared ahead of ``get_catalog`` in routes so a bad prompt is rejected
    before any token refresh or catalog call.
    """
    try:
        return validate_prompt(
            request.prompt if request else None, settings.prompt_max_length
        )
    except InvalidPromptError as e:
        logger.info(f"Rejected prompt: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid prompt"
        )
