"""
Exception types shared by the catalog wrapper, the generator and the routers
"""

from typing import Optional


class PlaylistGeneratorError(Exception):
    """Base exception for playlist generation failures"""
    pass


class InvalidPromptError(PlaylistGeneratorError):
    """Raised when the mood prompt is empty, not text, or too long"""
    pass


class SpotifyAuthError(PlaylistGeneratorError):
    """Raised when Spotify credentials are missing, expired or rejected"""
    pass


class CatalogError(PlaylistGeneratorError):
    """Raised when a Spotify catalog call fails for a non-auth reason"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogWriteError(CatalogError):
    """Raised when creating a playlist or appending tracks fails"""
    pass
