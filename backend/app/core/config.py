import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    # Spotify App Configuration
    spotify_client_id: Optional[str] = os.getenv("SPOTIFY_CLIENT_ID")
    spotify_client_secret: Optional[str] = os.getenv("SPOTIFY_CLIENT_SECRET")

    # Optional service account, used when a request carries no bearer token
    spotify_service_refresh_token: Optional[str] = os.getenv(
        "SPOTIFY_SERVICE_REFRESH_TOKEN"
    )

    spotify_market: str = os.getenv("SPOTIFY_MARKET", "US")
    spotify_requests_timeout: int = int(os.getenv("SPOTIFY_REQUESTS_TIMEOUT", "10"))

    # Application Configuration
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Mood analysis (OpenAI-compatible endpoint, OpenRouter by default)
    openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-3.5-turbo")
    openrouter_base_url: str = os.getenv(
        "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
    )
    openrouter_referer: Optional[str] = os.getenv("OPENROUTER_SITE_URL")
    openrouter_title: Optional[str] = os.getenv("OPENROUTER_SITE_NAME")
    mood_temperature: float = float(os.getenv("MOOD_TEMPERATURE", "0.7"))
    mood_max_tokens: int = int(os.getenv("MOOD_MAX_TOKENS", "500"))

    # LangSmith tracing configuration
    langsmith_api_key: Optional[str] = os.getenv("LANGSMITH_API_KEY")
    langsmith_project: Optional[str] = os.getenv(
        "LANGSMITH_PROJECT", "mood-playlist-generator"
    )
    langsmith_tracing_enabled: bool = (
        os.getenv("LANGSMITH_TRACING_ENABLED", "false").lower() == "true"
    )

    # Redis Configuration for token caching and generation records
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    redis_enabled: bool = os.getenv("REDIS_ENABLED", "true").lower() == "true"

    # Playlist generation
    playlist_target_size: int = int(os.getenv("PLAYLIST_TARGET_SIZE", "25"))
    prompt_max_length: int = int(os.getenv("PROMPT_MAX_LENGTH", "500"))
    top_tracks_limit: int = int(os.getenv("TOP_TRACKS_LIMIT", "50"))

    # Spotify API URLs
    spotify_token_url: str = "https://accounts.spotify.com/api/token"

    class Config:
        case_sensitive = False

    def validate_required_settings(self):
        """Validate that required settings are present"""
        if not self.spotify_client_id:
            raise ValueError("SPOTIFY_CLIENT_ID is required")
        if not self.spotify_client_secret:
            raise ValueError("SPOTIFY_CLIENT_SECRET is required")
        if not self.openrouter_api_key:
            raise ValueError("OPENROUTER_API_KEY is required")
        if self.playlist_target_size < 1:
            raise ValueError("PLAYLIST_TARGET_SIZE must be positive")

    @property
    def service_account_configured(self) -> bool:
        return bool(
            self.spotify_service_refresh_token
            and self.spotify_client_id
            and self.spotify_client_secret
        )


# Global settings instance
settings = Settings()
