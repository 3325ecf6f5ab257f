#!/usr/bin/env python3
"""
Mood Playlist Generator - FastAPI Backend
Turns a free-text mood into a Spotify playlist built from the user's history,
mood searches and related-artist discovery
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.redis import close_redis_client
from .routers import api

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)
logger = logging.getLogger(__name__)

# Set specific loggers to appropriate levels
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("spotipy").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)

# LangSmith picks these up when tracing the mood analysis
if settings.langsmith_tracing_enabled and settings.langsmith_api_key:
    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = settings.langsmith_api_key
    os.environ["LANGSMITH_PROJECT"] = settings.langsmith_project or "mood-playlist-generator"
    logger.info("LangSmith tracing enabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        settings.validate_required_settings()
    except ValueError as e:
        logger.warning(f"Configuration incomplete: {e}")
    yield
    await close_redis_client()


app = FastAPI(
    title="Mood Playlist Generator",
    description="Generates Spotify playlists from a free-text mood description",
    version="1.0.0",
    lifespan=lifespan,
)

allowed_origins = [settings.frontend_url]

if "localhost" not in settings.frontend_url:
    allowed_origins.extend(
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(api.router, prefix="/api", tags=["api"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Mood Playlist Generator API is running"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancers"""
    return {
        "status": "healthy",
        "service": "mood-playlist-generator",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
