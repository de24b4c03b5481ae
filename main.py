"""Spotify Session Proxy - personal proxy to the Spotify Web API.

This server handles:
- OAuth authorization-code flow against Spotify (/spotify/auth, /spotify/callback)
- Snapshot of top tracks, now playing and followed artists (/spotify)
- Playback control (/spotify/pause, /spotify/play/{track_id})

Tokens are kept in process memory for a single user and are lost on restart.
"""
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import VERSION, load_config
from logging_config import setup_logging

# Load environment: .env (local override), then process environment
load_dotenv()

local_config = load_config()

setup_logging(level=local_config.log_level, log_format=local_config.log_format)
logger = logging.getLogger(__name__)

logger.info(f"[STARTUP] Config loaded - valid: {local_config.is_valid()}")
logger.info(f"[STARTUP] Refresh policy: {local_config.refresh_policy} (strict: {local_config.strict_refresh})")

# ============== Spotify Session ==============
from spotify.session import SpotifySession

spotify_session: SpotifySession = None
if local_config.is_valid():
    spotify_session = SpotifySession.from_config(local_config)
else:
    logger.warning(
        "[STARTUP] SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET and SPOTIFY_REDIRECT_URI "
        "must be set; /spotify routes will return errors"
    )

# ============== FastAPI App ==============
app = FastAPI(
    title="Spotify Session Proxy",
    description="A thin personal proxy to the Spotify Web API",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============== Include Routers ==============
from spotify.endpoints import router as spotify_router, init_spotify_routes, current_session
init_spotify_routes(spotify_session)
app.include_router(spotify_router)


# ============== Server Info Endpoints ==============

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    session = current_session()
    return {
        "status": "healthy",
        "service": "spotify-session-proxy",
        "authorized": bool(session and session.tokens.is_authorized),
    }


@app.get("/")
async def root():
    """Root endpoint with server info."""
    return {
        "name": "Spotify Session Proxy",
        "version": VERSION,
        "configured": current_session() is not None,
        "endpoints": {
            "auth": "GET /spotify/auth",
            "callback": "GET /spotify/callback?code=",
            "snapshot": "GET /spotify",
            "pause": "PUT /spotify/pause",
            "play": "PUT /spotify/play/{trackId}",
        },
    }


# ============== Main Entry Point ==============

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting server on {local_config.host}:{local_config.port}")
    uvicorn.run(app, host=local_config.host, port=local_config.port)
