"""Spotify proxy endpoints.

This module contains the /spotify routes:
- Authorization flow (/spotify/auth, /spotify/callback)
- Snapshot (/spotify)
- Playback control (/spotify/pause, /spotify/play/{track_id})

Every failure is returned as HTTP 500 with {"error": message}.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from spotify import service
from spotify.session import SessionError, SpotifySession

logger = logging.getLogger(__name__)

# Router for Spotify endpoints
router = APIRouter(tags=["spotify"])

# Set by init_spotify_routes()
_session: Optional[SpotifySession] = None


def init_spotify_routes(session: Optional[SpotifySession]):
    """Attach the Spotify session used by the routes.

    Must be called before serving requests. None leaves the routes
    answering with a "not configured" error.
    """
    global _session
    _session = session


def current_session() -> Optional[SpotifySession]:
    return _session


def _get_session() -> SpotifySession:
    if _session is None:
        raise SessionError("Spotify client is not configured")
    return _session


def error_response(exc: Exception) -> JSONResponse:
    message = service.error_message(exc)
    return JSONResponse({"error": message}, status_code=500)


# ============== Authorization Flow ==============

@router.get("/spotify/auth")
async def spotify_auth():
    """Redirect the user to Spotify's consent page."""
    try:
        url = _get_session().authorize_url()
    except Exception as e:
        logger.error(f"[AUTH] Cannot build authorize URL: {e}")
        return error_response(e)
    return RedirectResponse(url=url, status_code=302)


@router.get("/spotify/callback")
async def spotify_callback(code: str = "", error: str = ""):
    """Exchange the authorization code for tokens."""
    try:
        if error:
            raise SessionError(f"Authorization denied: {error}")
        await run_in_threadpool(_get_session().complete_authorization, code)
    except Exception as e:
        logger.warning(f"[AUTH] Authorization failed: {service.error_message(e)}")
        return error_response(e)
    return {"message": "Login successful! You can now use /spotify."}


# ============== Snapshot ==============

@router.get("/spotify")
async def spotify_snapshot():
    """Top 10 tracks, now playing and followed artists."""
    try:
        return await service.get_snapshot(_get_session())
    except Exception as e:
        logger.error(f"[SPOTIFY] Snapshot failed: {service.error_message(e)}")
        return error_response(e)


# ============== Playback Control ==============

@router.api_route("/spotify/pause", methods=["GET", "PUT"])
async def spotify_pause():
    """Pause playback on the active device."""
    try:
        message = await service.pause(_get_session())
    except Exception as e:
        logger.error(f"[SPOTIFY] Pause failed: {service.error_message(e)}")
        return error_response(e)
    return {"message": message}


@router.put("/spotify/play/{track_id}")
async def spotify_play(track_id: str):
    """Start playing a single track."""
    try:
        message = await service.play_track(_get_session(), track_id)
    except Exception as e:
        logger.error(f"[SPOTIFY] Play failed for {track_id}: {service.error_message(e)}")
        return error_response(e)
    return {"message": message}
