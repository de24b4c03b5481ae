"""Session proxy operations: snapshot, pause and play.

spotipy is blocking, so each Web API call runs in Starlette's threadpool.
"""

import asyncio
import logging
from typing import Optional

from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError
from starlette.concurrency import run_in_threadpool

from spotify.session import SpotifySession

logger = logging.getLogger(__name__)

TOP_TRACKS_LIMIT = 10
FOLLOWED_ARTISTS_LIMIT = 50

ACTIONS = {
    "pause": "PUT /spotify/pause",
    "play": "PUT /spotify/play/{trackId} (replace {trackId} with a track ID from topTracks)",
}


def error_message(exc: Exception) -> str:
    """Best human-readable message for a provider or SDK failure."""
    if isinstance(exc, SpotifyException):
        # spotipy prefixes the request URL: "<url>:\n <message>"
        return exc.msg.split(":\n ", 1)[-1]
    if isinstance(exc, SpotifyOauthError):
        return getattr(exc, "error_description", None) or str(exc)
    return str(exc) or exc.__class__.__name__


def _first_artist(item: dict) -> Optional[str]:
    artists = item.get("artists") or []
    return artists[0]["name"] if artists else None


def project_track(track: dict) -> dict:
    return {
        "id": track["id"],
        "name": track["name"],
        "artist": _first_artist(track),
        "uri": track["uri"],
    }


def project_artist(artist: dict) -> dict:
    return {"id": artist["id"], "name": artist["name"], "uri": artist["uri"]}


def project_now_playing(payload: Optional[dict]) -> Optional[dict]:
    """Currently-playing projection, or None when nothing is playing.

    The endpoint answers 204 (no body) with no active device, and may also
    return a body whose item is null (e.g. during an ad).
    """
    if not payload or not payload.get("item"):
        return None
    item = payload["item"]
    return {
        "name": item["name"],
        "artist": _first_artist(item),
        "isPlaying": bool(payload.get("is_playing")),
    }


async def get_snapshot(session: SpotifySession) -> dict:
    """Top tracks, now playing and followed artists, fetched concurrently.

    The three reads are joined; if any one raises, the exception propagates
    and no partial payload is built.
    """
    await run_in_threadpool(session.refresh_if_needed)
    client = session.client()

    top_tracks, now_playing, followed = await asyncio.gather(
        run_in_threadpool(client.current_user_top_tracks, limit=TOP_TRACKS_LIMIT),
        run_in_threadpool(client.current_user_playing_track),
        run_in_threadpool(client.current_user_followed_artists, limit=FOLLOWED_ARTISTS_LIMIT),
    )

    tracks = (top_tracks or {}).get("items") or []
    artists = ((followed or {}).get("artists") or {}).get("items") or []

    return {
        "topTracks": [project_track(t) for t in tracks[:TOP_TRACKS_LIMIT]],
        "nowPlaying": project_now_playing(now_playing),
        "followedArtists": [project_artist(a) for a in artists[:FOLLOWED_ARTISTS_LIMIT]],
        "actions": ACTIONS,
    }


async def pause(session: SpotifySession) -> str:
    await run_in_threadpool(session.refresh_if_needed)
    client = session.client()
    await run_in_threadpool(client.pause_playback)
    logger.info("[SPOTIFY] Playback paused")
    return "Playback paused."


async def play_track(session: SpotifySession, track_id: str) -> str:
    """Replace current playback with a single track, by id."""
    await run_in_threadpool(session.refresh_if_needed)
    client = session.client()
    track = await run_in_threadpool(client.track, track_id)
    await run_in_threadpool(client.start_playback, uris=[track["uri"]])
    logger.info(f"[SPOTIFY] Playing track {track_id}")
    return f"Playing: {track['name']}"
