"""Fake Spotify auth manager and Web API client shared by all tests."""

import time
from typing import Optional

import pytest
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from spotify.session import SCOPES, SpotifySession
from spotify.stores import SessionTokens


# ── Fake OAuth manager ──────────────────────────────────────────────


class FakeAuthManager:
    """Mimics the parts of spotipy.SpotifyOAuth the session uses."""

    def __init__(self, valid_codes=("good-code",), refresh_error: Optional[Exception] = None):
        self.cache_handler = SessionTokens()
        self.valid_codes = set(valid_codes)
        self.refresh_error = refresh_error
        self.exchanged: list[str] = []
        self.refreshed: list[str] = []

    def get_authorize_url(self, state=None):
        return "https://accounts.spotify.com/authorize?client_id=cid&scope=" + "+".join(SCOPES)

    def get_access_token(self, code=None, as_dict=True, check_cache=True):
        self.exchanged.append(code)
        if code not in self.valid_codes:
            raise SpotifyOauthError(
                "error: invalid_grant, error_description: Invalid authorization code",
                error="invalid_grant",
                error_description="Invalid authorization code",
            )
        token_info = {
            "access_token": f"access-{len(self.exchanged)}",
            "refresh_token": "refresh-1",
            "expires_in": 3600,
            "expires_at": int(time.time()) + 3600,
            "scope": " ".join(SCOPES),
        }
        self.cache_handler.save_token_to_cache(token_info)
        return token_info if as_dict else token_info["access_token"]

    def refresh_access_token(self, refresh_token):
        self.refreshed.append(refresh_token)
        if self.refresh_error:
            raise self.refresh_error
        token_info = {
            "access_token": f"refreshed-{len(self.refreshed)}",
            "expires_in": 3600,
            "expires_at": int(time.time()) + 3600,
            "scope": " ".join(SCOPES),
        }
        self.cache_handler.save_token_to_cache(token_info)
        return token_info


# ── Fake Web API client ─────────────────────────────────────────────


def make_track(n: int) -> dict:
    return {
        "id": f"track-{n}",
        "name": f"Song {n}",
        "artists": [{"name": f"Artist {n}"}, {"name": "Featured"}],
        "uri": f"spotify:track:track-{n}",
        "popularity": 50,
    }


def make_artist(n: int) -> dict:
    return {
        "id": f"artist-{n}",
        "name": f"Artist {n}",
        "uri": f"spotify:artist:artist-{n}",
        "genres": ["pop"],
    }


NO_ACTIVE_DEVICE = SpotifyException(
    404, -1,
    "https://api.spotify.com/v1/me/player/pause:\n Player command failed: No active device found",
    reason="NO_ACTIVE_DEVICE",
)


class FakeSpotify:
    """Mimics the spotipy.Spotify calls used by the proxy."""

    def __init__(self, top_count=10, artist_count=50, now_playing=None, active_device=True):
        self.top = [make_track(n) for n in range(top_count)]
        self.artists = [make_artist(n) for n in range(artist_count)]
        self.now_playing = now_playing
        self.active_device = active_device
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple] = []

    def _record(self, name, **kwargs):
        self.calls.append((name, kwargs))
        if name in self.failures:
            raise self.failures[name]

    def current_user_top_tracks(self, limit=20, offset=0, time_range="medium_term"):
        self._record("current_user_top_tracks", limit=limit)
        return {"items": self.top[:limit], "total": len(self.top)}

    def current_user_playing_track(self):
        self._record("current_user_playing_track")
        return self.now_playing

    def current_user_followed_artists(self, limit=20, after=None):
        self._record("current_user_followed_artists", limit=limit)
        return {"artists": {"items": self.artists[:limit], "total": len(self.artists)}}

    def pause_playback(self, device_id=None):
        self._record("pause_playback")
        if not self.active_device:
            raise NO_ACTIVE_DEVICE

    def track(self, track_id, market=None):
        self._record("track", track_id=track_id)
        for track in self.top:
            if track["id"] == track_id:
                return track
        raise SpotifyException(
            400, -1, f"https://api.spotify.com/v1/tracks/{track_id}:\n Invalid base62 id"
        )

    def start_playback(self, device_id=None, context_uri=None, uris=None, offset=None, position_ms=None):
        self._record("start_playback", uris=uris)
        if not self.active_device:
            raise NO_ACTIVE_DEVICE

    def called(self, name) -> bool:
        return any(call[0] == name for call in self.calls)


# ── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def auth_manager():
    return FakeAuthManager()


@pytest.fixture
def fake_spotify():
    return FakeSpotify()


@pytest.fixture
def session(auth_manager, fake_spotify):
    session = SpotifySession(auth_manager)
    session.client = lambda: fake_spotify
    return session


@pytest.fixture
def authorized_session(session):
    session.complete_authorization("good-code")
    return session
