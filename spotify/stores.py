"""In-memory token store for the Spotify session.

Tokens live only in process memory and are lost on restart.
There is a single slot: a second authorization overwrites the first.
"""

from typing import Optional

from spotipy.cache_handler import CacheHandler


class SessionTokens(CacheHandler):
    """Holds the current OAuth token pair.

    Plugged into spotipy's SpotifyOAuth as its cache handler, so a successful
    code exchange or refresh writes straight into this object. Failed requests
    never reach save_token_to_cache, leaving the stored pair untouched.
    """

    def __init__(self):
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self.expires_at: Optional[int] = None
        self.scope: Optional[str] = None

    @property
    def is_authorized(self) -> bool:
        return bool(self.access_token and self.refresh_token)

    def get_cached_token(self) -> Optional[dict]:
        if not self.access_token:
            return None
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "scope": self.scope,
        }

    def save_token_to_cache(self, token_info: dict) -> None:
        self.access_token = token_info["access_token"]
        # Refresh responses usually omit the refresh token
        if token_info.get("refresh_token"):
            self.refresh_token = token_info["refresh_token"]
        self.expires_at = token_info.get("expires_at")
        self.scope = token_info.get("scope", self.scope)
