"""Spotify session: authorization, token refresh and client creation.

One SpotifySession exists per process. It wraps spotipy's SpotifyOAuth,
whose cache handler is the SessionTokens store, so every successful code
exchange or refresh lands in that store.
"""

import logging
import time
from typing import Optional

import requests
import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from config import Config
from spotify.stores import SessionTokens

logger = logging.getLogger(__name__)

SCOPES = [
    "user-top-read",
    "user-read-currently-playing",
    "user-modify-playback-state",
    "user-follow-read",
]

REFRESH_ERRORS = (SpotifyOauthError, SpotifyException, requests.RequestException)


class SessionError(Exception):
    """Raised for session failures detected locally (no provider call made)."""


def create_auth_manager(config: Config, tokens: SessionTokens = None) -> SpotifyOAuth:
    """Build the spotipy OAuth manager for the configured client."""
    return SpotifyOAuth(
        client_id=config.client_id,
        client_secret=config.client_secret,
        redirect_uri=config.redirect_uri,
        scope=" ".join(SCOPES),
        cache_handler=tokens or SessionTokens(),
        open_browser=False,
    )


class SpotifySession:
    """The single user's Spotify session.

    Refresh policies:
        always: request a new access token before every authenticated call.
        expiry: only when the stored token is unknown or about to expire.

    With strict_refresh off, refresh failures are logged and swallowed and the
    following API call runs with whatever token is stored.
    """

    def __init__(
        self,
        auth_manager: SpotifyOAuth,
        refresh_policy: str = "always",
        refresh_margin: int = 60,
        strict_refresh: bool = False,
    ):
        self.auth_manager = auth_manager
        self.refresh_policy = refresh_policy
        self.refresh_margin = refresh_margin
        self.strict_refresh = strict_refresh

    @classmethod
    def from_config(cls, config: Config) -> "SpotifySession":
        return cls(
            create_auth_manager(config),
            refresh_policy=config.refresh_policy,
            refresh_margin=config.refresh_margin,
            strict_refresh=config.strict_refresh,
        )

    @property
    def tokens(self) -> SessionTokens:
        return self.auth_manager.cache_handler

    def authorize_url(self) -> str:
        return self.auth_manager.get_authorize_url()

    def complete_authorization(self, code: Optional[str]) -> None:
        """Exchange an authorization code for the token pair.

        Raises on failure; the stored tokens are only replaced on success.
        """
        if not code:
            # spotipy would fall back to an interactive prompt without a code
            raise SessionError("Missing authorization code")

        self.auth_manager.get_access_token(code, as_dict=False, check_cache=False)
        logger.info(f"[AUTH] Authorization complete (scope: {self.tokens.scope})")

    def needs_refresh(self) -> bool:
        if self.refresh_policy != "expiry":
            return True
        expires_at = self.tokens.expires_at
        if not self.tokens.access_token or expires_at is None:
            return True
        return expires_at - int(time.time()) < self.refresh_margin

    def refresh_if_needed(self) -> bool:
        """Refresh the access token according to the refresh policy.

        Returns True if a new access token was stored.
        """
        if not self.needs_refresh():
            return False

        refresh_token = self.tokens.refresh_token
        if not refresh_token:
            if self.strict_refresh:
                raise SessionError("Not authorized: no refresh token")
            logger.warning("[REFRESH] Skipped: no refresh token (visit /spotify/auth)")
            return False

        try:
            self.auth_manager.refresh_access_token(refresh_token)
        except REFRESH_ERRORS as e:
            if self.strict_refresh:
                raise
            logger.error(f"[REFRESH] Error refreshing token: {e}")
            return False

        logger.debug("[REFRESH] Access token refreshed")
        return True

    def client(self) -> spotipy.Spotify:
        """Return a Web API client bound to the current access token."""
        # No shared requests.Session: snapshot reads run in parallel threads
        return spotipy.Spotify(auth=self.tokens.access_token, requests_session=False, retries=0)
