"""Config management for spotify-session-proxy."""
import os
from typing import Optional


VERSION = "1.0.0"

REFRESH_POLICIES = ("always", "expiry")

# Names understood by both logging and uvicorn
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_REFRESH_MARGIN = 60


def _as_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_bool(value) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration container."""

    def __init__(self, data: dict = None):
        self.data = data or {}

    @property
    def client_id(self) -> Optional[str]:
        return self.data.get("SPOTIFY_CLIENT_ID") or None

    @property
    def client_secret(self) -> Optional[str]:
        return self.data.get("SPOTIFY_CLIENT_SECRET") or None

    @property
    def redirect_uri(self) -> Optional[str]:
        return self.data.get("SPOTIFY_REDIRECT_URI") or None

    @property
    def host(self) -> str:
        return self.data.get("HOST") or DEFAULT_HOST

    @property
    def port(self) -> int:
        return _as_int(self.data.get("PORT"), DEFAULT_PORT)

    @property
    def refresh_policy(self) -> str:
        policy = (self.data.get("SPOTIFY_REFRESH_POLICY") or "always").strip().lower()
        return policy if policy in REFRESH_POLICIES else "always"

    @property
    def refresh_margin(self) -> int:
        return _as_int(self.data.get("SPOTIFY_REFRESH_MARGIN"), DEFAULT_REFRESH_MARGIN)

    @property
    def strict_refresh(self) -> bool:
        return _as_bool(self.data.get("SPOTIFY_STRICT_REFRESH"))

    @property
    def log_level(self) -> str:
        level = (self.data.get("LOG_LEVEL") or "INFO").strip().upper()
        level = LOG_LEVEL_ALIASES.get(level, level)
        return level if level in LOG_LEVELS else "INFO"

    @property
    def log_format(self) -> str:
        return "json" if (self.data.get("LOG_FORMAT") or "").lower() == "json" else "plain"

    def is_valid(self) -> bool:
        """Check if config has the OAuth client fields."""
        return bool(self.client_id and self.client_secret and self.redirect_uri)


def load_config(environ: dict = None) -> Config:
    """Load config from the environment (call load_dotenv() first for .env support)."""
    source = os.environ if environ is None else environ
    return Config(dict(source))
