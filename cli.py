"""CLI entry point for spotify-session-proxy.

Runs the proxy server in the foreground and helps with the one-time
browser login against Spotify.
"""
import argparse
import os
import subprocess
import sys
import webbrowser

import requests
import uvicorn
from dotenv import load_dotenv

from config import VERSION, load_config

load_dotenv()


# ============== Helper Functions ==============

def local_url(config, path: str = "") -> str:
    """URL of the locally running server."""
    return f"http://localhost:{config.port}{path}"


def is_wsl() -> bool:
    """Check if running inside WSL."""
    if os.environ.get("WSL_DISTRO_NAME"):
        return True
    try:
        with open("/proc/version", "r") as f:
            version = f.read().lower()
        return "microsoft" in version or "wsl" in version
    except OSError:
        return False


def open_browser(url: str) -> None:
    """Open URL in browser, handling WSL gracefully."""
    if is_wsl():
        try:
            result = subprocess.run(["wslview", url], capture_output=True, timeout=5)
            if result.returncode == 0:
                return
        except (FileNotFoundError, subprocess.TimeoutExpired):
            pass
    webbrowser.open(url)


def fetch_health(config) -> dict:
    """Query /health on the local server; empty dict if it does not answer."""
    try:
        response = requests.get(local_url(config, "/health"), timeout=2)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError):
        return {}


# ============== Commands ==============

def cmd_start():
    """Run the server in the foreground."""
    config = load_config()
    if not config.is_valid():
        print("[WARNING] Spotify credentials are not configured.")
        print("  Set SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET and SPOTIFY_REDIRECT_URI (or use a .env file).")
    print(f"Starting Spotify Session Proxy on {config.host}:{config.port}")
    print(f"Log in once at: {local_url(config, '/spotify/auth')}\n")
    uvicorn.run("main:app", host=config.host, port=config.port, log_level=config.log_level.lower())


def cmd_login():
    """Open the Spotify consent page through the running server."""
    config = load_config()
    if not fetch_health(config):
        print(f"\n[ERROR] Server is not running on port {config.port}.")
        print("  Start it first with: spotify-proxy start")
        sys.exit(1)

    url = local_url(config, "/spotify/auth")
    print("Opening browser for Spotify login...")
    print(f"If browser doesn't open, visit:\n  {url}\n")
    open_browser(url)


def cmd_status():
    """Show current status."""
    config = load_config()

    print("\n" + "=" * 50)
    print("  Spotify Session Proxy Status")
    print("=" * 50)

    print("\n[Config]")
    if config.is_valid():
        print("  Status:   Configured")
        print(f"  Client:   {config.client_id[:8]}...")
        print(f"  Redirect: {config.redirect_uri}")
    else:
        print("  Status:   Missing Spotify credentials")
    print(f"  Refresh:  {config.refresh_policy} (strict: {config.strict_refresh})")

    print("\n[Server]")
    health = fetch_health(config)
    if health:
        print(f"  Status:   Running on port {config.port}")
        print(f"  Session:  {'Authorized' if health.get('authorized') else 'Not authorized'}")
    else:
        print("  Status:   Not running")

    print("\n" + "=" * 50 + "\n")


def cmd_version():
    """Show version information."""
    print(f"spotify-session-proxy v{VERSION}")


def cmd_help():
    """Show detailed help."""
    print("""
Spotify Session Proxy - personal proxy to the Spotify Web API

USAGE:
    spotify-proxy <command>

COMMANDS:
    start       Start the server in the foreground
    login       Open the Spotify login page (server must be running)
    status      Show configuration and server status
    version     Show version information
    help        Show this help message

QUICK START:
    1. Create a .env with SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, SPOTIFY_REDIRECT_URI
    2. Run 'spotify-proxy start'
    3. In another terminal run 'spotify-proxy login' and approve access
    4. GET http://localhost:5000/spotify
""")


# ============== Main Entry Point ==============

def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="spotify-proxy",
        description="Spotify Session Proxy - personal proxy to the Spotify Web API",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="start",
        choices=["start", "login", "status", "version", "help"],
        help="Command to run (default: start)"
    )
    args = parser.parse_args()

    if args.command == "start":
        cmd_start()
    elif args.command == "login":
        cmd_login()
    elif args.command == "status":
        cmd_status()
    elif args.command == "version":
        cmd_version()
    elif args.command == "help":
        cmd_help()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
