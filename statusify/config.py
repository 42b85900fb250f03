"""Configuration: env, data paths, Spotify app defaults, Slack token, polling."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of statusify package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID, SLACK_API_TOKEN etc. are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("STATUSIFY_DATA_DIR", str(BASE_DIR / "data")))
CREDENTIAL_STORE_PATH = DATA_DIR / "credentials.json"

# API
API_HOST = os.getenv("STATUSIFY_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("STATUSIFY_API_PORT", "8000"))
# After OAuth callback, redirect here instead of the home page
STATUSIFY_WEB_ORIGIN = os.getenv("STATUSIFY_WEB_ORIGIN", "")

# Spotify (optional defaults; the app registration can also be entered on the home page)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_REDIRECT_URI = os.getenv("SPOTIFY_REDIRECT_URI", "http://localhost:8000/auth")
SPOTIFY_SCOPES = "user-read-currently-playing"
SPOTIFY_REQUESTS_TIMEOUT = float(os.getenv("SPOTIFY_REQUESTS_TIMEOUT", "10"))

# Poller: Spotify rate-limits aggressive polling, keep this >= 10s
POLL_INTERVAL_SEC = float(os.getenv("STATUSIFY_POLL_INTERVAL_SEC", "15"))

# Unredeemed OAuth states kept before the oldest is dropped
MAX_OUTSTANDING_NONCES = int(os.getenv("STATUSIFY_MAX_OUTSTANDING_NONCES", "20"))

# Slack (user token with users.profile:write)
SLACK_API_TOKEN = os.getenv("SLACK_API_TOKEN", "")
SLACK_STATUS_EMOJIS = os.getenv(
    "SLACK_STATUS_EMOJIS",
    ":headphones: :musical_keyboard: :musical_note: :musical_score: :guitar:",
).split()
SLACK_REQUESTS_TIMEOUT = float(os.getenv("SLACK_REQUESTS_TIMEOUT", "10"))


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
