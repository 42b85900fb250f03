"""Data models for the Spotify session and now-playing state."""
from statusify.models.playback import Track, format_now_playing
from statusify.models.session import AppInfo, SessionState, TokenPair

__all__ = [
    "AppInfo",
    "SessionState",
    "TokenPair",
    "Track",
    "format_now_playing",
]
