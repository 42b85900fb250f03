"""Core services: credential store, Spotify session, OAuth flow, poller, Slack."""
from statusify.core.auth_flow import AuthorizationFlow
from statusify.core.credential_store import JsonDocumentStore
from statusify.core.nonce_ledger import NonceLedger
from statusify.core.now_playing import NowPlayingPoller
from statusify.core.session import SpotifySession
from statusify.core.slack_status import SlackStatusClient
from statusify.core.spotify_client import SpotifyApi

__all__ = [
    "AuthorizationFlow",
    "JsonDocumentStore",
    "NonceLedger",
    "NowPlayingPoller",
    "SlackStatusClient",
    "SpotifyApi",
    "SpotifySession",
]
