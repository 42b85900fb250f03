"""Shared application state (injected into routes)."""
from typing import Optional

from statusify.config import (
    CREDENTIAL_STORE_PATH,
    MAX_OUTSTANDING_NONCES,
    POLL_INTERVAL_SEC,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_SECRET,
    SPOTIFY_REDIRECT_URI,
)
from statusify.core.auth_flow import AuthorizationFlow
from statusify.core.credential_store import JsonDocumentStore
from statusify.core.nonce_ledger import NonceLedger
from statusify.core.now_playing import NowPlayingPoller
from statusify.core.session import SpotifySession
from statusify.core.slack_status import SlackStatusClient
from statusify.core.spotify_client import SpotifyApi
from statusify.models.session import AppInfo


class AppState:
    def __init__(
        self,
        store=None,
        api=None,
        status_client=None,
        poll_interval_sec: float = POLL_INTERVAL_SEC,
    ) -> None:
        self.store = store if store is not None else JsonDocumentStore(CREDENTIAL_STORE_PATH)
        self.api = api if api is not None else SpotifyApi()
        self.status_client = status_client if status_client is not None else SlackStatusClient()
        self.nonces = NonceLedger(self.store, max_outstanding=MAX_OUTSTANDING_NONCES)
        self.session = SpotifySession(self.api, self.store)
        self.poller = NowPlayingPoller(self.session, interval_sec=poll_interval_sec)
        self.auth_flow = AuthorizationFlow(self.session, self.nonces)
        self.poller.subscribe(self._post_status)

    def _post_status(self, display: str) -> None:
        self.status_client.set_status(display)

    def default_app_info(self) -> Optional[AppInfo]:
        """App registration from SPOTIFY_* env vars, if all are set."""
        return AppInfo.from_mapping(
            {
                "clientid": SPOTIFY_CLIENT_ID,
                "clientsecret": SPOTIFY_CLIENT_SECRET,
                "redirecturi": SPOTIFY_REDIRECT_URI,
            }
        )

    def startup(self) -> None:
        self.session.initialise(self.default_app_info())

    def shutdown(self) -> None:
        self.poller.stop(timeout=5.0)


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState()
    return _state
