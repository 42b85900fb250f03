from __future__ import annotations

from collections import deque
from typing import Any, Callable, Optional

import pytest

from statusify.core.credential_store import JsonDocumentStore
from statusify.core.nonce_ledger import NonceLedger
from statusify.core.session import SpotifySession
from statusify.errors import AuthorizationError, RequestError
from statusify.models.playback import Track
from statusify.models.session import AppInfo, TokenPair

APP = AppInfo("client_id_123", "client_secret_abc", "http://127.0.0.1:8000/auth")
GOOD = TokenPair(access="access_1", refresh="refresh_1")
REFRESHED = TokenPair(access="access_2", refresh="refresh_1")


class FakeSpotifyApi:
    """In-process stand-in for SpotifyApi.

    An access token works if it is in `valid_access`; current_track() then
    returns the next queued track (None = nothing playing, repeats the last).
    """

    def __init__(self) -> None:
        self.app_info: Optional[AppInfo] = None
        self.tokens: Optional[TokenPair] = None
        self.valid_access: set[str] = {GOOD.access}
        self.codes: dict[str, TokenPair] = {"goodcode": GOOD}
        self.refresh_result: Any = REFRESHED
        self.tracks: deque[Optional[Track]] = deque()
        self.last_track: Optional[Track] = None
        self.calls: list[str] = []
        self.before_fetch: Optional[Callable[[], None]] = None

    @property
    def is_configured(self) -> bool:
        return self.app_info is not None

    def configure(self, app_info: AppInfo) -> None:
        self.app_info = app_info

    def set_tokens(self, tokens: Optional[TokenPair]) -> None:
        self.tokens = tokens

    def authorize_url(self, state: str) -> str:
        return (
            "https://accounts.spotify.com/authorize?client_id=%s&response_type=code"
            "&scope=user-read-currently-playing&state=%s" % (self.app_info.client_id, state)
        )

    def exchange_code(self, code: str) -> TokenPair:
        self.calls.append("exchange_code")
        if code not in self.codes:
            raise AuthorizationError("invalid_grant")
        return self.codes[code]

    def refresh(self, tokens: Optional[TokenPair] = None) -> TokenPair:
        self.calls.append("refresh")
        if self.app_info is None or (tokens or self.tokens) is None:
            raise AuthorizationError("cannot refresh")
        if isinstance(self.refresh_result, Exception):
            raise self.refresh_result
        return self.refresh_result

    def current_track(self, tokens: Optional[TokenPair] = None) -> Optional[Track]:
        self.calls.append("current_track")
        if self.before_fetch is not None:
            self.before_fetch()
        tokens = tokens or self.tokens
        if tokens is None or tokens.access not in self.valid_access:
            raise RequestError("401 The access token expired")
        if self.tracks:
            self.last_track = self.tracks.popleft()
        return self.last_track


class CountingStore(JsonDocumentStore):
    def __init__(self, path) -> None:
        super().__init__(path)
        self.writes: list[tuple[str, str]] = []

    def set(self, key, doc) -> None:
        self.writes.append(("set", key))
        super().set(key, doc)

    def remove(self, key) -> None:
        self.writes.append(("remove", key))
        super().remove(key)


@pytest.fixture
def store(tmp_path) -> CountingStore:
    return CountingStore(tmp_path / "credentials.json")


@pytest.fixture
def api() -> FakeSpotifyApi:
    return FakeSpotifyApi()


@pytest.fixture
def session(api, store) -> SpotifySession:
    return SpotifySession(api, store)


@pytest.fixture
def nonces(store) -> NonceLedger:
    return NonceLedger(store, max_outstanding=5)


def track(*artists: str, title: str) -> Track:
    return Track(artists=tuple(artists), title=title)
