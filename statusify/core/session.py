"""Spotify session: app registration, OAuth tokens and the state they put the client in.

State transitions (each fires StateChanged listeners only on an actual change):

    INITIALISING --initialise()--> READY | MISSING_ACCESS_TOKEN | MISSING_APP_INFO
    any --accept_app_info(new)--> MISSING_ACCESS_TOKEN
    MISSING_ACCESS_TOKEN --accept_tokens(checked ok)--> READY
    READY --expire_tokens()--> MISSING_ACCESS_TOKEN | MISSING_APP_INFO
    any --forget_tokens()--> MISSING_ACCESS_TOKEN | MISSING_APP_INFO

Tokens are only installed and persisted after a successful now-playing request with them.
After initialise(), Spotify requests run outside the session lock; the lock only guards commits.
"""
import logging
import threading
from typing import Callable, List, Optional

from statusify.errors import AuthorizationError, RequestError
from statusify.models.playback import Track
from statusify.models.session import AppInfo, SessionState, TokenPair

logger = logging.getLogger(__name__)

TOKENS_KEY = "spotify.tokens"
APP_INFO_KEY = "spotify.app"

StateListener = Callable[[SessionState, SessionState], None]


class SpotifySession:
    """Owns AppInfo, TokenPair and SessionState; the store is only the durable copy."""

    def __init__(self, api, store) -> None:
        self._api = api
        self._store = store
        self._lock = threading.RLock()
        self._state = SessionState.INITIALISING
        self._app_info: Optional[AppInfo] = None
        self._tokens: Optional[TokenPair] = None
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    @property
    def app_info(self) -> Optional[AppInfo]:
        with self._lock:
            return self._app_info

    @property
    def api(self):
        return self._api

    def subscribe(self, listener: StateListener) -> None:
        """Call listener(previous, current) on every state change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        if state is previous:
            return
        self._state = state
        logger.info("Session: %s -> %s", previous.name, state.name)
        for listener in list(self._listeners):
            listener(previous, state)

    @property
    def tokens(self) -> Optional[TokenPair]:
        with self._lock:
            return self._api.tokens

    def _state_without_tokens(self) -> SessionState:
        if self._app_info is not None:
            return SessionState.MISSING_ACCESS_TOKEN
        return SessionState.MISSING_APP_INFO

    def initialise(self, default_app_info: Optional[AppInfo] = None) -> SessionState:
        """Load persisted AppInfo and tokens and settle into the matching state.

        default_app_info (e.g. from env) is used when nothing is persisted; it is
        not written to the store. PersistenceError propagates.
        """
        with self._lock:
            app_info = AppInfo.from_mapping(self._store.get_one(APP_INFO_KEY)) or default_app_info
            if app_info is not None:
                self._app_info = app_info
                self._api.configure(app_info)

            tokens = TokenPair.from_document(self._store.get_one(TOKENS_KEY))
            if tokens is not None:
                self._api.set_tokens(tokens)
                try:
                    self.fetch_now_playing(tokens)
                except RequestError as e:
                    logger.warning("Session: stored tokens unusable (%s), discarding", e)
                    self._api.set_tokens(None)
                    self._store.remove(TOKENS_KEY)
                else:
                    self._tokens = self._api.tokens
                    self._set_state(SessionState.READY)
                    return self._state

            self._set_state(self._state_without_tokens())
            return self._state

    def accept_app_info(self, app_info: AppInfo) -> bool:
        """Install a new app registration. Returns False (and does nothing) if unchanged."""
        with self._lock:
            if app_info == self._app_info:
                return False
            # Tokens belong to the previous client id
            self._store.remove(TOKENS_KEY)
            self._tokens = None
            self._api.set_tokens(None)
            self._store.set(APP_INFO_KEY, app_info.to_document())
            self._app_info = app_info
            self._api.configure(app_info)
            self._set_state(SessionState.MISSING_ACCESS_TOKEN)
            return True

    def accept_tokens(self, tokens: TokenPair) -> bool:
        """Check tokens against the API, then persist them and go READY.

        All-or-nothing: if the check or the store write fails, nothing is
        installed, the state is unchanged and the error propagates.
        Returns False if tokens equal the current pair.
        """
        with self._lock:
            if tokens == self._tokens:
                return False
        self._api.current_track(tokens)
        with self._lock:
            self._store.set(TOKENS_KEY, tokens.to_document())
            self._api.set_tokens(tokens)
            self._tokens = tokens
            self._set_state(SessionState.READY)
            return True

    def fetch_now_playing(self, tokens: Optional[TokenPair] = None) -> Optional[Track]:
        """Current track or None. Raises RequestError if it fails even after a refresh.

        tokens defaults to the installed pair. Requests run outside the session
        lock; a refreshed pair is only installed if the pair it replaces is
        still the installed one.
        """
        if tokens is None:
            tokens = self.tokens
        if tokens is None:
            raise RequestError("No access token")
        try:
            return self._api.current_track(tokens)
        except RequestError as e:
            logger.info("Session: now-playing failed (%s), refreshing token", e)

        try:
            refreshed = self._api.refresh(tokens)
        except AuthorizationError as e:
            raise RequestError(f"token refresh failed: {e}") from e
        track = self._api.current_track(refreshed)

        with self._lock:
            if self._api.tokens != tokens:
                logger.info("Session: tokens replaced during refresh, dropping refreshed pair")
                return track
            self._store.set(TOKENS_KEY, refreshed.to_document())
            self._api.set_tokens(refreshed)
            if self._tokens is not None:
                self._tokens = refreshed
        logger.info("Session: token refreshed")
        return track

    def expire_tokens(self, if_tokens: Optional[TokenPair] = None) -> None:
        """READY -> MISSING_ACCESS_TOKEN (or MISSING_APP_INFO) after the tokens stopped working.

        With if_tokens, only expire if that pair is still the installed one, so
        tokens accepted while a failing fetch was in flight survive. The
        persisted pair is kept so the next start can try refreshing it again.
        """
        with self._lock:
            if self._state is not SessionState.READY:
                return
            if if_tokens is not None and if_tokens != self._api.tokens:
                logger.info("Session: tokens changed since the failed fetch, not expiring")
                return
            self._tokens = None
            self._api.set_tokens(None)
            self._set_state(self._state_without_tokens())

    def forget_tokens(self) -> None:
        """Log out: drop tokens from memory and store."""
        with self._lock:
            self._store.remove(TOKENS_KEY)
            self._tokens = None
            self._api.set_tokens(None)
            self._set_state(self._state_without_tokens())
