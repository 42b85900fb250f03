"""Spotify API client via Spotipy; tokens are held here, persisted by the session."""
import logging
from typing import Optional

import requests
from spotipy import Spotify
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from statusify.config import SPOTIFY_REQUESTS_TIMEOUT, SPOTIFY_SCOPES
from statusify.errors import AuthorizationError, RequestError
from statusify.models.playback import Track
from statusify.models.session import AppInfo, TokenPair

logger = logging.getLogger(__name__)


def _token_pair(token_info: Optional[dict], previous_refresh: Optional[str] = None) -> TokenPair:
    """Build a TokenPair from a Spotipy token_info dict.

    Spotify may omit refresh_token on refresh; the previous one stays valid then.
    """
    token_info = token_info or {}
    access = token_info.get("access_token")
    refresh = token_info.get("refresh_token") or previous_refresh
    if not access or not refresh:
        raise AuthorizationError("Spotify token response without access/refresh token")
    return TokenPair(access=access, refresh=refresh)


class SpotifyApi:
    """App registration + current tokens, and the handful of calls the session needs."""

    def __init__(
        self,
        scope: str = SPOTIFY_SCOPES,
        requests_timeout: float = SPOTIFY_REQUESTS_TIMEOUT,
    ) -> None:
        self._scope = scope
        self._requests_timeout = requests_timeout
        self._oauth: Optional[SpotifyOAuth] = None
        self._cache: Optional[MemoryCacheHandler] = None
        self._tokens: Optional[TokenPair] = None
        self._client: Optional[Spotify] = None

    @property
    def is_configured(self) -> bool:
        return self._oauth is not None

    @property
    def tokens(self) -> Optional[TokenPair]:
        return self._tokens

    def configure(self, app_info: AppInfo) -> None:
        """Set client id/secret/redirect URI used for authorize and token calls."""
        self._cache = MemoryCacheHandler()
        self._oauth = SpotifyOAuth(
            client_id=app_info.client_id,
            client_secret=app_info.client_secret,
            redirect_uri=app_info.redirect_uri,
            scope=self._scope,
            cache_handler=self._cache,
            open_browser=False,
            requests_timeout=self._requests_timeout,
        )

    def _new_client(self, tokens: TokenPair) -> Spotify:
        return Spotify(
            auth=tokens.access,
            requests_timeout=self._requests_timeout,
            retries=0,
            status_retries=0,
        )

    def set_tokens(self, tokens: Optional[TokenPair]) -> None:
        self._tokens = tokens
        self._client = self._new_client(tokens) if tokens is not None else None

    def _require_oauth(self) -> SpotifyOAuth:
        if self._oauth is None:
            raise AuthorizationError("Spotify app registration missing")
        return self._oauth

    def authorize_url(self, state: str) -> str:
        """Return accounts.spotify.com/authorize URL with response_type=code, scope and state."""
        return self._require_oauth().get_authorize_url(state=state)

    def exchange_code(self, code: str) -> TokenPair:
        """Exchange an authorization code for tokens. Does not install them."""
        oauth = self._require_oauth()
        try:
            oauth.get_access_token(code=code, as_dict=False, check_cache=False)
        except (SpotifyOauthError, requests.RequestException) as e:
            raise AuthorizationError(f"Code exchange rejected: {e}") from e
        # get_access_token only returns the access token; the full token_info is in the cache
        return _token_pair(self._cache.get_cached_token())

    def refresh(self, tokens: Optional[TokenPair] = None) -> TokenPair:
        """Exchange the refresh token of tokens (default: installed ones) for a new pair.

        Does not install it.
        """
        oauth = self._require_oauth()
        tokens = tokens if tokens is not None else self._tokens
        if tokens is None:
            raise AuthorizationError("No refresh token")
        try:
            token_info = oauth.refresh_access_token(tokens.refresh)
        except (SpotifyOauthError, requests.RequestException) as e:
            raise AuthorizationError(f"Token refresh rejected: {e}") from e
        return _token_pair(token_info, previous_refresh=tokens.refresh)

    def current_track(self, tokens: Optional[TokenPair] = None) -> Optional[Track]:
        """Return the currently playing track, or None when nothing is playing.

        Uses tokens if given, otherwise the installed ones.
        """
        client = self._new_client(tokens) if tokens is not None else self._client
        if client is None:
            raise RequestError("No access token")
        try:
            payload = client.current_user_playing_track()
        except SpotifyException as e:
            raise RequestError(f"currently-playing returned {e.http_status}: {e.msg}") from e
        except requests.RequestException as e:
            raise RequestError(f"currently-playing failed: {e}") from e
        return Track.from_playing_payload(payload)
