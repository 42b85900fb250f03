"""Spotify OAuth authorization-code flow: authorize URL, callback, app registration."""
import logging
from typing import Any, Mapping

from statusify.errors import AuthorizationError
from statusify.models.session import AppInfo

logger = logging.getLogger(__name__)


class AuthorizationFlow:
    def __init__(self, session, nonces) -> None:
        self._session = session
        self._nonces = nonces

    def build_authorization_uri(self) -> str:
        """Return the Spotify authorize URL; its state parameter is a freshly issued nonce."""
        if self._session.app_info is None:
            raise AuthorizationError("Spotify app registration missing")
        return self._session.api.authorize_url(self._nonces.issue())

    def exchange_code(self, code: str, state: str) -> None:
        """Handle the OAuth callback.

        The state is redeemed before anything goes over the network, so a
        forged or replayed callback never reaches Spotify. Errors from the
        token check (RequestError) propagate unchanged.
        """
        self._nonces.redeem(state)
        if not code:
            raise AuthorizationError("Missing authorization code")
        tokens = self._session.api.exchange_code(code)
        logger.info("Auth: code exchanged, probing tokens")
        self._session.accept_tokens(tokens)

    def register_app_info(self, candidate: Mapping[str, Any]) -> bool:
        """Accept clientid/clientsecret/redirecturi. Incomplete input is ignored (returns False)."""
        app_info = AppInfo.from_mapping(candidate)
        if app_info is None:
            logger.debug("Auth: incomplete app registration ignored")
            return False
        return self._session.accept_app_info(app_info)
