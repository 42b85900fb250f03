"""Error taxonomy shared by the store, the Spotify session and the poller."""


class StatusifyError(Exception):
    """Base for all statusify errors."""


class PersistenceError(StatusifyError):
    """Credential store unreadable, corrupt or unwritable."""


class AuthorizationError(StatusifyError):
    """Invalid or replayed nonce, missing app registration, or rejected grant."""


class RequestError(StatusifyError):
    """A Spotify API request failed (after refresh-and-retry at the session level)."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Request Error: {message}")
