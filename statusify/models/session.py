"""App registration, OAuth tokens and session state."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class SessionState(Enum):
    INITIALISING = "initialising"
    MISSING_APP_INFO = "missing_app_info"
    MISSING_ACCESS_TOKEN = "missing_access_token"
    READY = "ready"


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


@dataclass(frozen=True)
class AppInfo:
    """Spotify app registration (developer dashboard client)."""
    client_id: str
    client_secret: str
    redirect_uri: str

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["AppInfo"]:
        """Build from query params (clientid, ...) or a stored document (clientId, ...).

        Returns None unless all three fields are non-empty strings.
        """
        if not data:
            return None
        client_id = data.get("clientid", data.get("clientId"))
        client_secret = data.get("clientsecret", data.get("clientSecret"))
        redirect_uri = data.get("redirecturi", data.get("redirectUri"))
        if not all(_non_empty(v) for v in (client_id, client_secret, redirect_uri)):
            return None
        return cls(client_id.strip(), client_secret.strip(), redirect_uri.strip())

    def to_document(self) -> dict[str, str]:
        return {
            "clientId": self.client_id,
            "clientSecret": self.client_secret,
            "redirectUri": self.redirect_uri,
        }


@dataclass(frozen=True)
class TokenPair:
    """OAuth2 access + refresh token."""
    access: str
    refresh: str

    def __repr__(self) -> str:
        return "TokenPair(access=***, refresh=***)"

    @classmethod
    def from_document(cls, data: Optional[Mapping[str, Any]]) -> Optional["TokenPair"]:
        if not data:
            return None
        access = data.get("access")
        refresh = data.get("refresh")
        if not _non_empty(access) or not _non_empty(refresh):
            return None
        return cls(access=access, refresh=refresh)

    def to_document(self) -> dict[str, str]:
        return {"access": self.access, "refresh": self.refresh}
