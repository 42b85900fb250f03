"""One-time OAuth state values guarding the authorization-code callback."""
import logging
import secrets
import threading
from typing import List

from statusify.errors import AuthorizationError

logger = logging.getLogger(__name__)

NONCES_KEY = "spotify.states"


class NonceLedger:
    """Issues nonces and redeems each at most once. Backed by the credential store."""

    def __init__(self, store, max_outstanding: int = 20) -> None:
        self._store = store
        self._max_outstanding = max(1, max_outstanding)
        self._lock = threading.Lock()

    def _load(self) -> List[str]:
        doc = self._store.get_one(NONCES_KEY) or {}
        return [n for n in doc.get("nonces") or [] if isinstance(n, str)]

    def _save(self, nonces: List[str]) -> None:
        self._store.set(NONCES_KEY, {"nonces": nonces})

    def issue(self) -> str:
        """Generate a nonce, persist it and return it."""
        with self._lock:
            nonces = self._load()
            nonce = secrets.token_urlsafe(24)
            while nonce in nonces:
                nonce = secrets.token_urlsafe(24)
            nonces.append(nonce)
            if len(nonces) > self._max_outstanding:
                dropped = len(nonces) - self._max_outstanding
                logger.info("Nonces: dropping %d abandoned state(s)", dropped)
                nonces = nonces[dropped:]
            self._save(nonces)
        return nonce

    def redeem(self, nonce: str) -> None:
        """Consume nonce. Raises AuthorizationError if unknown or already used."""
        with self._lock:
            nonces = self._load()
            if not nonce or nonce not in nonces:
                raise AuthorizationError("Invalid or replayed state")
            nonces.remove(nonce)
            self._save(nonces)

    def outstanding(self) -> List[str]:
        with self._lock:
            return self._load()
