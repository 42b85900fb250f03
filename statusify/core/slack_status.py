"""Slack profile status via the Web API (users.profile.set)."""
import logging
import random
from typing import List, Optional

import requests

from statusify.config import SLACK_API_TOKEN, SLACK_REQUESTS_TIMEOUT, SLACK_STATUS_EMOJIS

logger = logging.getLogger(__name__)

SLACK_PROFILE_SET_URL = "https://slack.com/api/users.profile.set"
STATUS_TEXT_MAX = 100  # Slack rejects longer status_text


class SlackStatusClient:
    """Fire-and-forget status setter; failures are logged, never raised."""

    def __init__(
        self,
        token: str = SLACK_API_TOKEN,
        emojis: Optional[List[str]] = None,
        timeout: float = SLACK_REQUESTS_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._token = token
        self._emojis = list(emojis) if emojis is not None else list(SLACK_STATUS_EMOJIS)
        self._timeout = timeout
        self._session = session or requests.Session()

    def random_emoji(self) -> str:
        return random.choice(self._emojis) if self._emojis else ""

    def set_status(self, text: str = "", emoji: Optional[str] = None) -> None:
        if not self._token:
            logger.debug("Slack: no SLACK_API_TOKEN, skipping status %r", text)
            return
        if emoji is None:
            emoji = self.random_emoji()
        try:
            resp = self._session.post(
                SLACK_PROFILE_SET_URL,
                headers={"Authorization": f"Bearer {self._token}"},
                json={"profile": {"status_text": text[:STATUS_TEXT_MAX], "status_emoji": emoji}},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Slack: users.profile.set failed: %s", e)
            return
        if not body.get("ok"):
            logger.warning("Slack: users.profile.set error: %s", body.get("error"))
            return
        logger.info("Slack: status set to %r", text)

    def clear_status(self) -> None:
        self.set_status("", "")
