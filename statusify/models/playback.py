"""Currently-playing track from Spotify."""
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple


def format_now_playing(artists: Iterable[str], title: str) -> str:
    """Return the status text, e.g. "A & B - Title"."""
    return " & ".join(artists) + " - " + title


@dataclass(frozen=True)
class Track:
    """Track reported by the currently-playing endpoint."""
    artists: Tuple[str, ...]
    title: str

    @property
    def display(self) -> str:
        return format_now_playing(self.artists, self.title)

    @classmethod
    def from_playing_payload(cls, payload: Optional[dict[str, Any]]) -> Optional["Track"]:
        """Map current_user_playing_track() to a Track, or None when nothing is playing.

        Ads and some podcast episodes come back with item set to null.
        """
        if not payload:
            return None
        item = payload.get("item")
        if not item:
            return None
        artists = tuple(a.get("name", "") for a in item.get("artists") or [])
        return cls(artists=artists, title=item.get("name", ""))
