"""Background loop: poll Spotify's currently-playing track while the session is READY."""
import logging
import threading
from typing import Callable, List, Optional

from statusify.config import POLL_INTERVAL_SEC
from statusify.errors import RequestError
from statusify.models.session import SessionState

logger = logging.getLogger(__name__)

TrackListener = Callable[[str], None]
ErrorListener = Callable[[Exception], None]


class NowPlayingPoller:
    """Turns now-playing responses into TrackChanged notifications (display strings).

    Subscribes to the session so that it runs if and only if the session is READY.
    """

    def __init__(self, session, interval_sec: float = POLL_INTERVAL_SEC) -> None:
        self._session = session
        self._interval = interval_sec
        self._listeners: List[TrackListener] = []
        self._error_listeners: List[ErrorListener] = []
        self._last: Optional[str] = None
        self._tick_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        session.subscribe(self._on_state_changed)
        if session.is_ready:
            self.start()

    @property
    def current(self) -> Optional[str]:
        return self._last

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, listener: TrackListener) -> None:
        """Call listener(display) whenever the playing track changes."""
        self._listeners.append(listener)

    def subscribe_errors(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def _on_state_changed(self, previous: SessionState, current: SessionState) -> None:
        if current is SessionState.READY:
            self.start()
        elif previous is SessionState.READY:
            self.stop()

    def tick(self) -> Optional[str]:
        """Run one poll; fetch failures are contained. Returns the display string if a track is playing."""
        with self._tick_lock:
            # Tick already scheduled when the session left READY
            if not self._session.is_ready:
                return None
            tokens = self._session.tokens
            try:
                track = self._session.fetch_now_playing(tokens)
            except RequestError as e:
                logger.warning("Poller: %s, waiting for re-authorization", e)
                self._session.expire_tokens(if_tokens=tokens)
                for listener in list(self._error_listeners):
                    listener(e)
                return None

            if track is None:
                # Nothing playing: forget the last track so a resume re-emits it
                self._last = None
                return None

            display = track.display
            changed = display != self._last
            self._last = display
            if changed:
                logger.info("Poller: now playing %s", display)
                for listener in list(self._listeners):
                    listener(display)
            return display

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(timeout=self._interval):
            try:
                self.tick()
            except Exception as e:
                logger.warning("Poller: %s", e)

    def start(self) -> None:
        if self.is_running and self._stop_event is not None and not self._stop_event.is_set():
            return
        self._last = None
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._stop_event,),
            name="now-playing-poller",
            daemon=True,
        )
        self._thread.start()
        logger.info("Poller: started (interval %.1fs)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the loop after its current tick. Joins only when timeout is given."""
        if self._stop_event is None:
            return
        self._stop_event.set()
        thread = self._thread
        self._stop_event = None
        self._thread = None
        logger.info("Poller: stopped")
        if timeout is not None and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
