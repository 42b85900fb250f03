from __future__ import annotations

import threading
import time

import pytest

from conftest import APP, GOOD, track
from statusify.core.now_playing import NowPlayingPoller
from statusify.models.session import SessionState, TokenPair


@pytest.fixture
def ready_session(session):
    session.initialise(default_app_info=APP)
    session.accept_tokens(GOOD)
    return session


@pytest.fixture
def poller(ready_session):
    poller = NowPlayingPoller(ready_session, interval_sec=3600)
    yield poller
    poller.stop(timeout=1.0)


def test_emits_only_on_change(poller, api):
    emitted = []
    poller.subscribe(emitted.append)
    for title in ["X", "X", "Y", "Y", "X"]:
        api.tracks.append(track("A", title=title))
        poller.tick()
    assert emitted == ["A - X", "A - Y", "A - X"]


def test_nothing_playing_is_silent_and_resets_dedup(poller, api):
    emitted = []
    errors = []
    poller.subscribe(emitted.append)
    poller.subscribe_errors(errors.append)
    for item in [track("A", "B", title="T"), None, track("A", "B", title="T")]:
        api.tracks.append(item)
        poller.tick()
    assert emitted == ["A & B - T", "A & B - T"]
    assert errors == []


def test_failure_after_retry_regresses_session(poller, ready_session, api):
    errors = []
    poller.subscribe_errors(errors.append)
    api.valid_access = set()

    assert poller.tick() is None
    assert api.calls.count("refresh") == 1
    assert ready_session.state is SessionState.MISSING_ACCESS_TOKEN
    assert len(errors) == 1
    assert not poller.is_running


def test_runs_only_while_ready(session):
    session.initialise(default_app_info=APP)
    poller = NowPlayingPoller(session, interval_sec=3600)
    try:
        assert not poller.is_running
        session.accept_tokens(GOOD)
        assert poller.is_running
        session.forget_tokens()
        assert not poller.is_running
    finally:
        poller.stop(timeout=1.0)


def test_starts_immediately_if_already_ready(poller):
    assert poller.is_running


def test_listener_errors_do_not_kill_the_loop(ready_session, api):
    poller = NowPlayingPoller(ready_session, interval_sec=0.01)
    seen = []

    def flaky(display):
        seen.append(display)
        raise RuntimeError("listener broke")

    poller.subscribe(flaky)
    api.tracks.extend([track("A", title="1"), track("A", title="2")])
    try:
        for _ in range(200):
            if len(seen) >= 2:
                break
            time.sleep(0.01)
        assert seen[:2] == ["A - 1", "A - 2"]
        assert poller.is_running
    finally:
        poller.stop(timeout=1.0)


def test_ticks_never_overlap(poller, api):
    entered = threading.Event()
    release = threading.Event()

    def block_first_fetch():
        if not entered.is_set():
            entered.set()
            release.wait(5)

    api.calls.clear()
    api.before_fetch = block_first_fetch
    api.tracks.extend([track("A", title="1"), track("A", title="2")])
    first = threading.Thread(target=poller.tick)
    second = threading.Thread(target=poller.tick)
    first.start()
    try:
        assert entered.wait(5)
        second.start()
        time.sleep(0.1)
        assert api.calls.count("current_track") == 1
        assert second.is_alive()
    finally:
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)
    assert api.calls.count("current_track") == 2
    assert poller.current == "A - 2"


def test_tokens_accepted_during_failing_tick_survive(poller, ready_session, api):
    newer = TokenPair(access="access_3", refresh="refresh_3")
    api.valid_access = {newer.access}
    entered = threading.Event()
    release = threading.Event()

    def block_first_fetch():
        if not entered.is_set():
            entered.set()
            release.wait(5)

    api.before_fetch = block_first_fetch
    ticker = threading.Thread(target=poller.tick)
    ticker.start()
    try:
        assert entered.wait(5)
        ready_session.accept_tokens(newer)
    finally:
        release.set()
        ticker.join(timeout=5)

    assert ready_session.state is SessionState.READY
    assert api.tokens == newer
