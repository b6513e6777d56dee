"""Shared test fixtures."""

import asyncio
import json
import sys
from pathlib import Path

import pytest

# Ensure the src directory is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from algowar_live.dispatcher import MessageDispatcher, PresentationHooks  # noqa: E402
from algowar_live.state import TournamentStateStore  # noqa: E402
from algowar_live.timeseries import ScoreTimeseriesAccumulator  # noqa: E402


def frame(type_: str, **fields) -> str:
    """Build a stream frame the way the server serializes it."""
    return json.dumps({"type": type_, **fields})


def team(id_: str, total_score: int, name: str | None = None) -> dict:
    return {"id": id_, "name": name or f"Team {id_}", "total_score": total_score}


class RecordingHooks(PresentationHooks):
    def __init__(self):
        self.calls = []

    def on_intro(self):
        self.calls.append(("intro",))

    def on_match_start(self, match):
        self.calls.append(("match_start", match))

    def on_match_end(self, leaderboard):
        self.calls.append(("match_end", leaderboard))

    def notify(self, message, level="info"):
        self.calls.append(("notify", message, level))


@pytest.fixture
def store():
    return TournamentStateStore()


@pytest.fixture
def accumulator():
    return ScoreTimeseriesAccumulator()


@pytest.fixture
def hooks():
    return RecordingHooks()


@pytest.fixture
def dispatcher(store, accumulator, hooks):
    return MessageDispatcher(store, accumulator, hooks)


# ---------------------------------------------------------------------------
# Stream fakes: no network, no real timers
# ---------------------------------------------------------------------------


class FakeSocket:
    """Yields its frames, then closes (or stays open when hold=True).

    With a gate, nothing is yielded until the gate event is set.
    """

    def __init__(self, frames=(), *, hold=False, error=None, gate=None):
        self.frames = list(frames)
        self.hold = hold
        self.error = error
        self.gate = gate
        self.sent = []
        self.closed = False
        self._done = asyncio.Event()

    def finish(self):
        self._done.set()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self.gate is not None:
            await self.gate.wait()
        for f in self.frames:
            await asyncio.sleep(0)
            yield f
        if self.hold:
            await self._done.wait()
        if self.error is not None:
            raise self.error

    async def send(self, payload):
        self.sent.append(payload)

    async def close(self):
        self.closed = True
        self._done.set()


class FakeServer:
    """Connector returning queued sockets/exceptions, then held-open sockets."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls = []
        self.sockets = []

    async def connect(self, url):
        self.urls.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else FakeSocket(hold=True)
        if isinstance(outcome, Exception):
            raise outcome
        self.sockets.append(outcome)
        return outcome


class FakeClock:
    """Records reconnect delays; keepalive ticks only when the test says so."""

    def __init__(self, keepalive=25.0, park_reconnect=False):
        self.keepalive = keepalive
        self.park_reconnect = park_reconnect
        self.reconnect_delays = []
        self.keepalive_waits = 0
        self.keepalive_tick = asyncio.Event()

    async def sleep(self, delay):
        if delay == self.keepalive:
            self.keepalive_waits += 1
            await self.keepalive_tick.wait()
            self.keepalive_tick.clear()
            return
        self.reconnect_delays.append(delay)
        if self.park_reconnect:
            await asyncio.Event().wait()
        await asyncio.sleep(0)


async def until(condition, steps=500):
    """Yield to the loop until condition() holds."""
    for _ in range(steps):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")
