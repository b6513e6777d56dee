"""Maps stream events onto the state store and score accumulator."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .errors import ProtocolError
from .protocol import (
    InitialStateEvent,
    MatchCompletedEvent,
    MatchProgressEvent,
    MatchStartedEvent,
    ServerEvent,
    ShowdownFinishedEvent,
    ShowdownStartedEvent,
    TournamentFinishedEvent,
    TournamentPausedEvent,
    TournamentResetEvent,
    TournamentResumedEvent,
    TournamentStartedEvent,
    parse_frame,
)
from .state import TournamentStateStore
from .timeseries import ScoreTimeseriesAccumulator
from .types import Leaderboard, Match, TournamentStatus

log = logging.getLogger(__name__)

# Seconds to wait before the match start/end visuals, so they land after the
# panels have picked up the new state.
MATCH_START_HOOK_DELAY = 0.5
MATCH_END_HOOK_DELAY = 1.5


class PresentationHooks:
    """Visual side effects triggered by tournament events.

    Every hook is a no-op by default; override the ones the renderer needs.
    """

    def on_intro(self) -> None:
        """Called when a new tournament starts."""

    def on_match_start(self, match: Match) -> None:
        """Called shortly after a match starts."""

    def on_match_end(self, leaderboard: Leaderboard) -> None:
        """Called a little while after a match completes."""

    def notify(self, message: str, level: str = "info") -> None:
        """Show a transient notification (toast)."""


class MessageDispatcher:
    """Decodes stream frames and applies the matching state transition.

    Nothing raised while decoding or applying a frame escapes dispatch():
    malformed frames and failed transitions are logged and dropped so the
    connection keeps running.
    """

    def __init__(
        self,
        store: TournamentStateStore,
        accumulator: ScoreTimeseriesAccumulator,
        hooks: PresentationHooks | None = None,
        *,
        match_start_delay: float = MATCH_START_HOOK_DELAY,
        match_end_delay: float = MATCH_END_HOOK_DELAY,
    ):
        self.store = store
        self.accumulator = accumulator
        self.hooks = hooks or PresentationHooks()
        self.match_start_delay = match_start_delay
        self.match_end_delay = match_end_delay
        self.synced = False  # an initial_state frame has been applied
        self._pending: list[asyncio.TimerHandle] = []

    def __call__(self, frame: str | bytes) -> ServerEvent | None:
        return self.dispatch(frame)

    def dispatch(self, frame: str | bytes) -> ServerEvent | None:
        """Decode and apply one frame. Returns the event, or None if dropped."""
        try:
            event = parse_frame(frame)
        except ProtocolError as e:
            log.warning("Discarding malformed frame: %s", e)
            return None

        log.debug("Received %s", type(event).__name__)
        try:
            self.handle(event)
        except Exception:
            log.exception("Failed to apply %s", type(event).__name__)
            return None
        return event

    def handle(self, event: ServerEvent) -> None:
        """Apply an already-decoded event as a single store transaction."""
        with self.store.transaction():
            match event:
                case InitialStateEvent(tournament=tournament, leaderboard=leaderboard):
                    self.store.set_tournament(tournament)
                    self.store.set_leaderboard(leaderboard)
                    self.accumulator.update_baseline(leaderboard)
                    self.synced = True

                case TournamentStartedEvent():
                    self._on_tournament_started()

                case ShowdownStartedEvent():
                    self._on_running()

                case MatchStartedEvent(match=match):
                    self.store.set_current_match(match)
                    self.store.set_match_progress(None)
                    self._schedule(self.match_start_delay, "on_match_start", match)

                case MatchProgressEvent(progress=progress):
                    self.store.set_match_progress(progress)
                    self.accumulator.record(progress)
                    self.store.touch()

                case MatchCompletedEvent(leaderboard=leaderboard):
                    if leaderboard is not None:
                        self.store.set_leaderboard(leaderboard)
                        self.accumulator.update_baseline(leaderboard)
                    self.store.set_match_progress(None)
                    self._schedule(
                        self.match_end_delay, "on_match_end", self.store.leaderboard
                    )

                case TournamentFinishedEvent(leaderboard=leaderboard) | ShowdownFinishedEvent(
                    leaderboard=leaderboard
                ):
                    self.store.set_status(TournamentStatus.FINISHED)
                    if leaderboard is not None:
                        self.store.set_leaderboard(leaderboard)
                    self.store.set_current_match(None)
                    self._call_hook("notify", "Tournament Finished!", "success")
                    log.info("Tournament finished")

                case TournamentPausedEvent():
                    self.store.set_status(TournamentStatus.PAUSED)
                    log.info("Tournament paused")

                case TournamentResumedEvent():
                    self.store.set_status(TournamentStatus.RUNNING)
                    log.info("Tournament resumed")

                case TournamentResetEvent():
                    self.store.reset()
                    self.accumulator.reset()
                    log.info("Tournament reset")

                case _:
                    pass

    def _on_tournament_started(self) -> None:
        self._call_hook("on_intro")
        # A new tournament wipes the chart; a showdown continues the old one.
        self.accumulator.reset()
        self.store.touch()
        self._on_running()

    def _on_running(self) -> None:
        self.store.set_status(TournamentStatus.RUNNING)
        self._call_hook("notify", "Tournament Started!", "success")
        log.info("Tournament running")

    # -- Hooks --

    def _call_hook(self, name: str, *args: Any) -> None:
        try:
            getattr(self.hooks, name)(*args)
        except Exception:
            log.exception("Presentation hook %s failed", name)

    def _schedule(self, delay: float, name: str, *args: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._call_hook(name, *args)
            return
        now = loop.time()
        self._pending = [h for h in self._pending if h.when() > now and not h.cancelled()]
        self._pending.append(loop.call_later(delay, self._call_hook, name, *args))

    def close(self) -> None:
        """Cancel hooks that are still waiting for their delay."""
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
