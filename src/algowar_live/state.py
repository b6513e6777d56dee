"""Observable store holding the canonical live tournament state."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, TypeAlias

from .types import Leaderboard, Match, MatchProgress, Team, Tournament, TournamentStatus

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreSnapshot:
    """Immutable view of the store handed to observers."""
    tournament: Tournament = field(default_factory=Tournament)
    leaderboard: Leaderboard = ()
    current_match: Match | None = None
    match_progress: MatchProgress | None = None

    @property
    def status(self) -> TournamentStatus:
        return self.tournament.status


Observer: TypeAlias = Callable[[StoreSnapshot], None]


class TournamentStateStore:
    """Tracks tournament status, leaderboard, current match and match progress.

    All values exposed are immutable. Only the dispatcher and the snapshot
    loader call the mutators; everyone else reads or subscribes.
    """

    def __init__(self) -> None:
        self._state = StoreSnapshot()
        self._observers: list[Observer] = []
        self._depth = 0
        self._dirty = False

    # -- Reads --

    @property
    def tournament(self) -> Tournament:
        return self._state.tournament

    @property
    def status(self) -> TournamentStatus:
        return self._state.tournament.status

    @property
    def leaderboard(self) -> Leaderboard:
        return self._state.leaderboard

    @property
    def current_match(self) -> Match | None:
        return self._state.current_match

    @property
    def match_progress(self) -> MatchProgress | None:
        return self._state.match_progress

    def snapshot(self) -> StoreSnapshot:
        return self._state

    # -- Observation --

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    @contextmanager
    def transaction(self) -> Iterator[TournamentStateStore]:
        """Batch mutations so observers are notified once, on exit."""
        self._depth += 1
        try:
            yield self
        finally:
            self._depth -= 1
            if self._depth == 0 and self._dirty:
                self._dirty = False
                self._notify()

    def _notify(self) -> None:
        snapshot = self._state
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                log.exception("Store observer %r failed", observer)

    def _replace(self, **changes) -> None:
        current = self._state
        updated = StoreSnapshot(
            tournament=changes.get("tournament", current.tournament),
            leaderboard=changes.get("leaderboard", current.leaderboard),
            current_match=changes.get("current_match", current.current_match),
            match_progress=changes.get("match_progress", current.match_progress),
        )
        if updated == current:
            return
        self._state = updated
        self.touch()

    def touch(self) -> None:
        """Report a change that lives outside the snapshot, such as a new chart point."""
        if self._depth:
            self._dirty = True
        else:
            self._notify()

    # -- Mutators --

    def set_tournament(self, tournament: Tournament) -> None:
        self._replace(tournament=tournament)

    def set_status(self, status: TournamentStatus) -> None:
        self._replace(tournament=self._state.tournament.with_status(status))

    def set_leaderboard(self, leaderboard: Leaderboard | list[Team]) -> None:
        self._replace(leaderboard=tuple(leaderboard))

    def set_current_match(self, match: Match | None) -> None:
        self._replace(current_match=match)

    def set_match_progress(self, progress: MatchProgress | None) -> None:
        self._replace(match_progress=progress)

    def reset(self) -> None:
        """Back to the idle defaults."""
        self._replace(
            tournament=Tournament(),
            leaderboard=(),
            current_match=None,
            match_progress=None,
        )
