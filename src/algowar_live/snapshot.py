"""One-shot pull of tournament status and leaderboard at startup."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from .errors import RequestError, SnapshotError
from .state import TournamentStateStore
from .timeseries import ScoreTimeseriesAccumulator
from .types import Leaderboard, Tournament

log = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    async def get_tournament_status(self) -> Tournament: ...

    async def get_leaderboard(self) -> Leaderboard: ...


class SnapshotLoader:
    """Seeds the store and score baselines from the REST snapshot endpoints.

    A failed fetch is logged and leaves the store untouched; there is no
    retry. The stream's own initial_state frame reseeds everything anyway.
    """

    def __init__(
        self,
        source: SnapshotSource,
        store: TournamentStateStore,
        accumulator: ScoreTimeseriesAccumulator,
    ):
        self.source = source
        self.store = store
        self.accumulator = accumulator

    async def fetch(self) -> tuple[Tournament, Leaderboard]:
        """Fetch status and leaderboard concurrently. Raises SnapshotError."""
        try:
            tournament, leaderboard = await asyncio.gather(
                self.source.get_tournament_status(),
                self.source.get_leaderboard(),
            )
        except RequestError as e:
            raise SnapshotError(f"Snapshot fetch failed: {e}") from e
        return tournament, leaderboard

    def apply(self, tournament: Tournament, leaderboard: Leaderboard) -> None:
        with self.store.transaction():
            self.store.set_tournament(tournament)
            self.store.set_leaderboard(leaderboard)
            self.accumulator.update_baseline(leaderboard)

    async def load(self, unless: Callable[[], bool] | None = None) -> bool:
        """Fetch and apply the snapshot. Returns False if nothing was applied.

        ``unless`` is checked after the fetch; when it returns True the
        snapshot is dropped (the stream has already synced newer state).
        """
        try:
            tournament, leaderboard = await self.fetch()
        except SnapshotError as e:
            log.error("%s", e)
            return False
        if unless is not None and unless():
            log.info("Stream already synced; ignoring snapshot")
            return False
        self.apply(tournament, leaderboard)
        log.info(
            "Loaded snapshot: status=%s, %d teams",
            tournament.status.value,
            len(leaderboard),
        )
        return True
