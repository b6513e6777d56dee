"""Score time series rebuilt from match-relative progress deltas.

The stream only reports each team's score *within* the running match. To
plot cumulative scores, every team keeps a baseline (its total before the
match) and each progress frame becomes one point of baseline + delta. The
series is a sliding window so its size stays bounded however long the
tournament runs.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable

from .types import MatchProgress, ScorePoint, Team

DEFAULT_WINDOW_SIZE = 100

# Charts never scale below this, and leave 10% headroom above the top score.
MIN_CHART_CEILING = 100
CHART_HEADROOM = 1.1


class ScoreTimeseriesAccumulator:
    """Maintains score baselines, the tick counter and the point window."""

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE):
        if window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {window_size}")
        self.window_size = window_size
        self._baseline: dict[str, int] = {}
        self._points: deque[ScorePoint] = deque(maxlen=window_size)
        self._tick = 0

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def points(self) -> tuple[ScorePoint, ...]:
        return tuple(self._points)

    @property
    def baseline(self) -> dict[str, int]:
        return dict(self._baseline)

    def __len__(self) -> int:
        return len(self._points)

    def reset(self) -> None:
        """Drop every point and baseline, and restart ticks from zero."""
        self._points.clear()
        self._baseline.clear()
        self._tick = 0

    def update_baseline(self, leaderboard: Iterable[Team]) -> None:
        """Take each listed team's total as its baseline for the next match.

        Teams missing from the leaderboard keep their current baseline.
        """
        for team in leaderboard:
            self._baseline[team.id] = team.total_score

    def record(self, progress: MatchProgress) -> ScorePoint:
        """Advance the tick and append a point for this progress update."""
        self._tick += 1
        scores = dict(self._baseline)
        for team_id, team in progress.teams.items():
            base = self._baseline.setdefault(team_id, 0)
            scores[team_id] = base + team.score
        point = ScorePoint(tick=self._tick, scores=scores)
        self._points.append(point)
        return point

    # -- Chart helpers --

    def latest(self) -> ScorePoint | None:
        return self._points[-1] if self._points else None

    def series(self, team_id: str) -> list[tuple[int, int]]:
        return [(p.tick, p.get(team_id)) for p in self._points]

    def chart_ceiling(self, team_ids: Iterable[str] | None = None) -> float:
        """Upper bound for the score axis."""
        if not self._points:
            return MIN_CHART_CEILING
        ids = list(team_ids) if team_ids is not None else None
        top = 0
        for point in self._points:
            scores = [point.get(t) for t in ids] if ids is not None else point.scores.values()
            top = max(top, *scores, 0)
        return max(top * CHART_HEADROOM, MIN_CHART_CEILING)
