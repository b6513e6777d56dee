"""Tests for baseline + delta score reconstruction."""

import pytest
from algowar_live.timeseries import ScoreTimeseriesAccumulator
from algowar_live.types import MatchProgress, Team, TeamProgress


def progress(**scores: int) -> MatchProgress:
    return MatchProgress(
        round=1,
        teams={team_id: TeamProgress(id=team_id, score=s) for team_id, s in scores.items()},
    )


def test_baseline_plus_delta():
    acc = ScoreTimeseriesAccumulator()
    acc.update_baseline([Team("A", "Alpha", 40), Team("B", "Beta", 10)])

    point = acc.record(progress(A=5, B=2))

    assert point.tick == 1
    assert dict(point.scores) == {"A": 45, "B": 12}
    # Deltas never move the baseline itself.
    assert acc.baseline == {"A": 40, "B": 10}


def test_bystanders_repeat_their_baseline():
    acc = ScoreTimeseriesAccumulator()
    acc.update_baseline([Team("A", "", 40), Team("B", "", 10), Team("C", "", 25)])

    first = acc.record(progress(A=1, B=1))
    second = acc.record(progress(A=4, B=2))

    assert first.get("C") == 25
    assert second.get("C") == 25
    assert second.get("A") == 44


def test_unknown_team_starts_at_zero():
    acc = ScoreTimeseriesAccumulator()
    acc.update_baseline([Team("A", "", 40)])

    point = acc.record(progress(A=1, NEW=6))

    assert point.get("NEW") == 6
    assert acc.baseline["NEW"] == 0


def test_update_baseline_merges():
    acc = ScoreTimeseriesAccumulator()
    acc.update_baseline([Team("A", "", 1), Team("B", "", 2)])
    acc.update_baseline([Team("A", "", 10)])
    assert acc.baseline == {"A": 10, "B": 2}


def test_ticks_are_monotonic():
    acc = ScoreTimeseriesAccumulator()
    for _ in range(5):
        acc.record(progress(A=1))
    assert [p.tick for p in acc.points] == [1, 2, 3, 4, 5]
    assert acc.tick == 5


def test_window_evicts_oldest():
    acc = ScoreTimeseriesAccumulator()
    for i in range(100):
        acc.record(progress(A=i))
    assert len(acc) == 100
    assert acc.points[0].tick == 1

    acc.record(progress(A=100))

    assert len(acc) == 100
    assert acc.points[0].tick == 2
    assert acc.points[-1].tick == 101


def test_window_bound_holds_for_long_runs():
    acc = ScoreTimeseriesAccumulator()
    for i in range(350):
        acc.record(progress(A=i))
        assert len(acc) <= 100
    assert [p.tick for p in acc.points] == list(range(251, 351))


def test_custom_window():
    acc = ScoreTimeseriesAccumulator(window_size=3)
    for _ in range(5):
        acc.record(progress(A=1))
    assert [p.tick for p in acc.points] == [3, 4, 5]


def test_window_must_be_positive():
    with pytest.raises(ValueError):
        ScoreTimeseriesAccumulator(window_size=0)


def test_reset():
    acc = ScoreTimeseriesAccumulator()
    acc.update_baseline([Team("A", "", 40)])
    acc.record(progress(A=1))

    acc.reset()

    assert acc.points == ()
    assert acc.tick == 0
    assert acc.baseline == {}
    assert acc.record(progress(A=2)).tick == 1


def test_points_are_a_copy():
    acc = ScoreTimeseriesAccumulator()
    acc.record(progress(A=1))
    points = acc.points
    acc.record(progress(A=2))
    assert len(points) == 1


class TestChartHelpers:
    def test_series(self):
        acc = ScoreTimeseriesAccumulator()
        acc.update_baseline([Team("A", "", 10)])
        acc.record(progress(A=1))
        acc.record(progress(B=3))
        assert acc.series("A") == [(1, 11), (2, 10)]
        assert acc.series("B") == [(1, 0), (2, 3)]

    def test_latest(self):
        acc = ScoreTimeseriesAccumulator()
        assert acc.latest() is None
        acc.record(progress(A=1))
        assert acc.latest().tick == 1

    def test_ceiling_floor(self):
        acc = ScoreTimeseriesAccumulator()
        assert acc.chart_ceiling() == 100
        acc.record(progress(A=50))
        assert acc.chart_ceiling() == 100

    def test_ceiling_headroom(self):
        acc = ScoreTimeseriesAccumulator()
        acc.update_baseline([Team("A", "", 200), Team("B", "", 500)])
        acc.record(progress(A=0))
        assert acc.chart_ceiling(["A"]) == pytest.approx(220)
        assert acc.chart_ceiling() == pytest.approx(550)
