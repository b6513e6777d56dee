"""End-to-end tests: snapshot + stream through the live dashboard."""

import asyncio

import pytest
from conftest import FakeClock, FakeServer, FakeSocket, RecordingHooks, frame, team, until

from algowar_live.config import DashboardConfig
from algowar_live.dashboard import LiveDashboard
from algowar_live.types import Team, Tournament, TournamentStatus


class FakeRest:
    def __init__(self, leaderboard, status=TournamentStatus.IDLE):
        self.leaderboard = tuple(leaderboard)
        self.status = status
        self.actions = []

    async def get_tournament_status(self):
        return Tournament(status=self.status)

    async def get_leaderboard(self):
        return self.leaderboard

    async def pause(self):
        self.actions.append("pause")

    async def resume(self):
        self.actions.append("resume")


def progress(round_, a, b):
    return frame(
        "match_progress",
        data={
            "match_number": 1,
            "round": round_,
            "total_rounds": 3,
            "team_a": {"id": "A", "name": "Alpha", "score": a, "last_move": "C"},
            "team_b": {"id": "B", "name": "Beta", "score": b, "last_move": "D"},
        },
    )


def make_dashboard(server, rest, hooks=None, clock=None):
    clock = clock or FakeClock()
    return LiveDashboard(
        DashboardConfig(base_url="https://arena.test"),
        hooks,
        rest_client=rest,
        connect=server.connect,
        sleep=clock.sleep,
    )


@pytest.mark.asyncio
async def test_full_match_scenario():
    gate = asyncio.Event()
    frames = [
        frame("tournament_started"),
        frame("match_started", data={"match_number": 1, "team_a": "A", "team_b": "B"}),
        progress(1, 1, 0),
        progress(2, 4, 1),
        progress(3, 7, 3),
        frame("match_completed", leaderboard=[team("A", 7), team("B", 3)]),
    ]
    server = FakeServer(FakeSocket(frames, hold=True, gate=gate))
    rest = FakeRest([Team("A", "Team A", 0), Team("B", "Team B", 0)])
    dashboard = make_dashboard(server, rest, RecordingHooks())

    assert await dashboard.start() is True
    assert dashboard.timeseries.baseline == {"A": 0, "B": 0}

    gate.set()
    await until(lambda: dashboard.store.match_progress is None and dashboard.timeseries.tick == 3)
    await until(lambda: dashboard.store.leaderboard[0].total_score == 7)

    assert server.urls == ["wss://arena.test/api/ws"]
    assert dashboard.store.status is TournamentStatus.RUNNING
    assert dashboard.store.leaderboard == (Team("A", "Team A", 7), Team("B", "Team B", 3))
    points = dashboard.timeseries.points
    assert [p.tick for p in points] == [1, 2, 3]
    assert [dict(p.scores) for p in points] == [
        {"A": 1, "B": 0},
        {"A": 4, "B": 1},
        {"A": 7, "B": 3},
    ]
    assert dashboard.timeseries.baseline == {"A": 7, "B": 3}
    await dashboard.close()


@pytest.mark.asyncio
async def test_stream_initial_state_wins_over_late_snapshot():
    frames = [
        frame("initial_state", tournament={"status": "paused"}, leaderboard=[team("A", 50)]),
    ]
    server = FakeServer(FakeSocket(frames, hold=True))
    rest = FakeRest([Team("A", "Team A", 0)])
    dashboard = make_dashboard(server, rest)

    await dashboard.connection.open()
    await until(lambda: dashboard.dispatcher.synced)

    assert await dashboard.snapshot_loader.load(unless=lambda: dashboard.dispatcher.synced) is False
    assert dashboard.store.status is TournamentStatus.PAUSED
    assert dashboard.timeseries.baseline == {"A": 50}
    await dashboard.close()


@pytest.mark.asyncio
async def test_observers_see_updates():
    server = FakeServer(FakeSocket([frame("tournament_paused")], hold=True))
    dashboard = make_dashboard(server, FakeRest([]))
    statuses = []
    dashboard.subscribe(lambda snap: statuses.append(snap.status))

    async with dashboard:
        await until(lambda: TournamentStatus.PAUSED in statuses)

    assert dashboard.connection.is_closed


@pytest.mark.asyncio
async def test_admin_actions_go_through_rest():
    rest = FakeRest([])
    dashboard = make_dashboard(FakeServer(), rest)
    await dashboard.pause()
    await dashboard.resume()
    assert rest.actions == ["pause", "resume"]
    await dashboard.close()


@pytest.mark.asyncio
async def test_failed_start_closes_stream():
    class BrokenRest(FakeRest):
        async def get_leaderboard(self):
            raise RuntimeError("unexpected payload")

    server = FakeServer(FakeSocket(hold=True))
    dashboard = make_dashboard(server, BrokenRest([]))

    with pytest.raises(RuntimeError):
        async with dashboard:
            pass

    assert dashboard.connection.is_closed
