#!/usr/bin/env python3
"""Score chart: prints a text bar chart of cumulative scores on every tick."""

import asyncio
import sys

from algowar_live import DashboardConfig, LiveDashboard, PresentationHooks

BAR_WIDTH = 40


class ChartHooks(PresentationHooks):
    def on_intro(self) -> None:
        print("[ScoreChart] New tournament, chart cleared")

    def on_match_start(self, match) -> None:
        print(f"[ScoreChart] Match {match.match_number}: {' vs '.join(match.participants)}")


def draw(dashboard: LiveDashboard) -> None:
    point = dashboard.timeseries.latest()
    if point is None:
        return
    team_ids = [t.id for t in dashboard.store.leaderboard] or list(point.scores)
    ceiling = dashboard.timeseries.chart_ceiling(team_ids)
    names = {t.id: t.name for t in dashboard.store.leaderboard}
    print(f"--- tick {point.tick} ---")
    for team_id in team_ids:
        score = point.get(team_id)
        bar = "#" * int(score / ceiling * BAR_WIDTH)
        print(f"{names.get(team_id, team_id):>16s} {bar} {score}")


async def main(base_url: str) -> None:
    config = DashboardConfig.from_env(base_url=base_url)
    async with LiveDashboard(config, ChartHooks()) as dashboard:
        last_tick = 0

        def on_change(snapshot) -> None:
            nonlocal last_tick
            if dashboard.timeseries.tick != last_tick:
                last_tick = dashboard.timeseries.tick
                draw(dashboard)

        dashboard.subscribe(on_change)
        await asyncio.Event().wait()


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        asyncio.run(main(url))
    except KeyboardInterrupt:
        pass
