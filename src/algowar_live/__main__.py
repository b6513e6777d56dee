"""CLI entry point: python -m algowar_live [watch|pause|resume]"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import DashboardConfig
from .dashboard import LiveDashboard
from .dispatcher import PresentationHooks
from .errors import AdminActionError
from .rest import RestClient
from .state import StoreSnapshot
from .timeseries import ScoreTimeseriesAccumulator
from .types import Leaderboard, Match, TournamentStatus

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class ConsoleHooks(PresentationHooks):
    """Prints the presentation moments instead of animating them."""

    def on_intro(self) -> None:
        print("=" * 60)
        print("ALGOWAR - PRISONER'S DILEMMA TOURNAMENT")
        print("=" * 60)

    def on_match_start(self, match: Match) -> None:
        number = match.match_number if match.match_number is not None else "?"
        print(f"MATCH {number}: {' vs '.join(match.participants)}")

    def on_match_end(self, leaderboard: Leaderboard) -> None:
        print("-" * 60)
        for rank, team in enumerate(leaderboard, 1):
            print(f"  {rank}. {team.name or team.id:20s} {team.total_score:>8d}")
        print("-" * 60)

    def notify(self, message: str, level: str = "info") -> None:
        print(f"[{level}] {message}")


class ConsolePrinter:
    """Store observer printing status changes and live scores."""

    def __init__(self, timeseries: ScoreTimeseriesAccumulator):
        self.timeseries = timeseries
        self._status: TournamentStatus | None = None

    def __call__(self, snapshot: StoreSnapshot) -> None:
        if snapshot.status is not self._status:
            self._status = snapshot.status
            print(f"Status: {snapshot.status.value.upper()}")

        progress = snapshot.match_progress
        if progress is None:
            return
        point = self.timeseries.latest()
        parts = []
        for team_id, team in progress.teams.items():
            total = point.get(team_id) if point is not None else team.score
            move = team.last_move.code if team.last_move else "-"
            parts.append(f"{team.name or team_id} {move} {team.score:+d} ({total})")
        print(f"  Round {progress.round}/{progress.total_rounds}  " + "  ".join(parts))


async def _watch(config: DashboardConfig) -> None:
    async with LiveDashboard(config, ConsoleHooks()) as dashboard:
        dashboard.subscribe(ConsolePrinter(dashboard.timeseries))
        await asyncio.Event().wait()


def _admin(config: DashboardConfig, action: str) -> int:
    client = RestClient(config.base_url, config.admin_key, config.request_timeout)
    try:
        getattr(client, action)()
    except AdminActionError as e:
        print(e.user_message, file=sys.stderr)
        logging.getLogger(__name__).debug("Admin %s failed: %s", action, e)
        return 1
    print(f"Tournament {action}d")
    return 0


COMMANDS = ("watch", "pause", "resume")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="algowar_live",
        description="Live spectator client for the AlgoWar tournament",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="watch",
        help="watch the live stream (default), or pause/resume the tournament",
    )
    parser.add_argument(
        "base_url",
        nargs="?",
        default=None,
        help="Server base URL, same as --url",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Server base URL (default: $ALGOWAR_BACKEND_URL or http://localhost:8001)",
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Admin key for pause/resume (default: $ALGOWAR_ADMIN_KEY)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    # `algowar_live http://host:8001` is shorthand for `watch http://host:8001`.
    if args.command not in COMMANDS:
        if args.base_url is not None:
            parser.error(
                f"invalid command: {args.command!r} (choose from {', '.join(COMMANDS)})"
            )
        args.command, args.base_url = "watch", args.command

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    config = DashboardConfig.from_env(base_url=args.url or args.base_url, admin_key=args.key)

    if args.command in ("pause", "resume"):
        return _admin(config, args.command)

    try:
        asyncio.run(_watch(config))
    except KeyboardInterrupt:
        print("\nDisconnecting...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
