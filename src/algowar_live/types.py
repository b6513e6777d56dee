"""Enums and dataclasses describing live tournament state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias

# Progress bars assume this many rounds when the server doesn't say.
DEFAULT_TOTAL_ROUNDS = 100


def _frozen(mapping: Mapping) -> Mapping:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


class ConnectionState(Enum):
    """Lifecycle of the stream connection."""
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class TournamentStatus(Enum):
    """Tournament status. Values are the lowercase wire strings."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"

    @classmethod
    def from_wire(cls, value: str) -> TournamentStatus:
        """Parse 'running' -> TournamentStatus.RUNNING."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown tournament status: {value!r}")


class Move(Enum):
    """A Prisoner's Dilemma move. Values are the one-letter wire codes."""
    COOPERATE = "C"
    DEFECT = "D"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> Move:
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unknown move code: {code!r}")


@dataclass(frozen=True)
class Team:
    """A leaderboard entry. total_score is authoritative, as reported by the server."""
    id: str
    name: str
    total_score: int = 0


Leaderboard: TypeAlias = tuple[Team, ...]


@dataclass(frozen=True)
class Tournament:
    """Tournament status plus any other fields the server reported."""
    status: TournamentStatus = TournamentStatus.IDLE
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", _frozen(self.details))

    def with_status(self, status: TournamentStatus) -> Tournament:
        return replace(self, status=status)


@dataclass(frozen=True)
class Match:
    """The match currently being played."""
    match_number: int | None = None
    participants: tuple[str, ...] = ()


@dataclass(frozen=True)
class TeamProgress:
    """One participant's state within a running match."""
    id: str
    name: str = ""
    score: int = 0  # relative to the team's score before this match
    last_move: Move | None = None
    coop_pct: float = 0.0


@dataclass(frozen=True)
class MatchProgress:
    """Progress of the running match, keyed by team id."""
    round: int = 0
    total_rounds: int = DEFAULT_TOTAL_ROUNDS
    teams: Mapping[str, TeamProgress] = field(default_factory=dict)
    match_number: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "teams", _frozen(self.teams))

    @property
    def percent_complete(self) -> float:
        total = self.total_rounds or DEFAULT_TOTAL_ROUNDS
        return self.round / total * 100


@dataclass(frozen=True)
class ScorePoint:
    """Cumulative score of every known team at one tick."""
    tick: int
    scores: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scores", _frozen(self.scores))

    def get(self, team_id: str) -> int:
        return self.scores.get(team_id, 0)
