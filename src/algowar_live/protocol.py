"""Stream frame parsing and outbound message formatting.

Server frames are UTF-8 JSON objects with a string ``type`` tag. Depending on
the tag, the payload sits under ``data``, ``tournament`` or ``leaderboard``.
This module provides pure functions turning frames into typed event
dataclasses; it never touches state.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, TypeAlias

from .errors import ProtocolError
from .types import (
    DEFAULT_TOTAL_ROUNDS,
    Leaderboard,
    Match,
    MatchProgress,
    Move,
    Team,
    TeamProgress,
    Tournament,
    TournamentStatus,
)

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Server event dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InitialStateEvent:
    tournament: Tournament
    leaderboard: Leaderboard = ()


@dataclass(frozen=True)
class TournamentStartedEvent:
    pass


@dataclass(frozen=True)
class ShowdownStartedEvent:
    pass


@dataclass(frozen=True)
class MatchStartedEvent:
    match: Match


@dataclass(frozen=True)
class MatchProgressEvent:
    progress: MatchProgress


@dataclass(frozen=True)
class MatchCompletedEvent:
    """leaderboard is None when the server sent none."""
    leaderboard: Leaderboard | None = None


@dataclass(frozen=True)
class TournamentFinishedEvent:
    leaderboard: Leaderboard | None = None


@dataclass(frozen=True)
class ShowdownFinishedEvent:
    leaderboard: Leaderboard | None = None


@dataclass(frozen=True)
class TournamentPausedEvent:
    pass


@dataclass(frozen=True)
class TournamentResumedEvent:
    pass


@dataclass(frozen=True)
class TournamentResetEvent:
    pass


@dataclass(frozen=True)
class UnknownEvent:
    """A well-formed frame with a tag this client doesn't handle."""
    type: str


ServerEvent: TypeAlias = (
    InitialStateEvent
    | TournamentStartedEvent
    | ShowdownStartedEvent
    | MatchStartedEvent
    | MatchProgressEvent
    | MatchCompletedEvent
    | TournamentFinishedEvent
    | ShowdownFinishedEvent
    | TournamentPausedEvent
    | TournamentResumedEvent
    | TournamentResetEvent
    | UnknownEvent
)

# ---------------------------------------------------------------------------
# Payload parsing (shared with the REST clients)
# ---------------------------------------------------------------------------

# Legacy slot keys: team_a, team_b, team_c, ...
_SLOT_KEY_RE = re.compile(r"^team_([a-z])$")


def parse_team(d: dict) -> Team:
    return Team(
        id=str(d["id"]),
        name=d.get("name") or "",
        total_score=int(d.get("total_score") or 0),
    )


def parse_leaderboard(items: list | None) -> Leaderboard:
    if items is None:
        return ()
    if not isinstance(items, list):
        raise ValueError(f"Leaderboard must be a list, got {type(items).__name__}")
    return tuple(parse_team(t) for t in items)


def parse_tournament(d: dict | None) -> Tournament:
    if d is None:
        return Tournament()
    if not isinstance(d, dict):
        raise ValueError(f"Tournament must be an object, got {type(d).__name__}")
    details = {k: v for k, v in d.items() if k != "status"}
    return Tournament(
        status=TournamentStatus.from_wire(d.get("status", "idle")),
        details=details,
    )


def _slots(d: dict) -> list[tuple[str, Any]]:
    """Return (letter, value) for every team_<x> key, in key order."""
    found = []
    for key, value in d.items():
        m = _SLOT_KEY_RE.match(key)
        if m and value is not None:
            found.append((m.group(1), value))
    return sorted(found)


def _team_ref(value: Any) -> str | None:
    if isinstance(value, dict):
        ref = value.get("id") or value.get("name")
        return str(ref) if ref is not None else None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def parse_match(d: dict) -> Match:
    if "participants" in d:
        refs = [_team_ref(p) for p in d["participants"]]
    else:
        refs = [_team_ref(v) for _, v in _slots(d)]
    return Match(
        match_number=d.get("match_number"),
        participants=tuple(r for r in refs if r is not None),
    )


def _parse_move(code: Any) -> Move | None:
    """Last move is display-only, so an unknown code reads as no move."""
    if not code:
        return None
    try:
        return Move.from_code(code)
    except ValueError:
        log.debug("Ignoring unknown move code %r", code)
        return None


def _parse_team_progress(d: dict, coop_pct: Any = None) -> TeamProgress | None:
    if not isinstance(d, dict) or not d.get("id"):
        return None
    return TeamProgress(
        id=str(d["id"]),
        name=d.get("name") or "",
        score=int(d.get("score") or 0),
        last_move=_parse_move(d.get("last_move")),
        coop_pct=float(d.get("coop_pct", coop_pct) or 0.0),
    )


def parse_match_progress(d: dict) -> MatchProgress:
    entries: list[TeamProgress | None]
    if "teams" in d:
        entries = [_parse_team_progress(t) for t in d["teams"]]
    else:
        # Slot format keeps the cooperation rate beside the slot: a_coop_pct.
        entries = [
            _parse_team_progress(value, d.get(f"{letter}_coop_pct"))
            for letter, value in _slots(d)
        ]
    return MatchProgress(
        round=int(d.get("round") or 0),
        total_rounds=int(d.get("total_rounds") or DEFAULT_TOTAL_ROUNDS),
        teams={tp.id: tp for tp in entries if tp is not None},
        match_number=d.get("match_number"),
    )


# ---------------------------------------------------------------------------
# Frame parsing
# ---------------------------------------------------------------------------


def _field(msg: dict, key: str) -> Any:
    """Look up key at the top level, falling back to the data object."""
    if key in msg:
        return msg[key]
    data = msg.get("data")
    if isinstance(data, dict):
        return data.get(key)
    return None


def _optional_leaderboard(msg: dict) -> Leaderboard | None:
    items = _field(msg, "leaderboard")
    return None if items is None else parse_leaderboard(items)


def _data(msg: dict) -> dict:
    data = msg.get("data")
    if not isinstance(data, dict):
        raise ValueError("Missing data object")
    return data


def _decode(frame: str | bytes) -> dict:
    if isinstance(frame, (bytes, bytearray)):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Frame is not UTF-8: {e}") from e
    try:
        msg = json.loads(frame)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Frame is not JSON: {e}", frame) from e
    if not isinstance(msg, dict):
        raise ProtocolError("Frame is not a JSON object", frame)
    tag = msg.get("type")
    if not isinstance(tag, str) or not tag:
        raise ProtocolError("Frame has no type tag", frame)
    return msg


def parse_frame(frame: str | bytes) -> ServerEvent:
    """Parse a single stream frame into a typed event.

    Raises ProtocolError when the frame is not a tagged JSON object or when
    the payload for a known tag is malformed.
    """
    msg = _decode(frame)
    tag = msg["type"]

    try:
        match tag:
            case "initial_state":
                return InitialStateEvent(
                    tournament=parse_tournament(_field(msg, "tournament")),
                    leaderboard=parse_leaderboard(_field(msg, "leaderboard")),
                )

            case "tournament_started":
                return TournamentStartedEvent()

            case "showdown_started":
                return ShowdownStartedEvent()

            case "match_started":
                return MatchStartedEvent(match=parse_match(_data(msg)))

            case "match_progress":
                return MatchProgressEvent(progress=parse_match_progress(_data(msg)))

            case "match_completed":
                return MatchCompletedEvent(leaderboard=_optional_leaderboard(msg))

            case "tournament_finished":
                return TournamentFinishedEvent(leaderboard=_optional_leaderboard(msg))

            case "showdown_finished":
                return ShowdownFinishedEvent(leaderboard=_optional_leaderboard(msg))

            case "tournament_paused":
                return TournamentPausedEvent()

            case "tournament_resumed":
                return TournamentResumedEvent()

            case "tournament_reset":
                return TournamentResetEvent()

            case _:
                return UnknownEvent(type=tag)
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed {tag} payload: {e}", frame) from e


# ---------------------------------------------------------------------------
# Outbound formatting
# ---------------------------------------------------------------------------


def format_ping() -> str:
    """Keepalive payload: plain text, not JSON."""
    return "ping"
