"""algowar_live: live-state client for the AlgoWar tournament spectator dashboard."""

from ._version import __version__
from .config import DashboardConfig
from .connection import ConnectionManager
from .dashboard import LiveDashboard
from .dispatcher import MessageDispatcher, PresentationHooks
from .errors import (
    AdminActionError,
    AuthorizationError,
    ConnectionError,
    ProtocolError,
    RequestError,
    SnapshotError,
    SpectatorError,
)
from .rest import AsyncRestClient, RestClient
from .snapshot import SnapshotLoader
from .state import StoreSnapshot, TournamentStateStore
from .timeseries import ScoreTimeseriesAccumulator
from .types import (
    ConnectionState,
    Match,
    MatchProgress,
    Move,
    ScorePoint,
    Team,
    TeamProgress,
    Tournament,
    TournamentStatus,
)

__all__ = [
    "__version__",
    # Live dashboard
    "LiveDashboard",
    "DashboardConfig",
    "ConnectionManager",
    "MessageDispatcher",
    "PresentationHooks",
    "TournamentStateStore",
    "StoreSnapshot",
    "ScoreTimeseriesAccumulator",
    "SnapshotLoader",
    # REST clients
    "RestClient",
    "AsyncRestClient",
    # Types
    "ConnectionState",
    "TournamentStatus",
    "Tournament",
    "Team",
    "Match",
    "MatchProgress",
    "TeamProgress",
    "Move",
    "ScorePoint",
    # Errors
    "SpectatorError",
    "ProtocolError",
    "ConnectionError",
    "RequestError",
    "SnapshotError",
    "AdminActionError",
    "AuthorizationError",
]
