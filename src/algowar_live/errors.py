"""Error types for the AlgoWar live client."""

from __future__ import annotations


class SpectatorError(Exception):
    """Base exception for the AlgoWar live client."""


class ProtocolError(SpectatorError):
    """A stream frame could not be decoded into an event."""

    def __init__(self, message: str, frame: str | None = None):
        self.frame = frame
        super().__init__(message)


class ConnectionError(SpectatorError):
    """Connection-level error."""


class RequestError(SpectatorError):
    """An HTTP request to the tournament server failed."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401


class SnapshotError(SpectatorError):
    """The initial status/leaderboard snapshot could not be loaded."""


class AdminActionError(SpectatorError):
    """An admin action (pause/resume) failed."""

    def __init__(self, action: str, message: str, status: int | None = None):
        self.action = action
        self.status = status
        super().__init__(message)

    @property
    def user_message(self) -> str:
        """Text suitable for showing to the person who triggered the action."""
        return f"Failed to {self.action} tournament"


class AuthorizationError(AdminActionError):
    """The admin credential was rejected (HTTP 401)."""

    @property
    def user_message(self) -> str:
        return "Invalid admin key"
