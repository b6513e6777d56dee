"""Client settings, with defaults and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .connection import DEFAULT_KEEPALIVE_INTERVAL, DEFAULT_RECONNECT_DELAY
from .timeseries import DEFAULT_WINDOW_SIZE

DEFAULT_BACKEND_URL = "http://localhost:8001"
DEFAULT_REQUEST_TIMEOUT = 10.0

ENV_PREFIX = "ALGOWAR_"


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class DashboardConfig:
    """Where the tournament server lives and how to talk to it."""

    base_url: str = DEFAULT_BACKEND_URL
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL
    window_size: int = DEFAULT_WINDOW_SIZE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    admin_key: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api"

    @property
    def ws_url(self) -> str:
        """Stream endpoint: http -> ws, https -> wss."""
        url = self.base_url
        if url.startswith("https://"):
            url = "wss://" + url[len("https://"):]
        elif url.startswith("http://"):
            url = "ws://" + url[len("http://"):]
        return f"{url}/api/ws"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides) -> DashboardConfig:
        """Build a config from ALGOWAR_* variables; keyword overrides win."""
        env = os.environ if env is None else env
        values = dict(
            base_url=env.get(ENV_PREFIX + "BACKEND_URL") or DEFAULT_BACKEND_URL,
            reconnect_delay=_number(env, "RECONNECT_DELAY", DEFAULT_RECONNECT_DELAY, float),
            keepalive_interval=_number(
                env, "KEEPALIVE_INTERVAL", DEFAULT_KEEPALIVE_INTERVAL, float
            ),
            window_size=_number(env, "WINDOW_SIZE", DEFAULT_WINDOW_SIZE, int),
            admin_key=env.get(ENV_PREFIX + "ADMIN_KEY") or None,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
