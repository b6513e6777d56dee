"""High-level live dashboard wiring connection + dispatcher + state."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .config import DashboardConfig
from .connection import ConnectionManager, Connector, Sleeper
from .dispatcher import MessageDispatcher, PresentationHooks
from .rest import AsyncRestClient
from .snapshot import SnapshotLoader, SnapshotSource
from .state import StoreSnapshot, TournamentStateStore
from .timeseries import ScoreTimeseriesAccumulator

log = logging.getLogger(__name__)


class LiveDashboard:
    """Live tournament state for a spectator view.

    start() opens the stream and pulls the REST snapshot side by side; from
    then on every stream frame updates ``store`` and ``timeseries``. Use as
    an async context manager, or call start()/close() yourself.
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        hooks: PresentationHooks | None = None,
        *,
        rest_client: AsyncRestClient | SnapshotSource | None = None,
        connect: Connector | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.config = config or DashboardConfig()
        self.store = TournamentStateStore()
        self.timeseries = ScoreTimeseriesAccumulator(self.config.window_size)
        self.dispatcher = MessageDispatcher(self.store, self.timeseries, hooks)

        self._owns_rest = rest_client is None
        self.rest = rest_client or AsyncRestClient(
            self.config.base_url,
            admin_key=self.config.admin_key,
            timeout=self.config.request_timeout,
        )
        self.snapshot_loader = SnapshotLoader(self.rest, self.store, self.timeseries)
        self.connection = ConnectionManager(
            self.config.ws_url,
            self.dispatcher,
            reconnect_delay=self.config.reconnect_delay,
            keepalive_interval=self.config.keepalive_interval,
            connect=connect,
            sleep=sleep,
        )

    def subscribe(self, observer: Callable[[StoreSnapshot], None]) -> Callable[[], None]:
        return self.store.subscribe(observer)

    async def start(self) -> bool:
        """Open the stream and load the snapshot. Returns whether the snapshot applied."""
        await self.connection.open()
        try:
            return await self.snapshot_loader.load(unless=lambda: self.dispatcher.synced)
        except BaseException:
            await self.close()
            raise

    async def close(self) -> None:
        await self.connection.close()
        self.dispatcher.close()
        if self._owns_rest:
            await self.rest.close()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Admin actions --

    async def pause(self) -> Any:
        return await self.rest.pause()

    async def resume(self) -> Any:
        return await self.rest.resume()
