"""Persistent WebSocket connection to the tournament stream.

ConnectionManager keeps one logical connection alive: it reconnects after a
fixed delay whenever the socket closes, sends a plain-text keepalive while
open, and hands every inbound frame to a single callback. It knows nothing
about what the frames mean.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Self, TypeAlias

import websockets
from websockets.exceptions import WebSocketException

from .errors import ConnectionError
from .protocol import format_ping
from .types import ConnectionState

log = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 3.0
DEFAULT_KEEPALIVE_INTERVAL = 25.0

_TRANSPORT_ERRORS = (OSError, asyncio.TimeoutError, WebSocketException)

FrameHandler: TypeAlias = Callable[[str | bytes], Any]
Connector: TypeAlias = Callable[[str], Awaitable[Any]]
Sleeper: TypeAlias = Callable[[float], Awaitable[None]]


class ConnectionManager:
    """Owns the stream connection lifecycle: connect, reconnect, keepalive, teardown.

    ``connect`` and ``sleep`` default to ``websockets.connect`` and
    ``asyncio.sleep``; pass replacements to drive the lifecycle without a
    network or real time.
    """

    def __init__(
        self,
        url: str,
        on_message: FrameHandler,
        *,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL,
        connect: Connector | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.url = url
        self.on_message = on_message
        self.reconnect_delay = reconnect_delay
        self.keepalive_interval = keepalive_interval
        self._connect = connect or websockets.connect
        self._sleep = sleep

        self.state = ConnectionState.CLOSED
        self.reconnects = 0
        self._ws = None
        self._runner: asyncio.Task | None = None
        self._keepalive: asyncio.Task | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN and self._ws is not None

    @property
    def is_closed(self) -> bool:
        """True once close() has been called."""
        return self._closed

    async def open(self) -> None:
        """Start the connection lifecycle. Calling again while it runs is a no-op."""
        if self._closed:
            raise ConnectionError("Connection manager has been closed")
        if self._runner is not None and not self._runner.done():
            return
        self._runner = asyncio.create_task(self._run(), name=f"ws-runner {self.url}")
        if self._keepalive is None or self._keepalive.done():
            self._keepalive = asyncio.create_task(self._keepalive_loop(), name="ws-keepalive")

    async def send(self, payload: str) -> None:
        if not self.is_open:
            raise ConnectionError("Not connected")
        try:
            await self._ws.send(payload)
        except _TRANSPORT_ERRORS as e:
            raise ConnectionError(f"Send failed: {e}") from e

    async def ping(self) -> bool:
        """Send one keepalive. Returns False (and does nothing) when not open."""
        if not self.is_open:
            return False
        try:
            await self.send(format_ping())
        except ConnectionError as e:
            log.debug("Keepalive skipped: %s", e)
            return False
        return True

    async def close(self) -> None:
        """Tear down: stop keepalive, cancel any pending reconnect, close the socket."""
        if self._closed:
            return
        self._closed = True

        tasks = [t for t in (self._keepalive, self._runner) if t is not None]
        for task in tasks:
            task.cancel()

        ws, self._ws = self._ws, None
        if ws is not None:
            try:
                await ws.close()
            except _TRANSPORT_ERRORS:
                pass

        await asyncio.gather(*tasks, return_exceptions=True)
        self._runner = None
        self._keepalive = None
        self.state = ConnectionState.CLOSED

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # -- Internals --

    async def _run(self) -> None:
        while not self._closed:
            try:
                await self._connect_once()
            except Exception:
                log.exception("Unexpected error on connection to %s", self.url)
                self.state = ConnectionState.CLOSED
            if self._closed:
                break
            self.reconnects += 1
            log.info("Reconnecting to %s in %.1fs", self.url, self.reconnect_delay)
            await self._sleep(self.reconnect_delay)

    async def _connect_once(self) -> None:
        self.state = ConnectionState.CONNECTING
        try:
            ws = await self._connect(self.url)
        except _TRANSPORT_ERRORS as e:
            log.warning("Connection to %s failed: %s", self.url, e)
            self.state = ConnectionState.CLOSED
            return

        self._ws = ws
        self.state = ConnectionState.OPEN
        log.info("Connected to %s", self.url)
        try:
            async for frame in ws:
                self._deliver(frame)
        except _TRANSPORT_ERRORS as e:
            log.warning("Connection to %s lost: %s", self.url, e)
        finally:
            self._ws = None
            self.state = ConnectionState.CLOSED
            log.info("Disconnected from %s", self.url)

    def _deliver(self, frame: str | bytes) -> None:
        try:
            self.on_message(frame)
        except Exception:
            log.exception("Message handler failed")

    async def _keepalive_loop(self) -> None:
        while not self._closed:
            await self._sleep(self.keepalive_interval)
            await self.ping()
