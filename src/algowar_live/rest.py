"""REST clients for the tournament server's snapshot and admin endpoints.

RestClient uses only stdlib urllib (zero deps).
AsyncRestClient uses aiohttp.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request
from typing import Any

from .errors import AdminActionError, AuthorizationError, RequestError
from .protocol import parse_leaderboard, parse_tournament
from .types import Leaderboard, Tournament

ADMIN_KEY_HEADER = "X-Admin-Key"
DEFAULT_TIMEOUT = 10.0


def _decode_body(text: str) -> Any:
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise RequestError(f"Invalid JSON response: {e}") from e


def _admin_headers(action: str, admin_key: str | None) -> dict[str, str]:
    if not admin_key:
        raise AuthorizationError(action, "No admin key configured")
    return {ADMIN_KEY_HEADER: admin_key}


def _admin_error(action: str, e: RequestError) -> AdminActionError:
    if e.is_unauthorized:
        return AuthorizationError(action, str(e), e.status)
    return AdminActionError(action, str(e), e.status)


def _to_tournament(data: Any) -> Tournament:
    try:
        return parse_tournament(data)
    except (KeyError, TypeError, ValueError) as e:
        raise RequestError(f"Malformed tournament status: {e}") from e


def _to_leaderboard(data: Any) -> Leaderboard:
    try:
        return parse_leaderboard(data)
    except (KeyError, TypeError, ValueError) as e:
        raise RequestError(f"Malformed leaderboard: {e}") from e


class RestClient:
    """Synchronous REST client using stdlib urllib."""

    def __init__(
        self,
        base_url: str = "http://localhost:8001",
        admin_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.admin_key = admin_key
        self.timeout = timeout

    def _request(self, method: str, path: str, headers: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        req = urllib.request.Request(url, method=method, headers=headers or {})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return _decode_body(resp.read().decode())
        except urllib.error.HTTPError as e:
            body_text = e.read().decode() if e.fp else ""
            raise RequestError(f"HTTP {e.code}: {body_text}", status=e.code) from e
        except urllib.error.URLError as e:
            raise RequestError(f"Request failed: {e}") from e
        except TimeoutError as e:
            raise RequestError(f"Request timed out: {e}") from e

    def get_tournament_status(self) -> Tournament:
        return _to_tournament(self._request("GET", "/api/tournament/status"))

    def get_leaderboard(self) -> Leaderboard:
        return _to_leaderboard(self._request("GET", "/api/leaderboard"))

    def _admin(self, action: str) -> Any:
        headers = _admin_headers(action, self.admin_key)
        try:
            return self._request("POST", f"/api/tournament/{action}", headers)
        except RequestError as e:
            raise _admin_error(action, e) from e

    def pause(self) -> Any:
        return self._admin("pause")

    def resume(self) -> Any:
        return self._admin("resume")


class AsyncRestClient:
    """Async REST client using aiohttp."""

    def __init__(
        self,
        base_url: str = "http://localhost:8001",
        admin_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.admin_key = admin_key
        self.timeout = timeout
        self._session = None

    async def _ensure_session(self):
        if self._session is None:
            import aiohttp
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def _request(self, method: str, path: str, headers: dict[str, str] | None = None) -> Any:
        import aiohttp

        await self._ensure_session()
        url = f"{self.base_url}{path}"
        try:
            async with self._session.request(method, url, headers=headers) as resp:
                text = await resp.text()
                if resp.status >= 400:
                    raise RequestError(f"HTTP {resp.status}: {text}", status=resp.status)
                return _decode_body(text)
        except aiohttp.ClientError as e:
            raise RequestError(f"Request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise RequestError(f"Request timed out: {e}") from e

    async def get_tournament_status(self) -> Tournament:
        return _to_tournament(await self._request("GET", "/api/tournament/status"))

    async def get_leaderboard(self) -> Leaderboard:
        return _to_leaderboard(await self._request("GET", "/api/leaderboard"))

    async def _admin(self, action: str) -> Any:
        headers = _admin_headers(action, self.admin_key)
        try:
            return await self._request("POST", f"/api/tournament/{action}", headers)
        except RequestError as e:
            raise _admin_error(action, e) from e

    async def pause(self) -> Any:
        return await self._admin("pause")

    async def resume(self) -> Any:
        return await self._admin("resume")
