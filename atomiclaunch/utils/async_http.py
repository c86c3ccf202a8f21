"""Async HTTP client utilities."""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from ..errors import DownloadFailed

DEFAULT_TIMEOUT = 300
USER_AGENT = "AtomicLauncher/0.3 (+https://github.com/atomic-launcher)"


class AsyncHTTPClient:
    """Reusable async HTTP client.

    Every failure, either a non-2xx status or a transport error, surfaces as
    :class:`DownloadFailed` carrying the URL. There is no retry policy; the
    session timeout is the only one.
    """

    def __init__(self, headers: Optional[Dict[str, str]] = None,
                 timeout: float = DEFAULT_TIMEOUT, connection_limit: int = 64):
        self.default_headers = {"User-Agent": USER_AGENT, **(headers or {})}
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.connection_limit = connection_limit
        self.session: Optional[aiohttp.ClientSession] = None
        self.request_count = 0

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(limit=self.connection_limit)
        self.session = aiohttp.ClientSession(
            headers=self.default_headers, timeout=self.timeout, connector=connector
        )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.session:
            await self.session.close()
            self.session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("AsyncHTTPClient must be used inside 'async with'")
        return self.session

    @asynccontextmanager
    async def stream(self, url: str,
                     headers: Optional[Dict[str, str]] = None) -> AsyncIterator[aiohttp.ClientResponse]:
        """Open a GET response whose status is already known to be 2xx."""
        session = self._require_session()
        self.request_count += 1
        try:
            async with session.get(url, headers=headers) as resp:
                if not 200 <= resp.status < 300:
                    raise DownloadFailed(url, status=resp.status, reason=resp.reason)
                yield resp
        except aiohttp.ClientError as e:
            raise DownloadFailed(url, reason=str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise DownloadFailed(url, reason="timed out") from e

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        """GET request returning decoded JSON."""
        async with self.stream(url, headers) as resp:
            # Some meta endpoints serve JSON as text/plain.
            return await resp.json(content_type=None)

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        async with self.stream(url, headers) as resp:
            return await resp.text()

    async def get_bytes(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        async with self.stream(url, headers) as resp:
            return await resp.read()
