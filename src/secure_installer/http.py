"""aiohttp-backed HTTP client used for probes, metadata and downloads."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import aiohttp

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_USER_AGENT = "secure-installer"


class HttpError(Exception):
    """Transport failure, timeout, or unexpected status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class HttpResponse:
    """Status and body of a completed request."""

    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    def text(self) -> str:
        """Body decoded as UTF-8, replacing undecodable bytes."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Body parsed as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body)


def _host(url: str) -> str:
    """Host part of a URL, for logs that must not leak query tokens."""
    return urlsplit(url).netloc or url


class AiohttpClient:
    """HTTP client backed by a lazily created ``aiohttp.ClientSession``.

    Satisfies the HttpClient protocol structurally.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        """Initialize the client.

        Args:
            session: Optional pre-built session. Created on first use if None.
        """
        self._session = session

    @classmethod
    def create(cls) -> AiohttpClient:
        """Create a client that opens its session on first request."""
        return cls()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": _USER_AGENT},
            )
        return self._session

    async def get(
        self,
        url: str,
        *,
        timeout: float,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Fetch a URL and read the whole body."""
        session = await self._get_session()
        logger.debug("GET %s (timeout %.1fs)", _host(url), timeout)
        try:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                body = await response.read()
                logger.debug("GET %s -> %s", _host(url), response.status)
                return HttpResponse(status=response.status, body=body)
        except asyncio.TimeoutError as e:
            raise HttpError(f"Request to {_host(url)} timed out after {timeout}s") from e
        except aiohttp.ClientError as e:
            raise HttpError(f"Request to {_host(url)} failed: {e}") from e

    async def download(self, url: str, dest: Path, *, timeout: float) -> int:
        """Stream a URL to ``dest``, returning the number of bytes written.

        ``timeout`` bounds connecting and each read, not the whole transfer,
        so a large asset that keeps arriving is never cut off.
        """
        session = await self._get_session()
        logger.debug("Downloading %s to %s", _host(url), dest)
        written = 0
        try:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(
                    total=None, sock_connect=timeout, sock_read=timeout
                ),
            ) as response:
                if not 200 <= response.status < 300:
                    raise HttpError(
                        f"Download from {_host(url)} returned {response.status}",
                        status=response.status,
                    )
                with dest.open("wb") as handle:
                    async for chunk in response.content.iter_chunked(_CHUNK_SIZE):
                        handle.write(chunk)
                        written += len(chunk)
        except asyncio.TimeoutError as e:
            raise HttpError(f"Download from {_host(url)} stalled for {timeout}s") from e
        except aiohttp.ClientError as e:
            raise HttpError(f"Download from {_host(url)} failed: {e}") from e
        return written

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
