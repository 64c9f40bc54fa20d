"""Stage 1 — Fetch raw page HTML."""

from __future__ import annotations

import logging

import httpx

from config import Settings
from engine.errors import FetchError

logger = logging.getLogger("digest.engine.fetcher")


class Fetcher:
    """Single-shot HTTP GET for an article URL.

    A fresh ``httpx.AsyncClient`` is opened per call, so concurrent requests
    never share connection state.  ``transport`` exists for tests
    (``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = settings.fetch_timeout
        self._user_agent = settings.fetch_user_agent
        self._max_bytes = settings.max_fetch_bytes
        self._transport = transport

    async def fetch(self, url: str) -> str:
        """Return the decoded body of *url*; raise ``FetchError`` otherwise."""
        logger.info("Fetching %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    status = response.status_code
                    encoding = response.encoding or "utf-8"
                    raw = await self._read_capped(response)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(
                f"Failed to fetch URL. Status: {status}", status=status, cause=exc
            ) from exc
        except httpx.TimeoutException as exc:
            raise FetchError(f"Timed out fetching {url}", cause=exc) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"Failed to fetch URL: {exc}", cause=exc) from exc

        html = raw.decode(encoding, errors="replace")

        logger.info("Fetched %s — status %d, %d chars", url, status, len(html))
        return html

    async def _read_capped(self, response: httpx.Response) -> bytes:
        """Read at most ``max_fetch_bytes``; the rest of the body is never downloaded."""
        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self._max_bytes:
                break
        return b"".join(chunks)[: self._max_bytes]
