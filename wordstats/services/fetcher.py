"""
Document fetchers.

The pipeline only depends on the Fetcher protocol: an awaitable
fetch(url) -> str that raises FetchError on any failure. Concrete fetchers own
their resources and are used as async context managers:

    async with SourceFetcher() as fetcher:
        report = await WordStatsPipeline(fetcher).run(sources)
"""

import asyncio
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import unquote, urlparse

import httpx

from wordstats.constants.config import RETRYABLE_STATUS_CODES
from wordstats.core.config import settings
from wordstats.core.errors import FetchError
from wordstats.core.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Fetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


class HttpFetcher:
    """
    HTTP(S) fetcher backed by a single httpx.AsyncClient.

    The client is created on __aenter__ and closed on __aexit__. Transport
    errors and 429/5xx responses are retried with exponential backoff; any
    other non-2xx response fails immediately.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        base_backoff: Optional[float] = None,
        max_backoff: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = settings.FETCH_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_retries = settings.FETCH_MAX_RETRIES if max_retries is None else max_retries
        self.base_backoff = settings.FETCH_BASE_BACKOFF_SECONDS if base_backoff is None else base_backoff
        self.max_backoff = settings.FETCH_MAX_BACKOFF_SECONDS if max_backoff is None else max_backoff
        self.user_agent = user_agent or settings.USER_AGENT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpFetcher":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _backoff(self, attempt: int) -> float:
        return min(self.base_backoff * (2**attempt), self.max_backoff)

    async def fetch(self, url: str) -> str:
        if self._client is None:
            raise RuntimeError("HttpFetcher must be used inside 'async with'")

        attempt = 0
        while True:
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                if attempt >= self.max_retries:
                    logger.error(f"[HttpFetcher] Giving up on {url}: {e}")
                    raise FetchError(url, f"{type(e).__name__}: {e}") from e
                wait_time = self._backoff(attempt)
                logger.warning(
                    f"[HttpFetcher] {type(e).__name__} for {url}. Retrying in {wait_time:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
            else:
                if response.is_success:
                    logger.debug(f"[HttpFetcher] Fetched {len(response.text)} chars from {url}")
                    return response.text

                status = response.status_code
                if status not in RETRYABLE_STATUS_CODES or attempt >= self.max_retries:
                    logger.error(f"[HttpFetcher] Non-success status for {url}: {status}")
                    raise FetchError(url, f"HTTP {status}", status_code=status)
                wait_time = self._backoff(attempt)
                logger.warning(
                    f"[HttpFetcher] HTTP {status} for {url}. Retrying in {wait_time:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )

            await asyncio.sleep(wait_time)
            attempt += 1


class FileFetcher:
    """Reads file:// URLs and plain filesystem paths in a worker thread."""

    async def __aenter__(self) -> "FileFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    @staticmethod
    def to_path(url: str) -> Path:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        return Path(url)

    async def fetch(self, url: str) -> str:
        path = self.to_path(url)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except OSError as e:
            logger.error(f"[FileFetcher] Cannot read {path}: {e}")
            raise FetchError(url, f"{type(e).__name__}: {e}") from e
        logger.debug(f"[FileFetcher] Read {len(text)} chars from {path}")
        return text


class SourceFetcher:
    """Routes http(s) URLs to HttpFetcher and everything else to FileFetcher."""

    HTTP_SCHEMES = {"http", "https"}

    def __init__(self, http: Optional[HttpFetcher] = None, files: Optional[FileFetcher] = None) -> None:
        self.http = http or HttpFetcher()
        self.files = files or FileFetcher()

    async def __aenter__(self) -> "SourceFetcher":
        await self.http.__aenter__()
        await self.files.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.files.__aexit__(exc_type, exc_val, exc_tb)
        await self.http.__aexit__(exc_type, exc_val, exc_tb)

    async def fetch(self, url: str) -> str:
        scheme = urlparse(url).scheme.lower()
        if scheme in self.HTTP_SCHEMES:
            return await self.http.fetch(url)
        if scheme in {"", "file"} or len(scheme) == 1:
            # single-letter schemes are Windows drive letters
            return await self.files.fetch(url)
        raise FetchError(url, f"Unsupported URL scheme '{scheme}'")
