"""
Async HTTP client for fetching HTML pages.

Built on httpx with:
- Overall per-fetch timeout, started once a connection slot is free
- User-agent rotation
- Optional exponential backoff retry on timeouts/network errors
"""

import asyncio
from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .exceptions import FetchError

logger = structlog.get_logger(__name__)


# User agents for rotation
USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
]

DEFAULT_TIMEOUT = 30.0

# Same as the httpx default pool size
DEFAULT_MAX_CONNECTIONS = 100


class HttpClient:
    """
    Async HTTP client returning page text or raising FetchError.

    Usage:
        async with HttpClient(timeout=10) as client:
            html = await client.fetch_text("https://example.com")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Upper bound in seconds for one fetch, retries included
            max_retries: Extra attempts on timeout/network errors (0 = none)
            max_connections: Concurrent requests; further fetches wait for a
                free slot before their timeout starts
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.max_connections = max_connections
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._user_agent_index = 0

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._semaphore = asyncio.Semaphore(self.max_connections)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(max_connections=self.max_connections),
            follow_redirects=True,
            headers={"Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._semaphore = None

    def _get_user_agent(self) -> str:
        """Get next user agent in rotation."""
        ua = USER_AGENTS[self._user_agent_index % len(USER_AGENTS)]
        self._user_agent_index += 1
        return ua

    async def _do_request(self, url: str) -> httpx.Response:
        """Execute GET request, retrying per max_retries."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._client.get(
                    url,
                    headers={"User-Agent": self._get_user_agent()},
                )
                response.raise_for_status()
        return response

    async def fetch_text(self, url: str) -> str:
        """
        GET a page and return its decoded text.

        Args:
            url: URL to fetch

        Returns:
            Response text

        Raises:
            FetchError: On invalid URL, network error, error status or timeout
        """
        if not self._client or not self._semaphore:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        try:
            async with self._semaphore:
                logger.debug("http_get", url=url)
                response = await asyncio.wait_for(self._do_request(url), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(url, f"timed out after {self.timeout:g}s") from e
        except httpx.TimeoutException as e:
            raise FetchError(url, f"timed out after {self.timeout:g}s") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, str(e) or e.__class__.__name__) from e

        logger.debug("http_get_complete", url=url, status=response.status_code)
        return response.text
