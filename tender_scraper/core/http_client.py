"""
Async HTTP client for fetching tender listing pages.

Built on httpx with:
- Browser-like request headers
- Fixed request timeout
- Optional retry of transport errors (tenacity)
"""

from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

logger = structlog.get_logger(__name__)


# Government portals tend to reject obvious bot clients
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


class HttpClient:
    """
    Async HTTP client with browser headers, timeout and optional retries.

    Usage:
        async with HttpClient() as client:
            html = await client.get_text("https://example.com")
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 1,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Total attempts per request (1 = no retry)
            headers: Override for the browser-like header set
            transport: Custom httpx transport (tests use MockTransport)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.headers = headers or dict(BROWSER_HEADERS)
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers=self.headers,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _do_request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute HTTP request, retrying transport errors if configured."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        ):
            with attempt:
                response = await self._client.request(method, url, **kwargs)
                response.raise_for_status()
        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        GET request.

        Args:
            url: URL to fetch
            **kwargs: Additional httpx arguments

        Returns:
            httpx.Response object

        Raises:
            httpx.HTTPError: On timeout, network failure or error status
        """
        logger.debug("http_get", url=url)
        return await self._do_request("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs) -> str:
        """GET request returning text content."""
        response = await self.get(url, **kwargs)
        return response.text
