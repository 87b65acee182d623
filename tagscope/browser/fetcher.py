"""Document Fetcher - single-page HTML retrieval over HTTP."""
from dataclasses import dataclass
from typing import Optional

import httpx
from loguru import logger

from tagscope.browser.element_extractor import UnparsableDocumentError
from tagscope.config import DEFAULT_USER_AGENT

_MARKUP_CONTENT_TYPES = ("html", "xml", "text/plain")


class FetchError(Exception):
    """Raised when a page cannot be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class FetchedDocument:
    """Raw response body of a fetched page."""

    url: str
    status_code: int
    content_type: str
    html: str


class DocumentFetcher:
    """Fetch raw HTML with browser-like headers and a bounded timeout."""

    def __init__(
        self,
        timeout: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
                "Connection": "keep-alive",
            },
            follow_redirects=True,
            transport=transport,
        )
        logger.info(f"DocumentFetcher initialized (timeout={timeout}s)")

    async def fetch(self, url: str) -> FetchedDocument:
        """Fetch a page and return its body text.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchedDocument with the decoded body

        Raises:
            FetchError: On transport failure, timeout, or non-2xx status
            UnparsableDocumentError: If the response is not markup
        """
        logger.info(f"Fetching {url}")
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out after {self.timeout}s fetching {url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(f"HTTP {status} fetching {url}", status_code=status) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        content_type = response.headers.get("content-type", "")
        if content_type and not any(t in content_type.lower() for t in _MARKUP_CONTENT_TYPES):
            raise UnparsableDocumentError(
                f"Unsupported content type for markup: {content_type}"
            )

        logger.debug(f"Fetched {len(response.text)} chars from {response.url}")
        return FetchedDocument(
            url=str(response.url),
            status_code=response.status_code,
            content_type=content_type,
            html=response.text,
        )

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()
