"""httpx-based implementation of ImageFetcher.

All outbound image and badge requests go through one shared
``httpx.AsyncClient``. Timeouts are whatever the client is configured
with; there are no retries.
"""

import logging

import httpx

from collective_images.config import settings
from collective_images.entities import FetchedImage, ImageStream
from collective_images.errors import UpstreamFetchError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class HttpImageFetcher:
    """Fetch remote images with httpx.

    This class satisfies the ImageFetcher protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        fetcher = HttpImageFetcher.create()
        image = await fetcher.fetch_bytes("https://example.com/logo.png")
        print(image.content_type, len(image.content))
        await fetcher.close()
        ```
    """

    def __init__(
        self,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds. Defaults to settings.
            client: Pre-built client (e.g. with a mock transport in tests).
        """
        self._timeout = timeout or settings.http_timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(cls, timeout: float | None = None) -> "HttpImageFetcher":
        """Factory method to create HttpImageFetcher with defaults."""
        return cls(timeout=timeout)

    async def fetch_text(self, url: str) -> str:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("fetcher: Error while fetching %s: %s", url, e)
            raise UpstreamFetchError(url) from e
        return response.text

    async def fetch_bytes(self, url: str) -> FetchedImage:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("fetcher: Error while fetching %s: %s", url, e)
            raise UpstreamFetchError(url) from e

        return FetchedImage(
            url=url,
            content=response.content,
            content_type=response.headers.get("content-type", DEFAULT_CONTENT_TYPE),
        )

    async def open_stream(self, url: str) -> ImageStream:
        request = self.client.build_request("GET", url)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error("fetcher: Error proxying %s: %s", url, e)
            raise UpstreamFetchError(url) from e

        if response.is_error:
            await response.aclose()
            logger.error("fetcher: Error proxying %s: HTTP %d", url, response.status_code)
            raise UpstreamFetchError(url)

        return ImageStream(
            url=url,
            content_type=response.headers.get("content-type", DEFAULT_CONTENT_TYPE),
            chunks=response.aiter_bytes(),
            close=response.aclose,
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
