"""Image fetcher protocol.

Defines the single outbound HTTP helper shared by all handlers.
"""

from typing import Protocol, runtime_checkable

from collective_images.entities import FetchedImage, ImageStream


@runtime_checkable
class ImageFetcher(Protocol):
    """Protocol for fetching remote images and badges.

    Every method raises ``UpstreamFetchError`` on transport errors and
    non-2xx responses. Calls are attempted once, never retried.
    """

    async def fetch_text(self, url: str) -> str:
        """Fetch a text document (e.g. a badge SVG)."""
        ...

    async def fetch_bytes(self, url: str) -> FetchedImage:
        """Fetch a whole image into memory."""
        ...

    async def open_stream(self, url: str) -> ImageStream:
        """Open a streaming download of an image."""
        ...
