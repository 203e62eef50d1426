"""Transient image entities."""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedImage:
    """Raw bytes of a remote image.

    Attributes:
        url: Where the image was fetched from
        content: The image bytes, untouched
        content_type: Media type reported by the remote server
    """

    url: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class ImageStream:
    """An open streaming download of a remote image.

    ``close`` must be awaited once the chunks have been consumed.
    """

    url: str
    content_type: str
    chunks: AsyncIterator[bytes]
    close: Callable[[], Awaitable[None]]
