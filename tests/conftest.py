"""
Shared fixtures: in-memory fakes for the graph service and image fetcher.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from collective_images.api.app import app
from collective_images.api.dependencies import get_handler
from collective_images.entities import (
    CollectiveImages,
    FetchedImage,
    ImageStream,
    Member,
    MembersStats,
    MemberType,
)
from collective_images.errors import UpstreamFetchError, UpstreamNotFoundError
from collective_images.handlers import CollectiveHandler
from collective_images.repositories import MemoryMemberCache
from collective_images.services import MemberService

IMAGES_URL = "https://images.test"


def make_png(width: int = 40, height: int = 20, color=(200, 30, 30, 255)) -> bytes:
    """Encode a solid PNG of the given size."""
    buffer = BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeGraphClient:
    """GraphClient returning canned data and counting calls."""

    def __init__(self) -> None:
        self.stats: dict[str, MembersStats] = {}
        self.collectives: dict[str, CollectiveImages] = {}
        self.members: dict[str, list[Member]] = {}
        self.collective_error: Exception | None = None
        self.member_calls = 0

    async def fetch_members_stats(self, query):
        if query.collective_slug not in self.stats:
            raise UpstreamNotFoundError()
        return self.stats[query.collective_slug]

    async def fetch_collective_image(self, collective_slug):
        if self.collective_error is not None:
            raise self.collective_error
        if collective_slug not in self.collectives:
            raise UpstreamNotFoundError()
        return self.collectives[collective_slug]

    async def fetch_members(self, query):
        self.member_calls += 1
        if query.collective_slug not in self.members:
            raise UpstreamNotFoundError()
        return list(self.members[query.collective_slug])


class FakeFetcher:
    """ImageFetcher serving registered URLs; anything else fails."""

    def __init__(self) -> None:
        self.texts: dict[str, str] = {}
        self.images: dict[str, FetchedImage] = {}
        self.requested: list[str] = []

    def add_image(self, url: str, content: bytes, content_type: str = "image/png") -> None:
        self.images[url] = FetchedImage(url=url, content=content, content_type=content_type)

    async def fetch_text(self, url):
        self.requested.append(url)
        if url not in self.texts:
            raise UpstreamFetchError(url)
        return self.texts[url]

    async def fetch_bytes(self, url):
        self.requested.append(url)
        if url not in self.images:
            raise UpstreamFetchError(url)
        return self.images[url]

    async def open_stream(self, url):
        image = await self.fetch_bytes(url)

        async def chunks():
            yield image.content

        async def close():
            return None

        return ImageStream(url=url, content_type=image.content_type, chunks=chunks(), close=close)


@pytest.fixture
def graph():
    """Graph client with one collective and a few members."""
    fake = FakeGraphClient()
    fake.stats["webpack"] = MembersStats(name="backers", count=42)
    fake.collectives["webpack"] = CollectiveImages(
        name="webpack",
        image="https://cdn.test/webpack.png",
        background_image="https://cdn.test/webpack-bg.png",
    )
    fake.members["webpack"] = [
        Member(slug="alice", name="Alice", type=MemberType.USER, image="https://cdn.test/alice.png"),
        Member(slug="acme", name="Acme", type=MemberType.ORGANIZATION, image="https://cdn.test/acme.png"),
        Member(slug="bob", name="Bob", type=MemberType.USER, image=None),
    ]
    return fake


@pytest.fixture
def fetcher():
    """Fetcher with the collective images registered."""
    fake = FakeFetcher()
    fake.add_image("https://cdn.test/webpack.png", make_png(80, 40))
    fake.add_image("https://cdn.test/webpack-bg.png", make_png(200, 100))
    return fake


@pytest.fixture
def member_cache():
    return MemoryMemberCache(max_entries=50, ttl_seconds=600)


@pytest.fixture
def handler(graph, fetcher, member_cache):
    return CollectiveHandler(
        graph_client=graph,
        member_service=MemberService(graph_client=graph, store=member_cache),
        fetcher=fetcher,
        images_url=IMAGES_URL,
        badge_service_url="https://badges.test",
    )


@pytest.fixture
def client(handler):
    """Create a test client wired to the fakes."""
    app.dependency_overrides[get_handler] = lambda: handler
    yield TestClient(app, raise_server_exceptions=False, follow_redirects=False)
    app.dependency_overrides.clear()
