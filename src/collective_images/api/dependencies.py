"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state (the member cache included)
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from collective_images.config import settings
from collective_images.handlers import CollectiveHandler
from collective_images.repositories import GraphQLRepository, HttpImageFetcher, MemoryMemberCache
from collective_images.services import BannerGenerator, MemberService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> CollectiveHandler:
    """Dependency injection for CollectiveHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The CollectiveHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "collective_handler", None)
    if handler is None:
        raise RuntimeError("CollectiveHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Repositories (graph API, image fetcher, member cache)
    2. Services (member lists, banner composition)
    3. Handler (HTTP endpoints) - stored in app.state.collective_handler

    Cleanup:
        Closes HTTP clients and removes everything from app.state on shutdown
    """
    graph = GraphQLRepository.create()
    fetcher = HttpImageFetcher.create()
    member_cache = MemoryMemberCache.create(
        max_entries=settings.member_cache_max_entries,
        ttl_seconds=settings.member_cache_ttl,
    )

    member_service = MemberService(graph_client=graph, store=member_cache)
    banner_generator = BannerGenerator(fetcher=fetcher)
    handler = CollectiveHandler(
        graph_client=graph,
        member_service=member_service,
        fetcher=fetcher,
        banner_generator=banner_generator,
    )

    app.state.graph_client = graph
    app.state.image_fetcher = fetcher
    app.state.member_service = member_service
    app.state.collective_handler = handler

    logger.info("Graph API: %s", settings.graphql_url)
    logger.info(
        "Member cache: %d entries, %ds TTL",
        settings.member_cache_max_entries,
        settings.member_cache_ttl,
    )

    yield

    await fetcher.close()
    await graph.close()
    del app.state.collective_handler
    del app.state.member_service
    del app.state.image_fetcher
    del app.state.graph_client
    logger.info("Collective images service shut down")


def cache_control(value: str):
    """Build a route dependency that pins ``value`` as the Cache-Control of
    every response of the route, error responses included.

    The handler sets the header on its own responses; the error handlers
    read it back from ``request.state``.

    Example:
        ```python
        @app.get("/{slug}/logo.png", dependencies=[Depends(cache_control("max-age=60"))])
        ```
    """

    def pin_cache_control(request: Request) -> None:
        request.state.cache_control = value

    return pin_cache_control


# Type alias for cleaner dependency injection
HandlerDep = Annotated[CollectiveHandler, Depends(get_handler)]
