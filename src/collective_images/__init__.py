"""Collective Images - badges, logos, banners and avatars for collectives.

This package provides a layered architecture for serving images built
from Open Collective data:

Layers:
    - protocols: Interface contracts (GraphClient, ImageFetcher, MemberStore)
    - repositories: Data access implementations (GraphQL, httpx, LRU cache)
    - services: Business logic (member lists, banners, image tools)
    - handlers: HTTP endpoint handlers
    - dto: Query parsing and response models (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from collective_images.repositories import GraphQLRepository, MemoryMemberCache
    from collective_images.services import MemberService

    members = MemberService(
        graph_client=GraphQLRepository.create(),
        store=MemoryMemberCache.create(),
    )
    ```

For HTTP API:
    ```python
    from collective_images.api.app import app
    ```
"""

from collective_images.config import settings
from collective_images.dto import AvatarQuery, BadgeQuery, BannerQuery, LogoQuery, ResizeQuery
from collective_images.entities import Member, MemberQuery, MembersStats
from collective_images.handlers import CollectiveHandler
from collective_images.protocols import GraphClient, ImageFetcher, MemberStore
from collective_images.repositories import GraphQLRepository, HttpImageFetcher, MemoryMemberCache
from collective_images.services import BannerGenerator, MemberService

__all__ = [
    # Configuration
    "settings",
    # Protocols (interfaces)
    "GraphClient",
    "ImageFetcher",
    "MemberStore",
    # Services (business logic)
    "BannerGenerator",
    "MemberService",
    # Handlers (HTTP)
    "CollectiveHandler",
    # Repositories (data access)
    "GraphQLRepository",
    "HttpImageFetcher",
    "MemoryMemberCache",
    # Entities (domain models)
    "Member",
    "MemberQuery",
    "MembersStats",
    # DTOs (API contracts)
    "AvatarQuery",
    "BadgeQuery",
    "BannerQuery",
    "LogoQuery",
    "ResizeQuery",
]
