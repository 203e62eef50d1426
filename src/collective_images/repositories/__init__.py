"""Repository layer for data access.

This layer hides external dependencies (the GraphQL API, remote image
hosts, the member cache store) behind protocol-based interfaces. This
enables:
- Swapping implementations (in-memory cache -> shared store, etc.)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from collective_images.protocols import GraphClient, ImageFetcher, MemberStore

from .graphql_repository import GraphQLRepository
from .http_image_fetcher import HttpImageFetcher
from .memory_member_cache import MemoryMemberCache

__all__ = [
    "GraphClient",
    "ImageFetcher",
    "MemberStore",
    "GraphQLRepository",
    "HttpImageFetcher",
    "MemoryMemberCache",
]
