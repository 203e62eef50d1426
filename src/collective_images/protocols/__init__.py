"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the graph backend or the cache store without touching handlers
- Unit testing with in-memory fakes
- Clear separation of concerns
"""

from .graph_client import GraphClient
from .image_fetcher import ImageFetcher
from .member_store import MemberStore

__all__ = [
    "GraphClient",
    "ImageFetcher",
    "MemberStore",
]
