"""Member list service.

Reads member lists through the cache: a miss fetches from the graph
service and writes the result back unconditionally.
"""

import logging

from collective_images.entities import Member, MemberQuery
from collective_images.protocols import GraphClient, MemberStore

logger = logging.getLogger(__name__)


class MemberService:
    """Read-through cache in front of the graph service.

    Concurrent misses for the same key are not de-duplicated: each one
    fetches and the last write wins. Entries are idempotent and expire
    quickly, so this only costs an extra upstream query.

    Example:
        ```python
        members = MemberService(
            graph_client=GraphQLRepository.create(),
            store=MemoryMemberCache.create(),
        )
        users = await members.get_members(
            MemberQuery(collective_slug="webpack", backer_type="sponsors")
        )
        ```
    """

    def __init__(self, graph_client: GraphClient, store: MemberStore) -> None:
        """Initialize the member service.

        Args:
            graph_client: Graph backend used on cache misses (required).
            store: Bounded cache for member lists (required).
        """
        self._graph = graph_client
        self._store = store

    async def get_members(self, query: MemberQuery) -> tuple[Member, ...]:
        """Get the ordered member list for a query.

        Args:
            query: Collective, selector and activity filter

        Returns:
            The members, from cache when fresh

        Raises:
            Whatever the graph client raises on a miss; nothing is cached then.
        """
        key = query.cache_key()
        members = self._store.get(key)
        if members is not None:
            return members

        members = tuple(await self._graph.fetch_members(query))
        self._store.set(key, members)
        logger.debug("members: cached %d members for %s", len(members), key)
        return members

    @property
    def store(self) -> MemberStore:
        """Get the underlying cache store (for testing)."""
        return self._store

    @property
    def graph_client(self) -> GraphClient:
        """Get the underlying graph client (for testing)."""
        return self._graph
