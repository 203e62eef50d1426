"""Graph service protocol.

Defines the interface for the backend that resolves collectives, their
image metadata and their member lists.

Implementations can include:
- The Open Collective GraphQL API over HTTP (default)
- In-memory fakes for tests
"""

from typing import Protocol, runtime_checkable

from collective_images.entities import CollectiveImages, Member, MemberQuery, MembersStats


@runtime_checkable
class GraphClient(Protocol):
    """Protocol for graph-query backends.

    Implementations raise ``UpstreamNotFoundError`` when the collective
    or tier does not exist, and ``GraphQLError`` for other query errors.
    """

    async def fetch_members_stats(self, query: MemberQuery) -> MembersStats:
        """Fetch the aggregate member count for a backer type or tier.

        Args:
            query: Collective and selector to count

        Returns:
            The label and count to display
        """
        ...

    async def fetch_collective_image(self, collective_slug: str) -> CollectiveImages:
        """Fetch image metadata of a single collective.

        Args:
            collective_slug: Slug of the collective

        Returns:
            Name, logo and background image URLs
        """
        ...

    async def fetch_members(self, query: MemberQuery) -> list[Member]:
        """Fetch the ordered member list matching a query.

        Args:
            query: Collective, selector and activity filter

        Returns:
            Members ordered by total contribution
        """
        ...
