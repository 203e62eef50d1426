"""GraphQL implementation of GraphClient.

Talks to the Open Collective GraphQL API over HTTP. Three queries are
needed: member stats for badges, collective images for logos and
backgrounds, and ordered member lists for banners and avatars.
"""

import logging
import re
from typing import Any

import httpx

from collective_images.config import settings
from collective_images.entities import (
    CollectiveImages,
    Member,
    MemberQuery,
    MembersStats,
    MemberType,
)
from collective_images.errors import GraphQLError, UpstreamNotFoundError

logger = logging.getLogger(__name__)

NOT_FOUND_PATTERN = re.compile(r"No collective found", re.IGNORECASE)

COLLECTIVE_IMAGE_QUERY = """
query CollectiveImage($collectiveSlug: String) {
  Collective(slug: $collectiveSlug) {
    name
    image
    backgroundImage
  }
}
"""

COLLECTIVE_STATS_QUERY = """
query CollectiveStats($collectiveSlug: String) {
  Collective(slug: $collectiveSlug) {
    name
    stats {
      backers {
        all
        users
        organizations
      }
    }
  }
}
"""

TIER_STATS_QUERY = """
query TierStats($collectiveSlug: String, $tierSlug: String) {
  Collective(slug: $collectiveSlug) {
    tiers(slug: $tierSlug) {
      slug
      name
      stats {
        totalDistinctOrders
      }
    }
  }
}
"""

MEMBERS_QUERY = """
query Members(
  $collectiveSlug: String!
  $tierSlug: String
  $type: String
  $role: String
  $isActive: Boolean
) {
  allMembers(
    collectiveSlug: $collectiveSlug
    tierSlug: $tierSlug
    type: $type
    role: $role
    isActive: $isActive
    orderBy: "totalDonations"
  ) {
    member {
      slug
      name
      type
      image
      website
    }
  }
}
"""

# backerType -> (label, stats field, member type filter)
BACKER_TYPES: dict[str, tuple[str, str, str | None]] = {
    "backers": ("backers", "users", MemberType.USER.value),
    "users": ("backers", "users", MemberType.USER.value),
    "sponsors": ("sponsors", "organizations", MemberType.ORGANIZATION.value),
    "organizations": ("sponsors", "organizations", MemberType.ORGANIZATION.value),
    "contributors": ("contributors", "all", None),
}
DEFAULT_BACKER_TYPE = ("backers", "all", None)


class GraphQLRepository:
    """Open Collective GraphQL client.

    This class satisfies the GraphClient protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        graph = GraphQLRepository.create()
        stats = await graph.fetch_members_stats(
            MemberQuery(collective_slug="webpack", backer_type="backers")
        )
        print(stats.count)
        ```
    """

    def __init__(
        self,
        graphql_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            graphql_url: GraphQL endpoint. Defaults to settings.
            api_key: Optional API key sent as the api_key query parameter.
            timeout: Request timeout in seconds. Defaults to settings.
            client: Pre-built client (e.g. with a mock transport in tests).
        """
        self._url = graphql_url or settings.graphql_url
        self._api_key = api_key or settings.api_key
        self._timeout = timeout or settings.http_timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @classmethod
    def create(
        cls,
        graphql_url: str | None = None,
        api_key: str | None = None,
    ) -> "GraphQLRepository":
        """Factory method to create GraphQLRepository with defaults from settings."""
        return cls(graphql_url=graphql_url, api_key=api_key)

    async def _query(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Raises:
            UpstreamNotFoundError: If the API reports an unknown collective
            GraphQLError: For any other error in the response
            httpx.HTTPError: For transport failures
        """
        params = {"api_key": self._api_key} if self._api_key else None
        response = await self.client.post(
            self._url,
            json={"query": query, "variables": variables},
            params=params,
        )
        response.raise_for_status()
        payload = response.json()

        errors = payload.get("errors") or []
        if errors:
            messages = [str(error.get("message", error)) for error in errors]
            if any(NOT_FOUND_PATTERN.search(message) for message in messages):
                raise UpstreamNotFoundError()
            raise GraphQLError(messages)

        return payload.get("data") or {}

    async def fetch_collective_image(self, collective_slug: str) -> CollectiveImages:
        data = await self._query(COLLECTIVE_IMAGE_QUERY, {"collectiveSlug": collective_slug})
        collective = data.get("Collective")
        if not collective:
            raise UpstreamNotFoundError()

        return CollectiveImages(
            name=collective.get("name") or collective_slug,
            image=collective.get("image"),
            background_image=collective.get("backgroundImage"),
        )

    async def fetch_members_stats(self, query: MemberQuery) -> MembersStats:
        if query.tier_slug:
            data = await self._query(
                TIER_STATS_QUERY,
                {"collectiveSlug": query.collective_slug, "tierSlug": query.tier_slug},
            )
            collective = data.get("Collective")
            tiers = (collective or {}).get("tiers") or []
            if not tiers:
                raise UpstreamNotFoundError()
            tier = tiers[0]
            stats = tier.get("stats") or {}
            return MembersStats(
                name=tier.get("name") or query.tier_slug,
                count=stats.get("totalDistinctOrders") or 0,
            )

        data = await self._query(COLLECTIVE_STATS_QUERY, {"collectiveSlug": query.collective_slug})
        collective = data.get("Collective")
        if not collective:
            raise UpstreamNotFoundError()

        label, field, _ = BACKER_TYPES.get(query.backer_type or "", DEFAULT_BACKER_TYPE)
        backers = (collective.get("stats") or {}).get("backers") or {}
        return MembersStats(name=label, count=backers.get(field) or 0)

    async def fetch_members(self, query: MemberQuery) -> list[Member]:
        variables: dict[str, Any] = {"collectiveSlug": query.collective_slug}
        if query.tier_slug:
            variables["tierSlug"] = query.tier_slug
            variables["role"] = "BACKER"
        else:
            _, _, member_type = BACKER_TYPES.get(query.backer_type or "", DEFAULT_BACKER_TYPE)
            if member_type:
                variables["type"] = member_type
            if query.backer_type != "contributors":
                variables["role"] = "BACKER"
        if query.is_active is not None:
            variables["isActive"] = query.is_active

        data = await self._query(MEMBERS_QUERY, variables)
        logger.debug(
            "graph: fetched %d members for %s",
            len(data.get("allMembers") or []),
            query.cache_key(),
        )
        return [self._to_member(row["member"]) for row in data.get("allMembers") or [] if row.get("member")]

    @staticmethod
    def _to_member(raw: dict[str, Any]) -> Member:
        member_type = MemberType.USER if raw.get("type") == MemberType.USER.value else MemberType.ORGANIZATION
        return Member(
            slug=raw.get("slug") or "",
            name=raw.get("name") or raw.get("slug") or "",
            type=member_type,
            image=raw.get("image"),
            website=raw.get("website"),
        )

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
