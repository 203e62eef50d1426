"""Member list query entity."""

from dataclasses import dataclass

from collective_images.utils.query_string import stringify_params


@dataclass(frozen=True)
class MemberQuery:
    """Parameters selecting an ordered list of members.

    Attributes:
        collective_slug: Slug of the collective
        tier_slug: Tier slug, when the list is scoped to a tier
        backer_type: backers, sponsors, contributors, users, organizations
        is_active: Only active members when True; None means unfiltered
    """

    collective_slug: str
    tier_slug: str | None = None
    backer_type: str | None = None
    is_active: bool | None = None

    @property
    def selector(self) -> str:
        """The tier slug when present, else the backer type."""
        return self.tier_slug or self.backer_type or ""

    def cache_key(self) -> str:
        """Serialize the query into a stable cache key.

        None values are left out, so an unfiltered banner query and an
        avatar query with is_active=True never share an entry.
        """
        return stringify_params(
            {
                "collectiveSlug": self.collective_slug,
                "tierSlug": self.tier_slug,
                "backerType": self.backer_type,
                "isActive": self.is_active,
            }
        )
