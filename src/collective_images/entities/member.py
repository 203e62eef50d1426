"""Member domain entities."""

from dataclasses import dataclass
from enum import Enum


class MemberType(str, Enum):
    """Collective type of a member as reported by the graph service."""

    USER = "USER"
    ORGANIZATION = "ORGANIZATION"


@dataclass(frozen=True)
class Member:
    """A single membership record.

    Attributes:
        slug: Profile slug of the member
        name: Display name
        type: USER for people, ORGANIZATION for everything else
        image: Remote image URL, local static path, or None
        website: Optional external website of the member
    """

    slug: str
    name: str
    type: MemberType = MemberType.ORGANIZATION
    image: str | None = None
    website: str | None = None

    @property
    def is_person(self) -> bool:
        return self.type == MemberType.USER

    @property
    def has_remote_image(self) -> bool:
        """True if the image is hosted remotely (not a local static path)."""
        return bool(self.image) and not self.image.startswith("/")


@dataclass(frozen=True)
class MembersStats:
    """Aggregate member count used for badges."""

    name: str
    count: int = 0


@dataclass(frozen=True)
class CollectiveImages:
    """Image metadata of a single collective."""

    name: str
    image: str | None = None
    background_image: str | None = None
