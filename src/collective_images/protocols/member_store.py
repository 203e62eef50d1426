"""Member list cache protocol.

Implementations can include:
- In-process LRU cache with TTL (default)
- A shared store such as Redis, when several workers should share entries
"""

from typing import Protocol, runtime_checkable

from collective_images.entities import Member


@runtime_checkable
class MemberStore(Protocol):
    """Protocol for bounded member list caches."""

    def get(self, key: str) -> tuple[Member, ...] | None:
        """Return the cached list for a key, or None if absent or expired."""
        ...

    def set(self, key: str, members: tuple[Member, ...]) -> None:
        """Store a list, replacing any previous value for the key."""
        ...

    def clear(self) -> int:
        """Drop all entries.

        Returns:
            Number of entries removed
        """
        ...

    def __len__(self) -> int:
        ...

    def get_stats(self) -> dict:
        """Get cache statistics (implementation-specific)."""
        ...
