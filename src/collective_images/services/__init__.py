"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .banner_generator import BannerGenerator
from .member_service import MemberService

__all__ = [
    "BannerGenerator",
    "MemberService",
]
