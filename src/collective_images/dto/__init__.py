"""Data Transfer Objects for API contracts.

These Pydantic models parse query strings and shape JSON responses.
Internal logic uses entities from the entities package.
"""

from .requests import AvatarQuery, BadgeQuery, BannerQuery, LogoQuery, ResizeQuery
from .responses import CacheStatsResponse, HealthCheckResponse

__all__ = [
    "AvatarQuery",
    "BadgeQuery",
    "BannerQuery",
    "LogoQuery",
    "ResizeQuery",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
