"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services,
repositories and handlers. They are NOT used for API contracts - query
parameters are parsed by the models in the dto package.
"""

from .image import FetchedImage, ImageStream
from .member import CollectiveImages, Member, MembersStats, MemberType
from .member_query import MemberQuery
from .options import AsciiOptions, BannerOptions

__all__ = [
    "AsciiOptions",
    "BannerOptions",
    "CollectiveImages",
    "FetchedImage",
    "ImageStream",
    "Member",
    "MemberQuery",
    "MembersStats",
    "MemberType",
]
