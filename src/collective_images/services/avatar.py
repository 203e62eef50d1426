"""Avatar sizing and image selection rules."""

import math
import re
from collections.abc import Sequence

from collective_images.entities import Member
from collective_images.utils import face_crop_query, get_cloudinary_url

# Cumulative height multipliers for premium tiers.
TIER_MULTIPLIERS = (
    ("silver", 1.25),
    ("gold", 1.5),
    ("diamond", 2.0),
)

SVG_DEFAULT_HEIGHT = 128
RASTER_DEFAULT_HEIGHT = 64
DEFAULT_SVG_WIDTH = 64

SPONSOR_PATTERN = re.compile(r"sponsor")
PLACEHOLDER_PATH = "/static/images/1px.png"


def is_sponsor_selector(selector: str) -> bool:
    return bool(SPONSOR_PATTERN.search(selector or ""))


def become_button_path(selector: str) -> str:
    """Static path of the "become a backer/sponsor" button for a selector."""
    kind = "sponsor" if is_sponsor_selector(selector) else "backer"
    return f"/static/images/become_{kind}.svg"


def avatar_size(
    selector: str,
    fmt: str,
    explicit_height: float | None = None,
) -> tuple[float, float | None]:
    """Compute the maximum avatar (height, width).

    An explicit height wins and leaves the width unset. Otherwise the
    format default is escalated for silver/gold/diamond selectors and
    the width allows for wide organization logos.
    """
    if explicit_height:
        return explicit_height, None

    height: float = SVG_DEFAULT_HEIGHT if fmt == "svg" else RASTER_DEFAULT_HEIGHT
    for keyword, multiplier in TIER_MULTIPLIERS:
        if keyword in (selector or ""):
            height *= multiplier
    return height, height * 3


def resolve_avatar_url(
    members: Sequence[Member],
    position: int,
    selector: str,
    max_height: float,
    max_width: float | None = None,
) -> str:
    """Pick the image URL for the member at ``position``.

    Returns a local static path (starting with ``/``) for placeholders
    and members without a remote image, a Cloudinary URL otherwise.
    """
    if position == len(members):
        return become_button_path(selector)
    if position > len(members):
        return PLACEHOLDER_PATH

    member = members[position]
    if not member.has_remote_image:
        kind = "user" if member.is_person else "organization"
        return f"/static/images/{kind}.svg"

    if member.is_person:
        return get_cloudinary_url(member.image, query=face_crop_query(max_height))
    return get_cloudinary_url(member.image, width=max_width, height=max_height)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like image tools expect."""
    return math.floor(value + 0.5)


def svg_render_size(max_height: float, selector: str, dimensions: tuple[int, int] | None) -> tuple[int, int]:
    """Size (width, height) of the inline SVG wrapping an avatar.

    Sponsors keep the aspect ratio of their logo; everyone else gets a
    fixed width.
    """
    height = round_half_up(max_height / 2)
    width = DEFAULT_SVG_WIDTH
    if is_sponsor_selector(selector) and dimensions is not None:
        image_width, image_height = dimensions
        width = round_half_up(image_width / image_height * height)
    return width, height
