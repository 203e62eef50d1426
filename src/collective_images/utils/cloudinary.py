"""Cloudinary fetch URL templating."""

import re
from urllib.parse import quote

from collective_images.config import settings

DEFAULT_SIZE = "w_640,"


def get_cloudinary_url(
    src: str,
    width: int | float | None = None,
    height: int | float | None = None,
    query: str | None = None,
    base_url: str | None = None,
) -> str:
    """Build a Cloudinary "fetch" URL that transforms a remote image.

    Args:
        src: The remote image URL
        width: Target width in pixels
        height: Target height in pixels
        query: A full transformation segment (``/c_thumb,.../``) used
            instead of the width/height scaling
        base_url: Cloudinary fetch endpoint. Defaults to settings.

    Returns:
        The transformed image URL
    """
    base_url = base_url or settings.cloudinary_base_url

    if query is None:
        size = ""
        if width:
            size += f"w_{format_dimension(width)},"
        if height:
            size += f"h_{format_dimension(height)},"
        image_format = "png" if re.search(r"\.png$", src, re.IGNORECASE) else "jpg"
        query = f"/{size or DEFAULT_SIZE}c_pad,f_{image_format}/"

    return f"{base_url}{query}{quote(src, safe='')}"


def face_crop_query(height: int | float) -> str:
    """Transformation for a round, face-centered avatar with a green ring."""
    h = format_dimension(height)
    return (
        f"/c_thumb,g_face,h_{h},r_max,w_{h},bo_3px_solid_white"
        f"/c_thumb,h_{h},r_max,w_{h},bo_2px_solid_rgb:66C71A/e_trim/f_auto/"
    )


def format_dimension(value: int | float) -> str:
    """Render 160.0 as "160" and 12.5 as "12.5"."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
