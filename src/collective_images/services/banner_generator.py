"""SVG banner composition.

A banner is a row-wrapped strip of member avatars, each embedded as a
base64 data URI so the SVG renders anywhere (and can be rasterized)
without further requests.
"""

import asyncio
import base64
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from html import escape

from collective_images.config import settings
from collective_images.entities import BannerOptions, FetchedImage, Member
from collective_images.errors import TransformError
from collective_images.protocols import ImageFetcher
from collective_images.services.image_tools import image_dimensions
from collective_images.utils import face_crop_query, get_cloudinary_url

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_HEIGHT = 64
DEFAULT_MARGIN = 5
BUTTON_ASPECT_RATIO = 3


@dataclass(frozen=True)
class _Tile:
    image: FetchedImage
    width: int
    link: str | None = None
    title: str = ""


class BannerGenerator:
    """Compose members' avatars into a single SVG document.

    Example:
        ```python
        generator = BannerGenerator(fetcher=HttpImageFetcher.create())
        svg = await generator.generate(members, BannerOptions(collective_slug="webpack"))
        ```
    """

    def __init__(
        self,
        fetcher: ImageFetcher,
        images_url: str | None = None,
        website_url: str | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            fetcher: Used to download every avatar and the button (required).
            images_url: Base URL of static placeholder images. Defaults to settings.
            website_url: Base URL of profile links. Defaults to settings.
        """
        self._fetcher = fetcher
        self._images_url = images_url or settings.images_url
        self._website_url = website_url or settings.website_url

    async def generate(self, members: Sequence[Member], options: BannerOptions) -> str:
        """Build the banner SVG.

        Avatars that fail to download are left out. A missing button is
        left out too; the banner is still produced.

        Raises:
            TransformError: If the document cannot be composed
        """
        avatar_height = int(options.avatar_height or DEFAULT_AVATAR_HEIGHT)
        margin = DEFAULT_MARGIN if options.margin is None else int(options.margin)
        if avatar_height <= 0 or margin < 0:
            raise TransformError(f"Invalid banner dimensions: avatarHeight={avatar_height} margin={margin}")

        selected = list(members[: options.limit] if options.limit else members)
        fetched = await asyncio.gather(
            *[self._fetch_avatar(member, avatar_height, options.style) for member in selected],
            return_exceptions=True,
        )

        avatars: list[tuple[Member, FetchedImage]] = []
        for member, result in zip(selected, fetched):
            if isinstance(result, BaseException):
                logger.warning("banner: Skipping avatar of %s: %s", member.slug, result)
                continue
            avatars.append((member, result))

        widths = await asyncio.gather(
            *[self._tile_width(member, image, avatar_height) for member, image in avatars]
        )

        tiles: list[_Tile] = []
        for (member, image), width in zip(avatars, widths):
            link = f"{self._website_url}/{member.slug}" if options.link_to_profile and member.slug else None
            tiles.append(_Tile(image=image, width=width, link=link, title=member.name))

        if options.button_image:
            try:
                button = await self._fetcher.fetch_bytes(options.button_image)
            except Exception as e:
                logger.warning("banner: Skipping button %s: %s", options.button_image, e)
            else:
                tiles.append(
                    _Tile(
                        image=button,
                        width=avatar_height * BUTTON_ASPECT_RATIO,
                        link=f"{self._website_url}/{options.collective_slug}",
                    )
                )

        return self._compose(tiles, avatar_height, margin, options.width, options.height)

    async def _fetch_avatar(self, member: Member, avatar_height: int, style: str) -> FetchedImage:
        if not member.has_remote_image:
            kind = "user" if member.is_person else "organization"
            return await self._fetcher.fetch_bytes(f"{self._images_url}/static/images/{kind}.svg")

        if member.is_person and style == "rounded":
            url = get_cloudinary_url(member.image, query=face_crop_query(avatar_height))
        elif member.is_person:
            url = get_cloudinary_url(member.image, width=avatar_height, height=avatar_height)
        else:
            url = get_cloudinary_url(member.image, height=avatar_height)
        return await self._fetcher.fetch_bytes(url)

    @staticmethod
    async def _tile_width(member: Member, image: FetchedImage, avatar_height: int) -> int:
        """Width of an avatar tile: square for people, logo aspect ratio for organizations."""
        if member.is_person:
            return avatar_height
        try:
            width, height = await asyncio.to_thread(image_dimensions, image.content)
        except TransformError:
            # Vector placeholders cannot be measured; draw them square.
            return avatar_height
        return max(1, round(width / height * avatar_height))

    @staticmethod
    def _compose(
        tiles: list[_Tile],
        avatar_height: int,
        margin: int,
        width: int,
        height: int,
    ) -> str:
        x, y = margin, margin
        content_width = 0
        elements = []
        for tile in tiles:
            if width and x > margin and x + tile.width + margin > width:
                x = margin
                y += avatar_height + margin

            data = base64.b64encode(tile.image.content).decode("ascii")
            image = (
                f'<image x="{x}" y="{y}" width="{tile.width}" height="{avatar_height}" '
                f'xlink:href="data:{escape(tile.image.content_type)};base64,{data}"/>'
            )
            if tile.link:
                image = (
                    f'<a xlink:href="{escape(tile.link)}" target="_blank" '
                    f'title="{escape(tile.title)}">{image}</a>'
                )
            elements.append(image)

            x += tile.width + margin
            content_width = max(content_width, x)

        total_width = width or max(content_width, margin * 2)
        total_height = height or (y + avatar_height + margin if tiles else margin * 2)
        body = "\n  ".join(elements)
        return (
            '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{total_width}" height="{total_height}">\n  {body}\n</svg>'
        )
