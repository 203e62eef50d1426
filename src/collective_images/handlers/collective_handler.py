"""HTTP handlers for collective images.

Each handler is a short pipeline: resolve data from the graph service,
fetch or synthesize an image, transform it, respond with cache headers.
Failures are logged with the handler name and raised as
``CollectiveImagesError`` subclasses, which the app turns into plain
text responses.
"""

import asyncio
import base64
import logging
from html import escape
from urllib.parse import quote, urlencode

from starlette.background import BackgroundTask
from starlette.responses import RedirectResponse, Response, StreamingResponse

from collective_images.config import settings
from collective_images.dto import (
    AvatarQuery,
    BadgeQuery,
    BannerQuery,
    CacheStatsResponse,
    HealthCheckResponse,
    LogoQuery,
    ResizeQuery,
)
from collective_images.entities import BannerOptions, CollectiveImages, MemberQuery, MembersStats
from collective_images.errors import (
    CollectiveImagesError,
    NotFoundError,
    TransformError,
    UpstreamFetchError,
)
from collective_images.protocols import GraphClient, ImageFetcher
from collective_images.services import BannerGenerator, MemberService
from collective_images.services.avatar import (
    avatar_size,
    become_button_path,
    is_sponsor_selector,
    resolve_avatar_url,
    svg_render_size,
)
from collective_images.services.image_tools import (
    image_dimensions,
    image_to_ascii,
    media_type_for,
    resize_image,
    svg_to_png,
)

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml;charset=utf-8"
ASCII_MEDIA_TYPE = "text/plain; charset=us-ascii"

# The CDN cache is purged on every deploy, so logos can be kept for 60 days.
LOGO_CACHE_CONTROL = f"public, max-age={60 * 24 * 60 * 60}"
BANNER_CACHE_CONTROL = "public, max-age=300"
BADGE_CACHE_CONTROL = "max-age=600"
ERROR_CACHE_CONTROL = "max-age=30"

UNLINKED_SELECTORS = {"contributors", "sponsors"}


class CollectiveHandler:
    """HTTP handlers for badges, logos, backgrounds, banners and avatars.

    Example:
        ```python
        handler = CollectiveHandler(
            graph_client=graph,
            member_service=MemberService(graph_client=graph, store=MemoryMemberCache.create()),
            fetcher=fetcher,
        )

        @app.get("/{collective_slug}/logo.{format}")
        async def logo(collective_slug: str, format: str, request: Request):
            return await handler.logo(collective_slug, format, LogoQuery.model_validate(dict(request.query_params)))
        ```
    """

    def __init__(
        self,
        graph_client: GraphClient,
        member_service: MemberService,
        fetcher: ImageFetcher,
        banner_generator: BannerGenerator | None = None,
        images_url: str | None = None,
        badge_service_url: str | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            graph_client: Graph backend for stats and collective images (required).
            member_service: Cached member lists (required).
            fetcher: Outbound image fetcher (required).
            banner_generator: Banner composer. Defaults to one using ``fetcher``.
            images_url: Base URL of static images. Defaults to settings.
            badge_service_url: Badge rendering service. Defaults to settings.
        """
        self._graph = graph_client
        self._members = member_service
        self._fetcher = fetcher
        self._images_url = images_url or settings.images_url
        self._banners = banner_generator or BannerGenerator(fetcher=fetcher, images_url=self._images_url)
        self._badge_service_url = badge_service_url or settings.badge_service_url

    # Badge

    async def badge(
        self,
        collective_slug: str,
        query: BadgeQuery,
        backer_type: str | None = None,
        tier_slug: str | None = None,
    ) -> Response:
        """Handle GET /{slug}/{backerType}/badge.svg and the tier variant."""
        member_query = MemberQuery(collective_slug=collective_slug, tier_slug=tier_slug, backer_type=backer_type)

        try:
            stats = await self._graph.fetch_members_stats(member_query)
        except Exception as e:
            logger.info("badge: No stats for %s/%s: %s", collective_slug, member_query.selector, e)
            raise NotFoundError() from e

        try:
            image_url = self.badge_url(stats, query)
        except Exception as e:
            logger.debug("badge: error %s", e)
            raise CollectiveImagesError(
                f"Unable to generate badge for {collective_slug}/{member_query.selector}"
            ) from e

        try:
            svg = await self._fetcher.fetch_text(image_url)
        except UpstreamFetchError as e:
            logger.error("badge: Error while fetching %s: %s", image_url, e)
            raise UpstreamFetchError(image_url, headers={"cache-control": ERROR_CACHE_CONTROL}) from e

        return Response(
            svg,
            media_type=SVG_MEDIA_TYPE,
            headers={"cache-control": BADGE_CACHE_CONTROL},
        )

    def badge_url(self, stats: MembersStats, query: BadgeQuery) -> str:
        """Badge service URL showing ``label-count`` in ``color``."""
        label = query.label or stats.name
        filename = f"{_badge_text(label)}-{stats.count or 0}-{_badge_text(query.color)}.svg"
        url = f"{self._badge_service_url}/badge/{filename}"
        if query.style:
            url += "?" + urlencode({"style": query.style})
        return url

    # Logo and background

    async def logo(self, collective_slug: str, fmt: str, query: LogoQuery) -> Response:
        """Handle GET /{slug}/logo.{format}.

        Errors carry no Cache-Control of their own; the route applies
        LOGO_CACHE_CONTROL to them.
        """
        collective = await self._fetch_collective(collective_slug, source="logo")
        if not collective.image:
            raise NotFoundError("Not found (No collective image)")

        if fmt == "txt":
            return await self._ascii_art(collective.image, query)
        return await self._resized(collective.image, fmt, query, source="logo")

    async def background(self, collective_slug: str, fmt: str, query: ResizeQuery) -> Response:
        """Handle GET /{slug}/background.{format}."""
        collective = await self._fetch_collective(collective_slug, source="background")
        if not collective.background_image:
            raise NotFoundError("Not found (No collective backgroundImage)")

        return await self._resized(collective.background_image, fmt, query, source="background")

    async def _fetch_collective(self, collective_slug: str, source: str) -> CollectiveImages:
        try:
            return await self._graph.fetch_collective_image(collective_slug)
        except Exception as e:
            logger.debug("%s: error fetching %s: %s", source, collective_slug, e)
            raise

    async def _ascii_art(self, src: str, query: LogoQuery) -> Response:
        options = query.to_ascii_options()
        try:
            image = await self._fetcher.fetch_bytes(src)
            art = await asyncio.to_thread(image_to_ascii, image.content, options)
        except Exception as e:
            logger.error("logo: Unable to create an ASCII art for %s: %s", src, e)
            raise TransformError(f"Unable to create an ASCII art for {src}") from e

        return Response(
            f"{art}\n",
            media_type=ASCII_MEDIA_TYPE,
            headers={"Cache-Control": LOGO_CACHE_CONTROL},
        )

    async def _resized(self, src: str, fmt: str, query: ResizeQuery, source: str) -> Response:
        width, height = query.size
        image = await self._fetcher.fetch_bytes(src)
        try:
            data = await asyncio.to_thread(resize_image, image.content, fmt, width, height)
        except TransformError as e:
            logger.error("%s: Unable to process %s: %s", source, src, e)
            raise TransformError(f"Unable to process {src}") from e

        return Response(
            data,
            media_type=media_type_for(fmt),
            headers={"Cache-Control": LOGO_CACHE_CONTROL},
        )

    # Banner

    async def banner(
        self,
        collective_slug: str,
        fmt: str,
        query: BannerQuery,
        backer_type: str | None = None,
        tier_slug: str | None = None,
    ) -> Response:
        """Handle GET /{slug}/{backerType}/banner.{format} and the tier variant."""
        member_query = MemberQuery(collective_slug=collective_slug, tier_slug=tier_slug, backer_type=backer_type)
        selector = member_query.selector

        try:
            members = await self._members.get_members(member_query)
        except Exception as e:
            logger.error("banner: Error while fetching members of %s/%s: %s", collective_slug, selector, e)
            raise NotFoundError() from e

        options = BannerOptions(
            collective_slug=collective_slug,
            style=query.style,
            limit=query.limit,
            button_image=f"{self._images_url}{become_button_path(selector)}" if query.button else None,
            width=query.width,
            height=query.height,
            avatar_height=query.avatar_height,
            margin=query.margin,
            link_to_profile=selector not in UNLINKED_SELECTORS,
        )

        try:
            svg = await self._banners.generate(members, options)
            if fmt == "png":
                content: str | bytes = await asyncio.to_thread(svg_to_png, svg)
                media_type = "image/png"
            else:
                content, media_type = svg, SVG_MEDIA_TYPE
        except Exception as e:
            logger.error("banner: Unable to generate banner for %s/%s: %s", collective_slug, selector, e)
            raise TransformError(
                f"Unable to generate banner for {collective_slug}/{selector}",
                headers={"cache-control": ERROR_CACHE_CONTROL},
            ) from e

        return Response(content, media_type=media_type, headers={"Cache-Control": BANNER_CACHE_CONTROL})

    # Avatar

    async def avatar(
        self,
        collective_slug: str,
        position: int,
        fmt: str,
        query: AvatarQuery,
        backer_type: str | None = None,
        tier_slug: str | None = None,
    ) -> Response:
        """Handle GET /{slug}/{backerType}/avatar/{position}.{format} and the tier variant."""
        member_query = MemberQuery(
            collective_slug=collective_slug,
            tier_slug=tier_slug,
            backer_type=backer_type,
            is_active=query.is_active,
        )
        selector = member_query.selector

        try:
            members = await self._members.get_members(member_query)
        except Exception as e:
            logger.info("avatar: Error while fetching members of %s/%s: %s", collective_slug, selector, e)
            raise NotFoundError() from e

        max_height, max_width = avatar_size(selector, fmt, query.avatar_height)
        image_url = resolve_avatar_url(members, position, selector, max_height, max_width)

        if image_url.startswith("/"):
            return RedirectResponse(f"{self._images_url}{image_url}", status_code=302)

        if fmt == "svg":
            return await self._svg_avatar(image_url, selector, max_height)
        return await self._proxied_avatar(image_url)

    async def _svg_avatar(self, image_url: str, selector: str, max_height: float) -> Response:
        image = await self._fetcher.fetch_bytes(image_url)

        dimensions = None
        if is_sponsor_selector(selector):
            try:
                dimensions = await asyncio.to_thread(image_dimensions, image.content)
            except TransformError as e:
                logger.error("avatar: Unable to get image dimensions for %s: %s", image_url, e)
                raise UpstreamFetchError(image_url) from e

        width, height = svg_render_size(max_height, selector, dimensions)
        data = base64.b64encode(image.content).decode("ascii")
        svg = (
            f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{width}" height="{height}">\n'
            f'  <image width="{width}" height="{height}" '
            f'xlink:href="data:{escape(image.content_type)};base64,{data}"/>\n'
            f"</svg>"
        )
        return Response(svg, media_type=SVG_MEDIA_TYPE, headers={"Cache-Control": BANNER_CACHE_CONTROL})

    async def _proxied_avatar(self, image_url: str) -> Response:
        try:
            stream = await self._fetcher.open_stream(image_url)
        except UpstreamFetchError:
            logger.error("avatar: Error proxying %s", image_url)
            raise

        return StreamingResponse(
            stream.chunks,
            media_type=stream.content_type,
            headers={"Cache-Control": BANNER_CACHE_CONTROL},
            background=BackgroundTask(stream.close),
        )

    # Health

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        stats = self._members.store.get_stats()
        return HealthCheckResponse(
            status="healthy",
            cache=CacheStatsResponse(
                total_entries=stats.get("total_entries", 0),
                max_entries=stats.get("max_entries", 1),
                ttl_seconds=stats.get("ttl", 0),
                hits=stats.get("hits", 0),
                misses=stats.get("misses", 0),
            ),
        )


def _badge_text(text: str) -> str:
    """Escape a badge segment: dashes and underscores are separators there."""
    return quote(text.replace("-", "--").replace("_", "__"), safe="")
