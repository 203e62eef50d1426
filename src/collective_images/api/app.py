import logging
import sys
from enum import Enum
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Path, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from collective_images.api.dependencies import HandlerDep, cache_control, lifespan
from collective_images.config import settings
from collective_images.dto import (
    AvatarQuery,
    BadgeQuery,
    BannerQuery,
    HealthCheckResponse,
    LogoQuery,
    ResizeQuery,
)
from collective_images.errors import register_error_handlers
from collective_images.handlers.collective_handler import LOGO_CACHE_CONTROL


def configure_logging() -> None:
    """JSON lines in production, human-readable output locally."""
    if settings.is_production:
        logging.basicConfig(
            level=settings.log_level,
            format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
            stream=sys.stdout,
        )
    else:
        logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


configure_logging()


class LogoFormat(str, Enum):
    txt = "txt"
    png = "png"
    jpg = "jpg"
    jpeg = "jpeg"
    gif = "gif"
    webp = "webp"


class BackgroundFormat(str, Enum):
    png = "png"
    jpg = "jpg"
    jpeg = "jpeg"


class BannerFormat(str, Enum):
    svg = "svg"
    png = "png"


class AvatarFormat(str, Enum):
    svg = "svg"
    png = "png"
    jpg = "jpg"


Position = Annotated[int, Path(ge=0, description="Zero-based rank of the member")]

# Logo and background responses are cached for 60 days, errors included.
LOGO_DEPENDENCIES = [Depends(cache_control(LOGO_CACHE_CONTROL))]


def _query_params(request: Request) -> dict[str, str]:
    return dict(request.query_params)


app = FastAPI(
    title="Collective Images API",
    description="Badges, logos, banners and avatars for collectives",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Collective Images API",
        "version": "0.1.0",
        "description": "Badges, logos, banners and avatars for collectives",
        "endpoints": {
            "badge": "/{collectiveSlug}/{backerType}/badge.svg",
            "logo": "/{collectiveSlug}/logo.{format}",
            "background": "/{collectiveSlug}/background.{format}",
            "banner": "/{collectiveSlug}/{backerType}/banner.{format}",
            "avatar": "/{collectiveSlug}/{backerType}/avatar/{position}.{format}",
            "health": "/health",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint with member cache statistics."""
    return await handler.health_check()


@app.get("/{collective_slug}/logo.{image_format}", dependencies=LOGO_DEPENDENCIES)
async def logo(
    collective_slug: str,
    image_format: LogoFormat,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Collective logo, resized, or rendered as ASCII art for ``txt``."""
    query = LogoQuery.model_validate(_query_params(request))
    return await handler.logo(collective_slug, image_format.value, query)


@app.get("/{collective_slug}/background.{image_format}", dependencies=LOGO_DEPENDENCIES)
async def background(
    collective_slug: str,
    image_format: BackgroundFormat,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Collective background image, resized."""
    query = ResizeQuery.model_validate(_query_params(request))
    return await handler.background(collective_slug, image_format.value, query)


@app.get("/{collective_slug}/tiers/{tier_slug}/badge.svg")
async def tier_badge(
    collective_slug: str,
    tier_slug: str,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Badge with the number of members of a tier."""
    query = BadgeQuery.model_validate(_query_params(request))
    return await handler.badge(collective_slug, query, tier_slug=tier_slug)


@app.get("/{collective_slug}/{backer_type}/badge.svg")
async def badge(
    collective_slug: str,
    backer_type: str,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Badge with the number of backers, sponsors or contributors."""
    query = BadgeQuery.model_validate(_query_params(request))
    return await handler.badge(collective_slug, query, backer_type=backer_type)


@app.get("/{collective_slug}/tiers/{tier_slug}/banner.{image_format}")
async def tier_banner(
    collective_slug: str,
    tier_slug: str,
    image_format: BannerFormat,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Banner of the members of a tier."""
    query = BannerQuery.model_validate(_query_params(request))
    return await handler.banner(collective_slug, image_format.value, query, tier_slug=tier_slug)


@app.get("/{collective_slug}/{backer_type}/banner.{image_format}")
async def banner(
    collective_slug: str,
    backer_type: str,
    image_format: BannerFormat,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Banner of backers, sponsors or contributors."""
    query = BannerQuery.model_validate(_query_params(request))
    return await handler.banner(collective_slug, image_format.value, query, backer_type=backer_type)


@app.get("/{collective_slug}/tiers/{tier_slug}/avatar/{position}.{image_format}")
async def tier_avatar(
    collective_slug: str,
    tier_slug: str,
    position: Position,
    image_format: AvatarFormat,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Avatar of the member of a tier at a given rank."""
    query = AvatarQuery.model_validate(_query_params(request))
    return await handler.avatar(collective_slug, position, image_format.value, query, tier_slug=tier_slug)


@app.get("/{collective_slug}/{backer_type}/avatar/{position}.{image_format}")
async def avatar(
    collective_slug: str,
    backer_type: str,
    position: Position,
    image_format: AvatarFormat,
    request: Request,
    handler: HandlerDep,
) -> Response:
    """Avatar of the backer, sponsor or contributor at a given rank."""
    query = AvatarQuery.model_validate(_query_params(request))
    return await handler.avatar(collective_slug, position, image_format.value, query, backer_type=backer_type)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "collective_images.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
