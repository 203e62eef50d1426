"""
Tests for the collective images API.
"""

import base64
from io import BytesIO

from PIL import Image

from collective_images.entities import CollectiveImages
from collective_images.errors import GraphQLError
from collective_images.services.image_tools import ASCII_RAMP
from collective_images.utils import face_crop_query, get_cloudinary_url

from .conftest import IMAGES_URL, make_png

BADGE_URL = "https://badges.test/badge/backers-42-brightgreen.svg"
LOGO_CACHE = "public, max-age=5184000"

ALICE_SVG_URL = get_cloudinary_url("https://cdn.test/alice.png", query=face_crop_query(128))


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Collective Images API"


def test_health(client, member_cache):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"]["max_entries"] == 50


# Badge


def test_badge(client, fetcher):
    fetcher.texts[BADGE_URL] = "<svg>42</svg>"

    response = client.get("/webpack/backers/badge.svg")

    assert response.status_code == 200
    assert response.text == "<svg>42</svg>"
    assert response.headers["content-type"] == "image/svg+xml;charset=utf-8"
    assert response.headers["cache-control"] == "max-age=600"


def test_badge_label_color_and_style(client, fetcher):
    url = "https://badges.test/badge/my--label-42-blue.svg?style=flat"
    fetcher.texts[url] = "<svg/>"

    response = client.get("/webpack/backers/badge.svg?label=my-label&color=blue&style=flat")

    assert response.status_code == 200
    assert fetcher.requested == [url]


def test_badge_unknown_collective(client):
    response = client.get("/unknown/backers/badge.svg")

    assert response.status_code == 404
    assert response.text == "Not found"


def test_badge_fetch_failure(client):
    response = client.get("/webpack/tiers/gold/badge.svg")

    assert response.status_code == 500
    assert response.text == f"Unable to fetch {BADGE_URL}"
    assert response.headers["cache-control"] == "max-age=30"


# Logo and background


def test_logo_resized(client):
    response = client.get("/webpack/logo.png?width=40")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == LOGO_CACHE
    assert Image.open(BytesIO(response.content)).size == (40, 20)


def test_logo_converted_to_jpeg(client):
    response = client.get("/webpack/logo.jpg")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert Image.open(BytesIO(response.content)).format == "JPEG"


def test_logo_missing_image(client, graph):
    graph.collectives["empty"] = CollectiveImages(name="empty")

    response = client.get("/empty/logo.png")

    assert response.status_code == 404
    assert response.text == "Not found (No collective image)"
    assert response.headers["cache-control"] == LOGO_CACHE


def test_logo_unknown_collective(client):
    response = client.get("/unknown/logo.png")

    assert response.status_code == 404
    assert response.text == "Not found"
    assert response.headers["cache-control"] == LOGO_CACHE


def test_logo_lookup_error_goes_to_generic_handler(client, graph):
    graph.collective_error = GraphQLError(["database down"])

    response = client.get("/webpack/logo.png")

    assert response.status_code == 500
    assert response.text == "Internal server error"
    assert response.headers["cache-control"] == LOGO_CACHE


def test_background_lookup_error_keeps_cache_header(client, graph):
    graph.collective_error = RuntimeError("database down")

    response = client.get("/webpack/background.png")

    assert response.status_code == 500
    assert response.headers["cache-control"] == LOGO_CACHE


def test_logo_ascii(client):
    response = client.get("/webpack/logo.txt?colored=false")

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/plain; charset=us-ascii"
    assert response.text.endswith("\n")
    lines = response.text.rstrip("\n").split("\n")
    assert len(lines) == 20
    assert all(len(line) == 80 for line in lines)
    assert set("".join(lines)) <= set(ASCII_RAMP)


def test_logo_ascii_colored_by_default(client):
    response = client.get("/webpack/logo.txt")

    assert response.status_code == 200
    assert "\x1b[38;2;" in response.text


def test_logo_ascii_rejects_unknown_flag_value(client):
    response = client.get("/webpack/logo.txt?bg=yes")

    assert response.status_code == 422
    assert response.text.startswith("Invalid query: ")
    assert response.headers["cache-control"] == LOGO_CACHE


def test_logo_ascii_failure(client, fetcher):
    fetcher.add_image("https://cdn.test/webpack.png", b"not an image")

    response = client.get("/webpack/logo.txt")

    assert response.status_code == 500
    assert response.text == "Unable to create an ASCII art for https://cdn.test/webpack.png"
    assert response.headers["cache-control"] == LOGO_CACHE


def test_background(client):
    response = client.get("/webpack/background.png?height=50")

    assert response.status_code == 200
    assert response.headers["cache-control"] == LOGO_CACHE
    assert Image.open(BytesIO(response.content)).size == (100, 50)


def test_logo_requested_size_is_clamped(client):
    response = client.get("/webpack/logo.png?width=60000&height=60000")

    assert response.status_code == 200
    assert Image.open(BytesIO(response.content)).size == (2000, 1000)


def test_background_missing(client, graph):
    graph.collectives["plain"] = CollectiveImages(name="plain", image="x")

    response = client.get("/plain/background.png")

    assert response.status_code == 404
    assert response.text == "Not found (No collective backgroundImage)"
    assert response.headers["cache-control"] == LOGO_CACHE


# Banner


def _register_banner_images(fetcher):
    fetcher.add_image(get_cloudinary_url("https://cdn.test/alice.png", query=face_crop_query(64)), make_png(64, 64))
    fetcher.add_image(get_cloudinary_url("https://cdn.test/acme.png", height=64), make_png(128, 64))
    fetcher.add_image(f"{IMAGES_URL}/static/images/become_backer.svg", b"<svg/>", "image/svg+xml")
    fetcher.add_image(f"{IMAGES_URL}/static/images/become_sponsor.svg", b"<svg/>", "image/svg+xml")


def test_banner_svg(client, fetcher):
    _register_banner_images(fetcher)

    response = client.get("/webpack/backers/banner.svg")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/svg+xml;charset=utf-8"
    assert response.headers["cache-control"] == "public, max-age=300"
    svg = response.text
    assert svg.startswith("<svg")
    assert '/alice"' in svg
    assert '/acme"' in svg
    assert '/webpack"' in svg
    # Bob's placeholder is not registered, so he is skipped
    assert '/bob"' not in svg
    assert f"{IMAGES_URL}/static/images/become_backer.svg" in fetcher.requested


def test_banner_sponsors_are_not_linked(client, fetcher):
    _register_banner_images(fetcher)

    response = client.get("/webpack/sponsors/banner.svg?button=false")

    assert response.status_code == 200
    assert '/alice"' not in response.text
    assert '/webpack"' not in response.text
    assert f"{IMAGES_URL}/static/images/become_sponsor.svg" not in fetcher.requested


def test_banner_limit(client, fetcher):
    _register_banner_images(fetcher)

    response = client.get("/webpack/backers/banner.svg?limit=1&button=false")

    assert response.status_code == 200
    assert response.text.count("<image") == 1


def test_banner_square_style_scales_people(client, fetcher):
    _register_banner_images(fetcher)
    square_url = get_cloudinary_url("https://cdn.test/alice.png", width=64, height=64)
    fetcher.add_image(square_url, make_png(64, 64))

    response = client.get("/webpack/backers/banner.svg?style=square&button=false")

    assert response.status_code == 200
    assert square_url in fetcher.requested
    assert get_cloudinary_url("https://cdn.test/alice.png", query=face_crop_query(64)) not in fetcher.requested
    assert '/alice"' in response.text


def test_banner_png(client, fetcher, monkeypatch):
    _register_banner_images(fetcher)
    monkeypatch.setattr(
        "collective_images.handlers.collective_handler.svg_to_png",
        lambda svg: b"\x89PNG rendered",
    )

    response = client.get("/webpack/tiers/gold/banner.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == b"\x89PNG rendered"


def test_banner_unknown_collective(client):
    response = client.get("/unknown/backers/banner.svg")

    assert response.status_code == 404
    assert response.text == "Not found"


def test_banner_generation_failure(client, handler, monkeypatch):
    async def broken(members, options):
        raise RuntimeError("layout failed")

    monkeypatch.setattr(handler._banners, "generate", broken)

    response = client.get("/webpack/backers/banner.svg")

    assert response.status_code == 500
    assert response.text == "Unable to generate banner for webpack/backers"
    assert response.headers["cache-control"] == "max-age=30"


def test_banner_members_are_cached(client, fetcher, graph):
    _register_banner_images(fetcher)

    client.get("/webpack/backers/banner.svg")
    client.get("/webpack/backers/banner.svg")

    assert graph.member_calls == 1


# Avatar


def test_avatar_svg_embeds_source_bytes(client, fetcher):
    source = make_png(30, 30, (10, 200, 10, 255))
    fetcher.add_image(ALICE_SVG_URL, source)

    response = client.get("/webpack/backers/avatar/0.svg")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/svg+xml;charset=utf-8"
    assert response.headers["cache-control"] == "public, max-age=300"
    assert 'width="64" height="64"' in response.text
    href = response.text.split('xlink:href="')[1].split('"')[0]
    assert href.startswith("data:image/png;base64,")
    assert base64.b64decode(href.split(",", 1)[1]) == source


def test_avatar_svg_gold_tier_is_larger(client, fetcher):
    fetcher.add_image(get_cloudinary_url("https://cdn.test/alice.png", query=face_crop_query(192)), make_png())

    response = client.get("/webpack/tiers/gold/avatar/0.svg")

    assert response.status_code == 200
    assert 'width="64" height="96"' in response.text


def test_avatar_svg_sponsor_keeps_aspect_ratio(client, fetcher):
    fetcher.add_image(get_cloudinary_url("https://cdn.test/acme.png", width=384, height=128), make_png(80, 40))

    response = client.get("/webpack/sponsors/avatar/1.svg")

    assert response.status_code == 200
    assert 'width="128" height="64"' in response.text


def test_avatar_svg_sponsor_with_unreadable_image(client, fetcher):
    url = get_cloudinary_url("https://cdn.test/acme.png", width=384, height=128)
    fetcher.add_image(url, b"garbage")

    response = client.get("/webpack/sponsors/avatar/1.svg")

    assert response.status_code == 500
    assert response.text == f"Unable to fetch {url}"


def test_avatar_svg_fetch_failure(client):
    response = client.get("/webpack/backers/avatar/0.svg")

    assert response.status_code == 500
    assert response.text == f"Unable to fetch {ALICE_SVG_URL}"


def test_avatar_button_and_placeholder_redirects(client):
    response = client.get("/webpack/sponsors/avatar/3.svg")
    assert response.status_code == 302
    assert response.headers["location"] == f"{IMAGES_URL}/static/images/become_sponsor.svg"

    response = client.get("/webpack/backers/avatar/3.png")
    assert response.headers["location"] == f"{IMAGES_URL}/static/images/become_backer.svg"

    response = client.get("/webpack/backers/avatar/7.svg")
    assert response.headers["location"] == f"{IMAGES_URL}/static/images/1px.png"


def test_avatar_without_image_redirects_to_default(client):
    response = client.get("/webpack/backers/avatar/2.svg")

    assert response.status_code == 302
    assert response.headers["location"] == f"{IMAGES_URL}/static/images/user.svg"


def test_avatar_png_is_proxied_with_cache_header(client, fetcher):
    source = make_png(64, 64)
    fetcher.add_image(get_cloudinary_url("https://cdn.test/alice.png", query=face_crop_query(64)), source)

    response = client.get("/webpack/backers/avatar/0.png")

    assert response.status_code == 200
    assert response.content == source
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "public, max-age=300"


def test_avatar_explicit_height(client, fetcher):
    fetcher.add_image(get_cloudinary_url("https://cdn.test/alice.png", query=face_crop_query(25)), make_png())

    response = client.get("/webpack/gold/avatar/0.svg?avatarHeight=25")

    assert response.status_code == 200
    assert 'height="13"' in response.text


def test_avatar_unknown_collective(client):
    response = client.get("/unknown/backers/avatar/0.svg")

    assert response.status_code == 404
    assert response.text == "Not found"


def test_avatar_is_active_changes_cache_key(client, graph, member_cache):
    client.get("/webpack/backers/avatar/5.svg")
    client.get("/webpack/backers/avatar/5.svg?isActive=false")
    client.get("/webpack/backers/avatar/6.svg")

    assert graph.member_calls == 2
    assert "backerType=backers&collectiveSlug=webpack&isActive=false" in member_cache
