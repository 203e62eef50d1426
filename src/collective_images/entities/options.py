"""Rendering options passed from handlers to the image services."""

from dataclasses import dataclass

# Upper bounds on requested sizes. Larger requests are clamped, since every
# pixel asked for is allocated by Pillow or Cairo.
MAX_IMAGE_DIMENSION = 2000
MAX_AVATAR_HEIGHT = 512
MAX_BANNER_MARGIN = 100
MAX_ASCII_ROWS = 200
MAX_ASCII_COLUMNS = 400


@dataclass(frozen=True)
class AsciiOptions:
    """How to render an image as ASCII art.

    Attributes:
        bg: Color the character background with the pixel color
        fg: Color the character itself with the pixel color
        white_bg: Flatten transparency onto white (black otherwise)
        colored: Emit ANSI color escapes at all
        height: Number of text rows
        width: Number of pixel columns; derived from the aspect ratio if None
        variant: "wide" renders two characters per pixel, "narrow" one
        trim: Strip trailing whitespace and blank border lines
        reverse: Invert the brightness ramp
    """

    bg: bool = False
    fg: bool = False
    white_bg: bool = True
    colored: bool = True
    height: int = 20
    width: int | None = None
    variant: str = "wide"
    trim: bool = True
    reverse: bool = False


@dataclass(frozen=True)
class BannerOptions:
    """How to compose a members banner."""

    collective_slug: str
    style: str = "rounded"
    limit: int | None = None
    button_image: str | None = None
    width: int = 0
    height: int = 0
    avatar_height: int | None = None
    margin: int | None = None
    link_to_profile: bool = True
