"""Query-string DTOs for the image endpoints.

Numeric options are lenient: anything that does not parse to a positive
number is treated as absent, which is how image URLs pasted in READMEs
have always behaved. Sizes above the bounds in ``entities.options`` are
clamped to them. Boolean flags are strict: only the literal strings
``true`` and ``false`` are accepted, every flag has a documented default.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from collective_images.entities import AsciiOptions
from collective_images.entities.options import (
    MAX_ASCII_COLUMNS,
    MAX_ASCII_ROWS,
    MAX_AVATAR_HEIGHT,
    MAX_BANNER_MARGIN,
    MAX_IMAGE_DIMENSION,
)

FLAG_VALUES = {"true": True, "false": False}


def parse_flag(value: Any) -> Any:
    """Map "true"/"false" to booleans; reject any other string."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, str) and value in FLAG_VALUES:
        return FLAG_VALUES[value]
    raise ValueError(f"expected 'true' or 'false', got {value!r}")


def parse_positive_number(value: Any, maximum: float | None = None) -> float | None:
    """Return a positive finite number, at most ``maximum``, or None for anything else."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return None
    if maximum is not None:
        return min(number, maximum)
    return number


class QueryModel(BaseModel):
    """Base for query-string models: aliases match the public parameter names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BadgeQuery(QueryModel):
    """Query for badge.svg."""

    style: str | None = Field(None, description="Badge style forwarded to the badge service")
    label: str | None = Field(None, description="Left-hand text; defaults to the member type")
    color: str = Field("brightgreen", description="Right-hand color")

    @field_validator("color", mode="before")
    @classmethod
    def _default_color(cls, value: Any) -> Any:
        return value or "brightgreen"


class ResizeQuery(QueryModel):
    """Query for logo and background images."""

    width: float | None = Field(None, description="Maximum width in pixels")
    height: float | None = Field(None, description="Maximum height in pixels")

    @field_validator("width", "height", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> float | None:
        return parse_positive_number(value, MAX_IMAGE_DIMENSION)

    @property
    def size(self) -> tuple[int | None, int | None]:
        """(width, height) as whole pixels."""
        width = round(self.width) if self.width else None
        height = round(self.height) if self.height else None
        return width, height


class LogoQuery(ResizeQuery):
    """Query for logo.{format}; the flags only matter for ``txt``."""

    bg: bool = Field(False, description="Color character backgrounds")
    fg: bool = Field(False, description="Color characters")
    white_bg: bool = Field(True, description="Flatten transparency onto white")
    colored: bool = Field(True, description="Emit ANSI colors")
    variant: str = Field("wide", description="'wide' (two characters per pixel) or 'narrow'")
    trim: bool = Field(True, description="Strip blank borders")
    reverse: bool = Field(False, description="Invert brightness")

    @field_validator("bg", "fg", "white_bg", "colored", "trim", "reverse", mode="before")
    @classmethod
    def _strict_flag(cls, value: Any) -> Any:
        return parse_flag(value)

    @field_validator("variant", mode="before")
    @classmethod
    def _default_variant(cls, value: Any) -> Any:
        return value or "wide"

    def to_ascii_options(self) -> AsciiOptions:
        width, height = self.size
        return AsciiOptions(
            bg=self.bg,
            fg=self.fg,
            white_bg=self.white_bg,
            colored=self.colored,
            height=min(height or 20, MAX_ASCII_ROWS),
            width=min(width, MAX_ASCII_COLUMNS) if width else None,
            variant=self.variant,
            trim=self.trim,
            reverse=self.reverse,
        )


class BannerQuery(QueryModel):
    """Query for banner.{format}."""

    style: str = Field("rounded", description="'rounded' or 'square' avatars")
    limit: int | None = Field(None, description="Maximum number of members; unlimited by default")
    width: int = Field(0, description="Banner width; 0 sizes to content")
    height: int = Field(0, description="Banner height; 0 sizes to content")
    avatar_height: int | None = Field(None, alias="avatarHeight", description="Height of each avatar")
    margin: int | None = Field(None, description="Space around each avatar")
    button: bool = Field(True, description="Append the become a backer/sponsor button")

    @field_validator("style", mode="before")
    @classmethod
    def _default_style(cls, value: Any) -> Any:
        return value or "rounded"

    @field_validator("limit", mode="before")
    @classmethod
    def _optional_int(cls, value: Any) -> int | None:
        number = parse_positive_number(value)
        return int(number) if number else None

    @field_validator("avatar_height", mode="before")
    @classmethod
    def _avatar_height(cls, value: Any) -> int | None:
        number = parse_positive_number(value, MAX_AVATAR_HEIGHT)
        return int(number) if number else None

    @field_validator("width", "height", mode="before")
    @classmethod
    def _int_or_zero(cls, value: Any) -> int:
        number = parse_positive_number(value, MAX_IMAGE_DIMENSION)
        return int(number) if number else 0

    @field_validator("margin", mode="before")
    @classmethod
    def _margin(cls, value: Any) -> int | None:
        if value == "0" or value == 0:
            return 0
        number = parse_positive_number(value, MAX_BANNER_MARGIN)
        return int(number) if number else None

    @field_validator("button", mode="before")
    @classmethod
    def _strict_flag(cls, value: Any) -> Any:
        return parse_flag(value)


class AvatarQuery(QueryModel):
    """Query for avatar/{position}.{format}."""

    is_active: bool = Field(True, alias="isActive", description="Only active members")
    avatar_height: float | None = Field(None, alias="avatarHeight", description="Explicit avatar height")

    @field_validator("is_active", mode="before")
    @classmethod
    def _strict_flag(cls, value: Any) -> Any:
        return parse_flag(value)

    @field_validator("avatar_height", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> float | None:
        return parse_positive_number(value, MAX_AVATAR_HEIGHT)
