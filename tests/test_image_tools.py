"""
Tests for the Pillow helpers.
"""

from io import BytesIO

import pytest
from PIL import Image

from collective_images.entities import AsciiOptions
from collective_images.entities.options import MAX_ASCII_COLUMNS, MAX_IMAGE_DIMENSION
from collective_images.errors import TransformError
from collective_images.services.image_tools import fit_size, image_dimensions, image_to_ascii, resize_image

from .conftest import make_png


def test_fit_size_keeps_aspect_ratio():
    assert fit_size((80, 40), width=40) == (40, 20)
    assert fit_size((80, 40), height=10) == (20, 10)
    assert fit_size((80, 40), width=40, height=40) == (40, 20)
    assert fit_size((80, 40)) == (80, 40)


def test_fit_size_respects_limit():
    assert fit_size((10, 1000), width=2000, limit=2000) == (20, 2000)
    assert fit_size((80, 40), width=60000, height=60000, limit=2000) == (2000, 1000)


def test_resize_never_exceeds_maximum_dimension():
    data = resize_image(make_png(4, 400), "png", width=MAX_IMAGE_DIMENSION)

    assert Image.open(BytesIO(data)).size == (20, MAX_IMAGE_DIMENSION)


def test_ascii_columns_are_bounded_for_wide_images():
    art = image_to_ascii(make_png(1000, 1), AsciiOptions(colored=False, trim=False))

    lines = art.split("\n")
    assert len(lines) == 20
    # "wide" repeats each column twice
    assert all(len(line) == MAX_ASCII_COLUMNS * 2 for line in lines)


def test_image_dimensions_rejects_garbage():
    assert image_dimensions(make_png(30, 10)) == (30, 10)
    with pytest.raises(TransformError):
        image_dimensions(b"not an image")
