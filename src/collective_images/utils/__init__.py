"""Utility modules for collective images."""

from .cloudinary import face_crop_query, format_dimension, get_cloudinary_url
from .query_string import stringify_params

__all__ = [
    "face_crop_query",
    "format_dimension",
    "get_cloudinary_url",
    "stringify_params",
]
