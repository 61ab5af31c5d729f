"""Blob container implementations."""

from .base import BlobContainer, first_match
from .factory import make_container

__all__ = ["BlobContainer", "first_match", "make_container"]
