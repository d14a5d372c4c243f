"""Image URL construction.

The catalog hands out bare references (`/abc.jpg`); the UI needs a full
URL with a size variant. Only the allow-listed host is accepted.
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import urlsplit

from core.config import AppSettings


class ImageKind(str, Enum):
    BACKDROP = "backdrop"
    POSTER = "poster"


def build_image_url(ref: str, *, kind: ImageKind, settings: AppSettings) -> str:
    """`{image_base_url}/{width}{ref}`, e.g. https://image.tmdb.org/t/p/w780/abc.jpg."""

    host = urlsplit(settings.image_base_url).hostname
    if host != settings.image_host:
        raise ValueError(f"image host {host!r} is not allowed (expected {settings.image_host!r})")

    width = settings.backdrop_width if kind is ImageKind.BACKDROP else settings.poster_width
    if not ref.startswith("/"):
        ref = "/" + ref
    return f"{settings.image_base_url.rstrip('/')}/{width}{ref}"
