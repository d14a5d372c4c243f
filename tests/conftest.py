from __future__ import annotations

import asyncio
from types import TracebackType

import pytest

from core.config import AppSettings
from core.domain.models import Entity


def movie(movie_id: int, title: str | None = None, *, poster: str | None = "/poster.jpg") -> Entity:
    return Entity(id=movie_id, title=title or f"Movie {movie_id}", poster_ref=poster)


class FakeCatalog:
    """In-memory `CatalogSource`.

    Each discover call consumes the next script item:
    - an `Entity` -> returned as the only result,
    - `None` -> no results,
    - an exception instance -> raised.
    Once the script runs out, discover calls return nothing.
    """

    def __init__(
        self,
        script: list[Entity | BaseException | None],
        images: dict[int, list[str]] | None = None,
        *,
        default_images: list[str] | None = None,
    ) -> None:
        self.script = list(script)
        self.images = images or {}
        self.default_images = ["/frame-a.jpg", "/frame-b.jpg"] if default_images is None else default_images
        self.discover_calls: list[int] = []
        self.image_calls: list[int] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    async def __aenter__(self) -> "FakeCatalog":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.closed = True

    async def fetch_candidate_entities(self, year: int) -> list[Entity]:
        self.discover_calls.append(year)
        item = self.script.pop(0) if self.script else None
        if self.gate is not None:
            gate, self.gate = self.gate, None
            await gate.wait()
        if isinstance(item, BaseException):
            raise item
        if item is None:
            return []
        return [item]

    async def fetch_image_refs(self, entity_id: int) -> list[str]:
        self.image_calls.append(entity_id)
        return list(self.images.get(entity_id, self.default_images))


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, api_key="test-key")
