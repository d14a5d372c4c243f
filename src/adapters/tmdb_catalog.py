"""Catalog source: TMDB (The Movie Database) v3 API.

Two endpoints:
- `GET /discover/movie` for popular movies of a given year.
- `GET /movie/{id}/images` for backdrops; only unlocalized ones
  (`iso_639_1 == null`) are kept so no text gives the title away.

Every call is best-effort: transport errors, non-200 statuses and
malformed payloads are logged and come back as an empty list.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx
from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import Entity

logger = logging.getLogger(__name__)


class DiscoverItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    title: str = Field(..., min_length=1)
    poster_path: str | None = None


class DiscoverResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    results: list[Any] = Field(default_factory=list)


class ImageItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    language_tag: str | None = Field(default=None, alias="iso_639_1")
    ref: str = Field(..., alias="file_path", min_length=1)


class ImagesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    backdrops: list[Any] = Field(default_factory=list)


class TMDBCatalog:
    """`CatalogSource` backed by the TMDB HTTP API.

    Usable as an async context manager; when no client is injected it
    builds (and later closes) its own.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "TMDBCatalog":
        self._http()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_async_client(self._settings)
            self._owns_client = True
        return self._client

    def _url(self, path: str) -> str:
        return f"{self._settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _get_json(self, path: str, params: dict[str, str | int]) -> object | None:
        query: dict[str, str | int] = {"api_key": self._settings.api_key or ""}
        query.update(params)
        try:
            resp = await self._http().get(self._url(path), params=query)
        except httpx.HTTPError as exc:
            logger.warning("Catalog request %s failed: %s", path, exc.__class__.__name__)
            return None

        if resp.status_code != 200:
            logger.warning("Catalog request %s returned HTTP %s", path, resp.status_code)
            return None

        try:
            return resp.json()
        except ValueError:
            logger.warning("Catalog request %s returned a non-JSON body", path)
            return None

    async def fetch_candidate_entities(self, year: int) -> list[Entity]:
        data = await self._get_json(
            "/discover/movie",
            {
                "language": self._settings.language.catalog_locale(),
                "sort_by": "popularity.desc",
                "year": year,
            },
        )
        if data is None:
            return []

        try:
            parsed = DiscoverResponse.model_validate(data)
        except ValueError as exc:
            logger.warning("Malformed discover payload for year %s: %s", year, exc)
            return []

        entities: list[Entity] = []
        for raw in parsed.results:
            # A bad entry only drops itself; the rest of the page is kept.
            try:
                item = DiscoverItem.model_validate(raw)
                entities.append(Entity(id=item.id, title=item.title, poster_ref=item.poster_path))
            except ValueError as exc:
                logger.debug("Skipping discover result for year %s: %s", year, exc)
        logger.debug("Discovered %d movies for year %s", len(entities), year)
        return entities

    async def fetch_image_refs(self, entity_id: int) -> list[str]:
        data = await self._get_json(f"/movie/{entity_id}/images", {})
        if data is None:
            return []

        try:
            parsed = ImagesResponse.model_validate(data)
        except ValueError as exc:
            logger.warning("Malformed images payload for movie %s: %s", entity_id, exc)
            return []

        refs: list[str] = []
        for raw in parsed.backdrops:
            try:
                image = ImageItem.model_validate(raw)
            except ValueError as exc:
                logger.debug("Skipping backdrop for movie %s: %s", entity_id, exc)
                continue
            if image.language_tag is None:
                refs.append(image.ref)
        return refs[: self._settings.max_images]
