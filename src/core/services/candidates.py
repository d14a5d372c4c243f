"""Random candidate draws.

One draw = random release year → discover query → random pick → backdrop
lookup. A draw never raises: source failures are logged and reported as
`None` so the caller can simply try another year.
"""

from __future__ import annotations

import logging
import random

from core.config import AppSettings
from core.domain.errors import SourceUnavailable
from core.domain.models import Entity
from core.interfaces.catalog import CatalogSource

logger = logging.getLogger(__name__)


def random_year(rng: random.Random, settings: AppSettings) -> int:
    return rng.randint(settings.year_min, settings.year_max)


async def _query_candidate(
    catalog: CatalogSource,
    *,
    year: int,
    rng: random.Random,
    settings: AppSettings,
) -> Entity:
    try:
        stubs = await catalog.fetch_candidate_entities(year)
    except Exception as exc:
        raise SourceUnavailable(f"discover failed for year {year}: {exc}") from exc
    if not stubs:
        raise SourceUnavailable(f"no movies returned for year {year}")

    stub = rng.choice(stubs)
    try:
        refs = await catalog.fetch_image_refs(stub.id)
    except Exception as exc:
        raise SourceUnavailable(f"image lookup failed for movie {stub.id}: {exc}") from exc

    return stub.with_images(refs[: settings.max_images])


async def draw_candidate(
    catalog: CatalogSource,
    *,
    rng: random.Random,
    settings: AppSettings,
) -> Entity | None:
    """Draw one random movie with its backdrops, or `None` if the source failed.

    The returned entity may still be unusable (no canonical backdrops);
    filtering is the caller's decision.
    """

    year = random_year(rng, settings)
    try:
        entity = await _query_candidate(catalog, year=year, rng=rng, settings=settings)
    except SourceUnavailable as exc:
        logger.info("Candidate draw failed: %s", exc)
        return None

    if not entity.is_usable:
        logger.debug("Movie %s (%s) has no canonical backdrops", entity.id, entity.title)
    return entity
