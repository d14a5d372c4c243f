"""Contrato de fuentes de catálogo.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- El adaptador TMDB y los fakes en memoria son intercambiables en tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import Entity


@runtime_checkable
class CatalogSource(Protocol):
    """Minimal contract for a movie metadata source.

    Rules:
    - Both calls are async because they do I/O.
    - Both are best-effort: failures come back as an empty list, never as
      an exception the caller has to handle.
    """

    async def fetch_candidate_entities(self, year: int) -> list[Entity]:
        """Popular movies released in `year`, as stubs without image refs."""

        ...

    async def fetch_image_refs(self, entity_id: int) -> list[str]:
        """Up to N canonical backdrop references for a movie."""

        ...
