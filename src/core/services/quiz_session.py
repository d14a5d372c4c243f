"""Quiz session controller.

Owns the `SessionState` (current round + score) and is the only place it
changes. Round lifecycle:

    loading -> active -> feedback -> loading -> ...
    loading -> error (terminal)

Every round carries an index. Assembly captures the index it started with
and re-checks it after each await; results for an abandoned round are
dropped instead of applied.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Callable, Iterable

from adapters.image_urls import ImageKind, build_image_url
from core.config import AppSettings
from core.domain.errors import InsufficientCandidates, StaleResponse
from core.domain.models import (
    OPTION_COUNT,
    AnswerOutcome,
    Entity,
    RoundMode,
    RoundState,
    ScoreState,
    ScoringRules,
    SessionState,
)
from core.interfaces.catalog import CatalogSource
from core.services.candidates import draw_candidate
from core.services.scoring import score_answer

logger = logging.getLogger(__name__)

INSUFFICIENT_CANDIDATES_MESSAGE = (
    "Could not find enough movies with images for a new question. "
    "Check your connection or API key and try again later."
)


@dataclass
class DrawBudget:
    """Attempt counters for one round assembly."""

    max_attempts: int
    max_consecutive_failures: int
    attempts: int = 0
    consecutive_failures: int = 0

    @property
    def exhausted(self) -> bool:
        return (
            self.attempts >= self.max_attempts
            or self.consecutive_failures >= self.max_consecutive_failures
        )

    def take(self, wanted: int) -> int:
        """Reserve up to `wanted` draws; returns how many were granted."""

        granted = max(0, min(wanted, self.max_attempts - self.attempts))
        self.attempts += granted
        return granted

    def record(self, ok: bool) -> None:
        self.consecutive_failures = 0 if ok else self.consecutive_failures + 1


def merge_options(
    options: list[Entity],
    drawn: Iterable[Entity | None],
    budget: DrawBudget,
) -> list[Entity]:
    """Fold a batch of draws into the option list, one at a time.

    Unusable or failed draws count as failures; duplicate ids are skipped
    without counting as a failure.
    """

    merged = list(options)
    seen = {option.id for option in merged}
    for entity in drawn:
        if len(merged) >= OPTION_COUNT:
            break
        if entity is None or not entity.is_usable:
            budget.record(False)
            continue
        if entity.id in seen:
            continue
        merged.append(entity)
        seen.add(entity.id)
        budget.record(True)
    return merged


class QuizSession:
    """Drives rounds against a `CatalogSource`.

    `start_round`/`acknowledge` are coroutines (they fetch); `answer` is
    synchronous and applies exactly one scoring transition per round.
    """

    def __init__(
        self,
        catalog: CatalogSource,
        settings: AppSettings | None = None,
        *,
        rules: ScoringRules | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._catalog = catalog
        self._settings = settings or AppSettings()
        self._rules = rules or ScoringRules()
        self._rng = rng or random.Random()
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def round(self) -> RoundState:
        return self._state.round

    @property
    def score(self) -> ScoreState:
        return self._state.score

    @property
    def rules(self) -> ScoringRules:
        return self._rules

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start_round(self) -> RoundState:
        """Abandon the current round (if any) and assemble the next one."""

        current = self._state.round
        if current.mode is RoundMode.ERROR:
            logger.warning("Session is in error state; no further rounds")
            return current

        index = current.index + 1
        self._set_round(RoundState.loading(index))
        logger.info("Loading round %d", index)

        try:
            target, options = await self._assemble(index)
            self._rng.shuffle(options)
            return self._apply(index, lambda r: r.activate(target, options))
        except InsufficientCandidates as exc:
            logger.warning("Round %d could not be assembled: %s", index, exc)
            try:
                return self._apply(index, lambda r: r.failed(INSUFFICIENT_CANDIDATES_MESSAGE))
            except StaleResponse as stale:
                logger.debug("Discarding failure: %s", stale)
                return self._state.round
        except StaleResponse as exc:
            logger.debug("Discarding assembly result: %s", exc)
            return self._state.round

    def answer(self, selected_id: int) -> AnswerOutcome | None:
        """Score a guess. Ignored (returns None) unless the round is active."""

        current = self._state.round
        if current.mode is not RoundMode.ACTIVE or current.target is None:
            logger.debug("Ignoring answer %s in %s mode", selected_id, current.mode.value)
            return None
        if current.option_by_id(selected_id) is None:
            raise ValueError(f"movie {selected_id} is not an option in round {current.index}")

        new_score, outcome = score_answer(
            self._state.score,
            target=current.target,
            selected_id=selected_id,
            rules=self._rules,
        )
        self._state = SessionState(round=current.with_feedback(outcome), score=new_score)
        logger.info(
            "Round %d answered: correct=%s score=%d streak=%d",
            current.index,
            outcome.correct,
            new_score.score,
            new_score.streak,
        )
        return outcome

    async def acknowledge(self) -> RoundState:
        """Dismiss the feedback and move on to the next round."""

        if self._state.round.mode is not RoundMode.FEEDBACK:
            return self._state.round
        return await self.start_round()

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    def backdrop_urls(self) -> list[str]:
        target = self._state.round.target
        if target is None:
            return []
        return [
            build_image_url(ref, kind=ImageKind.BACKDROP, settings=self._settings)
            for ref in target.image_refs
        ]

    def poster_url(self) -> str | None:
        target = self._state.round.target
        if target is None or not target.poster_ref:
            return None
        return build_image_url(target.poster_ref, kind=ImageKind.POSTER, settings=self._settings)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_round(self, round_state: RoundState) -> None:
        self._state = SessionState(round=round_state, score=self._state.score)

    def _ensure_current(self, index: int) -> None:
        current = self._state.round.index
        if current != index:
            raise StaleResponse(index, current)

    def _apply(self, index: int, update: Callable[[RoundState], RoundState]) -> RoundState:
        self._ensure_current(index)
        self._set_round(update(self._state.round))
        return self._state.round

    async def _draw(self) -> Entity | None:
        return await draw_candidate(self._catalog, rng=self._rng, settings=self._settings)

    async def _assemble(self, index: int) -> tuple[Entity, list[Entity]]:
        budget = DrawBudget(
            max_attempts=self._settings.max_draw_attempts,
            max_consecutive_failures=self._settings.max_consecutive_failures,
        )

        target: Entity | None = None
        while target is None:
            if budget.exhausted or not budget.take(1):
                raise InsufficientCandidates(found=0, attempts=budget.attempts)
            entity = await self._draw()
            self._ensure_current(index)
            if entity is not None and entity.is_usable:
                target = entity
                budget.record(True)
            else:
                budget.record(False)

        options = [target]
        while len(options) < OPTION_COUNT:
            if budget.exhausted:
                raise InsufficientCandidates(found=len(options), attempts=budget.attempts)
            granted = budget.take(OPTION_COUNT - len(options))
            drawn = await asyncio.gather(*(self._draw() for _ in range(granted)))
            self._ensure_current(index)
            options = merge_options(options, drawn, budget)

        logger.debug("Round %d assembled after %d draws", index, budget.attempts)
        return target, options
