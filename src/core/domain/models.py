"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de las invariantes de una ronda (4 opciones, ids
  distintos, el objetivo incluido) en el propio modelo.
- Todos los modelos son inmutables: el controlador reemplaza el estado en
  lugar de mutarlo, así nunca se observa una actualización a medias.

Nota:
- Estos modelos describen *qué* es una ronda, no *cómo* se obtienen los datos.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

OPTION_COUNT = 4


class Entity(BaseModel):
    """A catalog movie.

    Discovery returns stubs (no `image_refs`); the drawer fills in the
    backdrops before the movie is offered in a round.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Catalog id, unique and externally assigned.")
    title: str = Field(..., min_length=1, max_length=512)
    poster_ref: str | None = Field(
        default=None,
        description="Poster image reference (path relative to the image base).",
    )
    image_refs: tuple[str, ...] = Field(
        default=(),
        max_length=10,
        description="Canonical (unlocalized) backdrop references, in catalog order.",
    )

    @property
    def is_usable(self) -> bool:
        return bool(self.image_refs)

    def with_images(self, refs: list[str] | tuple[str, ...]) -> "Entity":
        return Entity(id=self.id, title=self.title, poster_ref=self.poster_ref, image_refs=tuple(refs))


class RoundMode(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    FEEDBACK = "feedback"
    ERROR = "error"


class ScoringRules(BaseModel):
    """Fixed point deltas and streak badges."""

    model_config = ConfigDict(frozen=True)

    correct_points: int = 1
    incorrect_points: int = -3
    streak_badges: dict[int, str] = Field(
        default_factory=lambda: {5: "Silver Cinematographer", 10: "Gold Director"},
    )


class ScoreState(BaseModel):
    """Running score for one session. Badges are never revoked."""

    model_config = ConfigDict(frozen=True)

    score: int = 0
    streak: int = Field(default=0, ge=0)
    badges: frozenset[str] = frozenset()


class AnswerOutcome(BaseModel):
    """Result of scoring a single answer."""

    model_config = ConfigDict(frozen=True)

    selected_id: int
    correct: bool
    message: str
    points: int
    badge: str | None = None
    reward_message: str | None = None
    target: Entity


class RoundState(BaseModel):
    """One question cycle.

    Invariant: while `active` or `feedback` there are exactly four options
    with distinct ids and the target is one of them.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(default=0, ge=0)
    mode: RoundMode = RoundMode.LOADING
    target: Entity | None = None
    options: tuple[Entity, ...] = ()
    feedback_message: str | None = None
    reward_message: str | None = None
    error_message: str | None = None
    last_outcome: AnswerOutcome | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "RoundState":
        if self.mode in (RoundMode.ACTIVE, RoundMode.FEEDBACK):
            if self.target is None:
                raise ValueError(f"{self.mode.value} round needs a target")
            ids = [option.id for option in self.options]
            if len(ids) != OPTION_COUNT or len(set(ids)) != OPTION_COUNT:
                raise ValueError(f"round needs {OPTION_COUNT} distinct options, got ids {ids}")
            if self.target.id not in ids:
                raise ValueError("target must be one of the options")
        if self.mode is RoundMode.ERROR and not self.error_message:
            raise ValueError("error round needs an error_message")
        return self

    @classmethod
    def loading(cls, index: int) -> "RoundState":
        return cls(index=index, mode=RoundMode.LOADING)

    def activate(self, target: Entity, options: list[Entity]) -> "RoundState":
        return RoundState(index=self.index, mode=RoundMode.ACTIVE, target=target, options=tuple(options))

    def with_feedback(self, outcome: AnswerOutcome) -> "RoundState":
        return RoundState(
            index=self.index,
            mode=RoundMode.FEEDBACK,
            target=self.target,
            options=self.options,
            feedback_message=outcome.message,
            reward_message=outcome.reward_message,
            last_outcome=outcome,
        )

    def failed(self, message: str) -> "RoundState":
        return RoundState(index=self.index, mode=RoundMode.ERROR, error_message=message)

    def option_by_id(self, entity_id: int) -> Entity | None:
        for option in self.options:
            if option.id == entity_id:
                return option
        return None


class SessionState(BaseModel):
    """Everything the controller owns: the current round and the score."""

    model_config = ConfigDict(frozen=True)

    round: RoundState = Field(default_factory=RoundState)
    score: ScoreState = Field(default_factory=ScoreState)
