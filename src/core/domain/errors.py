"""Quiz error kinds.

None of these reach the user as raw technical detail: the controller turns
them into short messages or drops them.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz errors."""


class SourceUnavailable(QuizError):
    """A catalog query failed (network, API status, malformed payload)."""


class InsufficientCandidates(QuizError):
    """Fewer than four usable, distinct movies could be drawn for a round."""

    def __init__(self, found: int, attempts: int) -> None:
        super().__init__(f"found {found} usable movies after {attempts} draws")
        self.found = found
        self.attempts = attempts


class StaleResponse(QuizError):
    """A fetch completed after its round had already been replaced."""

    def __init__(self, round_index: int, current_index: int) -> None:
        super().__init__(f"response for round {round_index} arrived during round {current_index}")
        self.round_index = round_index
        self.current_index = current_index
