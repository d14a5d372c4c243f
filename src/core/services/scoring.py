"""Answer scoring.

Pure function: takes the current score and returns the next one plus an
`AnswerOutcome` for the UI. Exactly one of the two branches fires.
"""

from __future__ import annotations

from core.domain.models import AnswerOutcome, Entity, ScoreState, ScoringRules

CORRECT_MESSAGE = "Correct! 🎉"


def incorrect_message(target: Entity) -> str:
    return f"Incorrect! The movie was: {target.title}"


def reward_message(badge: str, streak: int) -> str:
    return f"You've earned the '{badge}' badge for {streak} correct answers in a row!"


def score_answer(
    score: ScoreState,
    *,
    target: Entity,
    selected_id: int,
    rules: ScoringRules,
) -> tuple[ScoreState, AnswerOutcome]:
    if selected_id == target.id:
        streak = score.streak + 1
        badge = rules.streak_badges.get(streak)
        # A badge already held is not granted (or announced) again.
        if badge is not None and badge in score.badges:
            badge = None

        badges = score.badges | {badge} if badge else score.badges
        new_score = ScoreState(
            score=score.score + rules.correct_points,
            streak=streak,
            badges=badges,
        )
        outcome = AnswerOutcome(
            selected_id=selected_id,
            correct=True,
            message=CORRECT_MESSAGE,
            points=rules.correct_points,
            badge=badge,
            reward_message=reward_message(badge, streak) if badge else None,
            target=target,
        )
        return new_score, outcome

    new_score = ScoreState(
        score=score.score + rules.incorrect_points,
        streak=0,
        badges=score.badges,
    )
    outcome = AnswerOutcome(
        selected_id=selected_id,
        correct=False,
        message=incorrect_message(target),
        points=rules.incorrect_points,
        target=target,
    )
    return new_score, outcome
