from __future__ import annotations

import asyncio
import random

import httpx
import pytest

from conftest import FakeCatalog, movie
from core.domain.models import OPTION_COUNT, RoundMode
from core.services.quiz_session import INSUFFICIENT_CANDIDATES_MESSAGE, QuizSession


def _session(catalog: FakeCatalog, settings, seed: int = 0) -> QuizSession:
    return QuizSession(catalog, settings, rng=random.Random(seed))


def _assert_valid_round(session: QuizSession) -> None:
    current = session.round
    ids = [option.id for option in current.options]
    assert current.mode is RoundMode.ACTIVE
    assert len(ids) == OPTION_COUNT
    assert len(set(ids)) == OPTION_COUNT
    assert ids.count(current.target.id) == 1
    assert all(option.is_usable for option in current.options)


def test_start_round_assembles_four_distinct_options(settings) -> None:
    catalog = FakeCatalog([movie(42, "X"), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)

    asyncio.run(session.start_round())

    _assert_valid_round(session)
    assert session.round.index == 1
    assert session.round.target.id == 42
    assert session.round.target.image_refs == ("/frame-a.jpg", "/frame-b.jpg")
    assert all(settings.year_min <= year <= settings.year_max for year in catalog.discover_calls)


def test_duplicates_and_imageless_movies_are_skipped(settings) -> None:
    catalog = FakeCatalog(
        [movie(42), movie(42), movie(5), movie(1), movie(1), movie(2), movie(3)],
        images={5: []},
    )
    session = _session(catalog, settings)

    asyncio.run(session.start_round())

    _assert_valid_round(session)
    assert {option.id for option in session.round.options} == {42, 1, 2, 3}


def test_target_must_have_images(settings) -> None:
    catalog = FakeCatalog([movie(9), movie(42), movie(1), movie(2), movie(3)], images={9: []})
    session = _session(catalog, settings)

    asyncio.run(session.start_round())

    assert session.round.target.id == 42


def test_correct_answer_scenario(settings) -> None:
    catalog = FakeCatalog([movie(42, "X"), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)
    asyncio.run(session.start_round())

    outcome = session.answer(42)

    assert outcome is not None
    assert "Correct" in outcome.message
    assert session.score.score == 1
    assert session.score.streak == 1
    assert session.round.mode is RoundMode.FEEDBACK
    assert session.round.feedback_message == outcome.message


def test_incorrect_answer_scenario(settings) -> None:
    catalog = FakeCatalog([movie(42, "X"), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)
    asyncio.run(session.start_round())

    outcome = session.answer(1)

    assert outcome is not None
    assert "X" in outcome.message
    assert session.score.score == -3
    assert session.score.streak == 0


def test_only_one_answer_per_round(settings) -> None:
    catalog = FakeCatalog([movie(42), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)
    asyncio.run(session.start_round())

    assert session.answer(42) is not None
    assert session.answer(1) is None
    assert session.score.score == 1


def test_answer_ignored_while_loading(settings) -> None:
    session = _session(FakeCatalog([]), settings)
    assert session.answer(42) is None


def test_answer_must_be_an_option(settings) -> None:
    catalog = FakeCatalog([movie(42), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)
    asyncio.run(session.start_round())

    with pytest.raises(ValueError):
        session.answer(999)


def test_acknowledge_moves_to_next_round(settings) -> None:
    catalog = FakeCatalog(
        [movie(42), movie(1), movie(2), movie(3), movie(50), movie(51), movie(52), movie(53)]
    )
    session = _session(catalog, settings)
    asyncio.run(session.start_round())
    session.answer(42)

    asyncio.run(session.acknowledge())

    _assert_valid_round(session)
    assert session.round.index == 2
    assert session.round.target.id == 50
    assert session.score.score == 1


def test_acknowledge_outside_feedback_is_noop(settings) -> None:
    catalog = FakeCatalog([movie(42), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)
    asyncio.run(session.start_round())

    before = session.round
    assert asyncio.run(session.acknowledge()) is before


def test_three_consecutive_failures_end_in_error(settings) -> None:
    catalog = FakeCatalog(
        [
            RuntimeError("boom"),
            httpx.ConnectError("offline"),
            None,
            movie(42),
        ]
    )
    session = _session(catalog, settings)

    result = asyncio.run(session.start_round())

    assert result.mode is RoundMode.ERROR
    assert result.error_message == INSUFFICIENT_CANDIDATES_MESSAGE
    assert len(catalog.discover_calls) == 3


def test_error_is_terminal(settings) -> None:
    session = _session(FakeCatalog([None, None, None]), settings)
    asyncio.run(session.start_round())
    assert session.round.mode is RoundMode.ERROR

    again = asyncio.run(session.start_round())

    assert again.mode is RoundMode.ERROR
    assert again.index == 1


def test_total_attempts_are_bounded(settings) -> None:
    bounded = settings.model_copy(update={"max_draw_attempts": 6, "max_consecutive_failures": 50})
    # Only two distinct movies exist; duplicates keep coming back.
    catalog = FakeCatalog([movie(42), movie(1)] + [movie(1)] * 30)
    session = _session(catalog, bounded)

    asyncio.run(session.start_round())

    assert session.round.mode is RoundMode.ERROR
    assert len(catalog.discover_calls) == 6


def test_failures_in_distractor_batch_count(settings) -> None:
    catalog = FakeCatalog([movie(42), None, None, None, movie(1)])
    session = _session(catalog, settings)

    asyncio.run(session.start_round())

    assert session.round.mode is RoundMode.ERROR


def test_stale_assembly_is_discarded(settings) -> None:
    catalog = FakeCatalog(
        [movie(7), movie(42), movie(1), movie(2), movie(3), movie(8), movie(9), movie(10)]
    )
    session = _session(catalog, settings)

    async def scenario():
        gate = asyncio.Event()
        catalog.gate = gate
        first = asyncio.create_task(session.start_round())
        await asyncio.sleep(0)
        assert session.round.index == 1

        second = await session.start_round()
        gate.set()
        stale = await first
        return second, stale

    second, stale = asyncio.run(scenario())

    assert second.index == 2
    assert second.mode is RoundMode.ACTIVE
    assert stale is second
    assert session.round is second
    assert second.target.id == 42
    assert 7 not in {option.id for option in second.options}


def test_image_urls_for_current_round(settings) -> None:
    catalog = FakeCatalog([movie(42, poster="/p42.jpg"), movie(1), movie(2), movie(3)])
    session = _session(catalog, settings)
    assert session.backdrop_urls() == []
    assert session.poster_url() is None

    asyncio.run(session.start_round())

    assert session.backdrop_urls() == [
        "https://image.tmdb.org/t/p/w780/frame-a.jpg",
        "https://image.tmdb.org/t/p/w780/frame-b.jpg",
    ]
    assert session.poster_url() == "https://image.tmdb.org/t/p/w500/p42.jpg"


def test_options_are_shuffled_across_rounds(settings) -> None:
    positions = set()
    for seed in range(12):
        catalog = FakeCatalog([movie(42), movie(1), movie(2), movie(3)])
        session = _session(catalog, settings, seed=seed)
        asyncio.run(session.start_round())
        positions.add([option.id for option in session.round.options].index(42))

    assert len(positions) > 1
