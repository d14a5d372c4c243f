"""cinequiz CLI (Typer).

`play` runs the interactive quiz; `doctor` groups diagnostics. All quiz
logic lives in `core.services`; this module only prompts and prints.
"""

from __future__ import annotations

import asyncio
import logging
import random

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm, Prompt

from adapters.tmdb_catalog import TMDBCatalog
from cli import doctor
from cli.ui_components import (
    build_error_panel,
    build_feedback_panel,
    build_options_table,
    build_round_panel,
    build_score_line,
    build_summary_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import RoundMode, SessionState
from core.services.quiz_session import QuizSession

app = typer.Typer(no_args_is_help=True, help="Guess the movie from its backdrops.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

QUIT = "q"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


async def play_session(
    settings: AppSettings,
    *,
    console: Console,
    rounds: int | None = None,
    rng: random.Random | None = None,
) -> tuple[SessionState, int]:
    """Run rounds until the user quits, `rounds` is reached or the session fails."""

    played = 0
    async with TMDBCatalog(settings) as catalog:
        session = QuizSession(catalog, settings, rng=rng)
        with console.status("Loading..."):
            await session.start_round()

        while True:
            current = session.round
            if current.mode is RoundMode.ERROR:
                console.print(build_error_panel(current.error_message or "Unknown error"))
                break

            console.print(build_round_panel(current, session.backdrop_urls()))
            console.print(build_options_table(current.options))
            choices = [str(i) for i in range(1, len(current.options) + 1)] + [QUIT]
            choice = await asyncio.to_thread(Prompt.ask, "Your guess", choices=choices, console=console)
            if choice == QUIT:
                break

            outcome = session.answer(current.options[int(choice) - 1].id)
            if outcome is None:
                break
            played += 1
            console.print(build_feedback_panel(outcome, poster_url=session.poster_url()))
            console.print(build_score_line(session.score))

            if rounds is not None and played >= rounds:
                break
            if settings.auto_advance_seconds:
                await asyncio.sleep(settings.auto_advance_seconds)
            else:
                label = "Great! Next question?" if outcome.correct else "Try again?"
                if not await asyncio.to_thread(Confirm.ask, label, default=True, console=console):
                    break

            with console.status("Loading..."):
                await session.acknowledge()

    return session.state, played


@app.command()
def play(
    rounds: int | None = typer.Option(None, "--rounds", "-n", min=1, help="Stop after N answered questions."),
    auto_advance: float | None = typer.Option(
        None,
        "--auto-advance",
        min=0.1,
        help="Dismiss feedback automatically after this many seconds.",
    ),
    seed: int | None = typer.Option(None, "--seed", help="Seed for reproducible draws."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Skip the welcome banner."),
) -> None:
    """Play the movie-guessing quiz."""

    settings = doctor.load_settings(_console)
    configure_logging("DEBUG" if verbose else settings.log_level)

    if not settings.api_key:
        _console.print(
            "[red]No TMDB API key configured.[/red] "
            "Set CINEQUIZ_API_KEY or run `cinequiz doctor setup-key`."
        )
        raise typer.Exit(code=1)

    if auto_advance is not None:
        settings = settings.model_copy(update={"auto_advance_seconds": auto_advance})

    if not no_banner:
        print_banner(_console)

    state, played = asyncio.run(
        play_session(settings, console=_console, rounds=rounds, rng=random.Random(seed))
    )
    _console.print(build_summary_panel(state.score, played))
    if state.round.mode is RoundMode.ERROR:
        raise typer.Exit(code=2)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
