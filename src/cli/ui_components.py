"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar paneles/tablas entre `play` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import AnswerOutcome, Entity, RoundState, ScoreState


def print_banner(console: Console) -> None:
    title = Text("CINEQUIZ", style="bold cyan")
    subtitle = Text("Guess the movie from its backdrops", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_round_panel(round_state: RoundState, backdrop_urls: list[str]) -> Panel:
    """Backdrop links for the current question (terminals can't show the images)."""

    body = Text()
    if not backdrop_urls:
        body.append("No backdrops available.", style="dim")
    for i, url in enumerate(backdrop_urls, start=1):
        body.append(f"Frame {i}: ", style="bold")
        body.append(url, style=f"link {url} magenta")
        body.append("\n")
    return Panel(body, title=f"Question {round_state.index}", border_style="cyan")


def build_options_table(options: tuple[Entity, ...] | list[Entity]) -> Table:
    table = Table(title="Which movie is it?", show_header=False)
    table.add_column("#", style="bright_green", no_wrap=True)
    table.add_column("Title", style="white")
    for i, option in enumerate(options, start=1):
        table.add_row(str(i), option.title)
    return table


def build_feedback_panel(outcome: AnswerOutcome, poster_url: str | None = None) -> Panel:
    style = "green" if outcome.correct else "red"
    body = Text()
    body.append(outcome.message + "\n", style=f"bold {style}")
    body.append(f"{outcome.points:+d} points\n", style=style)
    if poster_url:
        body.append("Poster: ", style="dim")
        body.append(poster_url + "\n", style=f"link {poster_url} magenta")
    if outcome.reward_message:
        body.append("\n")
        body.append(outcome.reward_message, style="bold yellow")
    return Panel(body, title=outcome.target.title, border_style=style)


def build_score_line(score: ScoreState) -> Text:
    line = Text()
    line.append("Score: ", style="bold")
    line.append(str(score.score), style="green" if score.score >= 0 else "red")
    line.append("  Streak: ", style="bold")
    line.append(str(score.streak))
    if score.badges:
        line.append("  Badges: ", style="bold")
        line.append(", ".join(sorted(score.badges)), style="yellow")
    return line


def build_error_panel(message: str) -> Panel:
    return Panel(Text(message, style="red"), title="Something went wrong", border_style="red")


def build_summary_panel(score: ScoreState, rounds_played: int) -> Panel:
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Rounds played", str(rounds_played))
    table.add_row("Final score", str(score.score))
    table.add_row("Current streak", str(score.streak))
    table.add_row("Badges", ", ".join(sorted(score.badges)) or "-")
    return Panel(table, title="Session summary", border_style="cyan")
