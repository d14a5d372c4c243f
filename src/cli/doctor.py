"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adapters.image_urls import ImageKind, build_image_url
from adapters.tmdb_catalog import TMDBCatalog
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def load_settings(console: Console) -> AppSettings:
    """Load `AppSettings`, turning validation errors into a short message + exit 1."""

    try:
        return AppSettings()
    except ValidationError as exc:
        fields = ", ".join(
            "CINEQUIZ_" + str(err["loc"][0]).upper() if err.get("loc") else "settings"
            for err in exc.errors()
        )
        console.print(f"[red]Invalid configuration:[/red] check {fields}.")
        raise typer.Exit(code=1) from None


async def _check_catalog(settings: AppSettings) -> tuple[bool, str]:
    async with TMDBCatalog(settings) as catalog:
        movies = await catalog.fetch_candidate_entities(settings.year_max)
    if not movies:
        return False, "No results (check the API key and connectivity; rerun play with --verbose)"
    return True, f"{len(movies)} movies for {settings.year_max}"


def _check_image_host(settings: AppSettings) -> tuple[bool, str]:
    try:
        url = build_image_url("/doctor.jpg", kind=ImageKind.BACKDROP, settings=settings)
    except ValueError as exc:
        return False, str(exc)
    return True, url


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = load_settings(_console)

    table = Table(title="cinequiz doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    has_key = bool(settings.api_key)
    table.add_row("API key", "OK" if has_key else "MISSING", "set" if has_key else "run `cinequiz doctor setup-key`")
    table.add_row("API base_url", "OK", settings.api_base_url)
    table.add_row("Language", "OK", settings.language.label())

    ok_images, detail_images = _check_image_host(settings)
    table.add_row("Image host", "OK" if ok_images else "FAIL", detail_images)

    if has_key:
        ok_catalog, detail_catalog = asyncio.run(_check_catalog(settings))
        table.add_row("Catalog", "OK" if ok_catalog else "FAIL", detail_catalog)
    else:
        table.add_row("Catalog", "SKIPPED", "needs an API key")

    _console.print(table)


@app.command(name="setup-key")
def setup_key() -> None:
    """Store the TMDB API key in the user config .env."""

    api_key = typer.prompt("TMDB API key", hide_input=True, confirmation_prompt=False).strip()
    if not api_key:
        raise typer.BadParameter("api key is required")

    env_path = write_user_env_vars({"CINEQUIZ_API_KEY": api_key})
    _console.print(f"[green]Saved API key to:[/green] {env_path}")
