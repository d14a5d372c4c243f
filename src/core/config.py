"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El adaptador del catálogo y la CLI leen el mismo contrato tipado.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.language import Language


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "cinequiz"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cinequiz"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "cinequiz"
    return Path.home() / ".config" / "cinequiz"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str]) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        try:
            existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))
        except OSError:
            existing = {}

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# cinequiz user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application settings.

    Only the API key and the image host are expected to change between
    environments; everything else has working defaults for TMDB.
    """

    model_config = SettingsConfigDict(
        env_prefix="CINEQUIZ_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the per-user config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None,
        description="TMDB API key (v3), sent as the `api_key` query parameter.",
    )
    api_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        min_length=8,
        description="Base URL of the catalog API.",
    )
    image_base_url: str = Field(
        default="https://image.tmdb.org/t/p",
        min_length=8,
        description="Base path that image references are appended to.",
    )
    image_host: str = Field(
        default="image.tmdb.org",
        min_length=1,
        description="Allow-listed host for rendered image URLs.",
    )
    backdrop_width: str = Field(default="w780", min_length=1)
    poster_width: str = Field(default="w500", min_length=1)

    language: Language = Field(
        default_factory=Language.default,
        description="Language used for catalog titles (en/es).",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="cinequiz/0.1 (+https://local)",
        min_length=1,
    )

    year_min: int = Field(default=1980, ge=1874)
    year_max: int = Field(default=2024, ge=1874)
    max_images: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Backdrops kept per movie.",
    )

    max_draw_attempts: int = Field(
        default=20,
        ge=4,
        le=200,
        description="Total candidate draws allowed while assembling one round.",
    )
    max_consecutive_failures: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Failed draws in a row before a round gives up.",
    )

    auto_advance_seconds: float | None = Field(
        default=None,
        gt=0,
        description="When set, feedback is dismissed automatically after this delay.",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level for the CLI (case-insensitive).",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _check_year_range(self) -> "AppSettings":
        if self.year_min > self.year_max:
            raise ValueError("year_min must be <= year_max")
        return self
