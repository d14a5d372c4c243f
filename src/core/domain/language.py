"""Language utilities for cinequiz.

The catalog returns localized titles; this enum is the single source of
truth for which locales the quiz can ask for.
"""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Supported languages for catalog titles."""

    ENGLISH = "en"
    SPANISH = "es"

    @classmethod
    def default(cls) -> "Language":
        return cls.ENGLISH

    def catalog_locale(self) -> str:
        """Locale string expected by the catalog `language` parameter."""

        return "es-ES" if self is Language.SPANISH else "en-US"

    def label(self) -> str:
        """Human readable label for prompts and logging."""

        return "Spanish" if self is Language.SPANISH else "English"
