"""Persisted light/dark theme preference."""

from __future__ import annotations

import logging
from typing import Literal, get_args

from webchat.local_storage import THEME_KEY, LocalStorage

logger = logging.getLogger(__name__)

Theme = Literal["light", "dark"]
THEMES: tuple[str, ...] = get_args(Theme)
DEFAULT_THEME: Theme = "light"


class ThemeStore:
    """Read and update the ``theme`` key of local storage."""

    def __init__(self, storage: LocalStorage):
        self._storage = storage

    def get(self) -> Theme:
        value = self._storage.get_item(THEME_KEY)
        if value in THEMES:
            return value  # type: ignore[return-value]
        return DEFAULT_THEME

    def set(self, theme: str) -> Theme:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}'. Expected one of: {', '.join(THEMES)}")
        self._storage.set_item(THEME_KEY, theme)
        logger.debug(f"Theme set to {theme}")
        return theme  # type: ignore[return-value]

    def toggle(self) -> Theme:
        """Flip between light and dark and return the new theme."""
        return self.set("light" if self.get() == "dark" else "dark")
