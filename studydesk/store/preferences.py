"""
Side preferences stored next to the dashboard snapshot.

These are configuration rather than dashboard state: they are saved under
their own storage keys and never travel with a backup.
"""

from __future__ import annotations

import json
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from studydesk.store.persistence import KeyValueStorage


class ReaderPreferences(BaseModel):
    """Typography and layout of the article reader."""

    model_config = ConfigDict(populate_by_name=True)

    font: Literal["serif", "sans", "mono"] = "serif"
    size: Literal["small", "medium", "large", "xl"] = "medium"
    theme: Literal["light", "sepia", "dark"] = "light"
    width: Literal["narrow", "medium", "wide"] = "medium"
    line_height: Literal["compact", "normal", "loose"] = Field(default="normal", alias="lineHeight")
    align: Literal["left", "justify"] = "left"

    @classmethod
    def load(cls, storage: KeyValueStorage, key: str) -> ReaderPreferences:
        """Stored preferences, or defaults when missing or unparsable."""
        raw = storage.get(key)
        if raw is None:
            return cls()
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Failed to parse saved reader settings: {}", e.error_count())
            return cls()

    def save(self, storage: KeyValueStorage, key: str) -> None:
        storage.set(key, self.model_dump_json(by_alias=True))


class BackupCredentials(BaseModel):
    """GitHub token and ``owner/name`` repository for remote backup."""

    token: str = ""
    repo: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.repo)

    @classmethod
    def load(cls, storage: KeyValueStorage, token_key: str, repo_key: str) -> BackupCredentials:
        return cls(
            token=_load_string(storage, token_key),
            repo=_load_string(storage, repo_key),
        )

    def save(self, storage: KeyValueStorage, token_key: str, repo_key: str) -> None:
        storage.set(token_key, json.dumps(self.token))
        storage.set(repo_key, json.dumps(self.repo))


def _load_string(storage: KeyValueStorage, key: str) -> str:
    raw = storage.get(key)
    if raw is None:
        return ""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        # Plain text written by hand
        return raw.strip()
    return value if isinstance(value, str) else ""


# =============================================================================
# Feed Sources
# =============================================================================


class FeedPreferences:
    """
    Enabled news sources.

    An empty list means "never chosen": every available source is shown,
    and the first real choice is seeded from the available sources.
    """

    def __init__(self, enabled: list[str] | None = None):
        self.enabled: list[str] = list(enabled or [])

    @classmethod
    def load(cls, storage: KeyValueStorage, key: str) -> FeedPreferences:
        raw = storage.get(key)
        if raw is None:
            return cls()
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse feed preferences: {}", e)
            return cls()
        if not isinstance(value, list):
            return cls()
        return cls([s for s in value if isinstance(s, str)])

    def save(self, storage: KeyValueStorage, key: str) -> None:
        # An empty selection is never persisted
        if self.enabled:
            storage.set(key, json.dumps(self.enabled))

    def effective(self, available: list[str]) -> list[str]:
        """Sources to show given what the feeds currently offer."""
        return list(self.enabled) if self.enabled else list(available)

    def toggle_source(self, source: str, available: list[str] | None = None) -> list[str]:
        """Enable or disable ``source``; returns the new enabled list."""
        current = self.effective(available or [])
        if source in current:
            self.enabled = [s for s in current if s != source]
        else:
            self.enabled = [*current, source]
        return list(self.enabled)

    def is_enabled(self, source: str) -> bool:
        return not self.enabled or source in self.enabled
