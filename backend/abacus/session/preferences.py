"""Persisted scalar preferences.

Each preference lives under its own storage key and falls back to its
default independently when the key is absent or holds an unknown value.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

from abacus.logic.enums import AbacusStyle, AppLanguage, MatchMode, ScoreDisplayMode

if TYPE_CHECKING:
    from shared.storage import KeyValueStorage

logger = structlog.get_logger()


class Preferences(BaseModel):
    """Snapshot of every persisted preference. ``match_mode`` is None until the first selection."""

    model_config = ConfigDict(frozen=True)

    match_mode: MatchMode | None = None
    score_display: ScoreDisplayMode = ScoreDisplayMode.PER_TEAM
    abacus_style: AbacusStyle = AbacusStyle.CLASSIC
    app_language: AppLanguage = AppLanguage.RU
    has_seen_onboarding: bool = False


# field name -> storage key
PREFERENCE_KEYS: dict[str, str] = {
    "match_mode": "matchMode",
    "score_display": "scoreDisplayMode",
    "abacus_style": "abacusStyle",
    "app_language": "appLanguage",
    "has_seen_onboarding": "hasSeenOnboarding",
}

_ENUM_FIELDS: dict[str, type[StrEnum]] = {
    "match_mode": MatchMode,
    "score_display": ScoreDisplayMode,
    "abacus_style": AbacusStyle,
    "app_language": AppLanguage,
}

_DEFAULTS = Preferences()


def _decode(field: str, raw: str | None) -> object:
    default = getattr(_DEFAULTS, field)
    if not raw:
        return default
    enum_cls = _ENUM_FIELDS.get(field)
    if enum_cls is not None:
        try:
            return enum_cls(raw)
        except ValueError:
            logger.warning("unknown stored preference, using default", key=PREFERENCE_KEYS[field], value=raw)
            return default
    return raw == "true"


def _encode(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PreferencesRepository:
    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def load(self) -> Preferences:
        values: dict[str, object] = {}
        for field, key in PREFERENCE_KEYS.items():
            try:
                raw = self._storage.get(key)
            except OSError:
                logger.exception("failed to read preference", key=key)
                raw = None
            values[field] = _decode(field, raw)
        return Preferences.model_validate(values)

    def save(self, **changes: object) -> Preferences:
        """
        Persist the given preferences and return the resulting snapshot.

        Values are validated before anything is written. A failed write is
        logged and skipped; the other keys are still written.

        Raises:
            ValueError: If a change names an unknown preference
            pydantic.ValidationError: If a value is not valid for its preference

        """
        unknown = set(changes) - set(PREFERENCE_KEYS)
        if unknown:
            raise ValueError(f"Unknown preferences: {unknown}")
        updated = Preferences.model_validate({**dict(self.load()), **changes})
        for field in changes:
            value = getattr(updated, field)
            key = PREFERENCE_KEYS[field]
            try:
                if value is None:
                    self._storage.delete(key)
                else:
                    self._storage.set(key, _encode(value))
            except OSError:
                logger.exception("failed to write preference", key=key)
        return updated
