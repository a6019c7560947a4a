"""
String enum definitions for domino abacus concepts.

Values double as persisted tags, so they must never change once released.
"""

from __future__ import annotations

from enum import StrEnum


class MatchMode(StrEnum):
    """How many entrants share the table."""

    PAIRS_2 = "pairs2"
    FREE_FOR_ALL_4 = "freeForAll4"

    @property
    def players_count(self) -> int:
        return _PLAYERS_COUNT[self]


_PLAYERS_COUNT: dict[MatchMode, int] = {
    MatchMode.PAIRS_2: 2,
    MatchMode.FREE_FOR_ALL_4: 4,
}


class GameMode(StrEnum):
    """Domino scoring variant; selects rod multipliers and the winning threshold."""

    MODE_365 = "365"
    MODE_101 = "101"

    def toggled(self) -> GameMode:
        """Return the other variant."""
        return GameMode.MODE_101 if self == GameMode.MODE_365 else GameMode.MODE_365


class ScoreDisplayMode(StrEnum):
    """Presentation of the board; only the shared board accumulates wins."""

    PER_TEAM = "perTeam"
    SHARED_BOARD = "sharedBoard"


class AbacusStyle(StrEnum):
    CLASSIC = "classic"
    STONE = "stone"
    NEON = "neon"
    WOODEN = "wooden"


class AppLanguage(StrEnum):
    RU = "ru"
    EN = "en"
    AZ = "az"


class SwipeDirection(StrEnum):
    """Horizontal swipe used to flip the game mode."""

    LEFT = "left"  # 365 -> 101 only
    RIGHT = "right"  # 101 -> 365 only
    TOGGLE = "toggle"  # header button, either way


class ControllerPhase(StrEnum):
    """Phase of the match controller state machine."""

    UNCONFIGURED = "unconfigured"
    ACTIVE = "active"
    END_CONFIRM_PENDING = "end_confirm_pending"
