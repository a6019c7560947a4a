"""Rod multipliers and winning thresholds for each domino game mode."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from abacus.logic.enums import GameMode

ROD_COUNT = 3  # low -> high significance
ROD_CAPACITY = 10  # beads per rod


class ModeRules(BaseModel):
    """
    Scoring rules for one game mode.

    A score wins when it is strictly above ``threshold``, or when it reaches
    ``threshold`` exactly and ``inclusive`` is set.
    """

    model_config = ConfigDict(frozen=True)

    multipliers: tuple[int, ...]
    threshold: int
    inclusive: bool

    @field_validator("multipliers")
    @classmethod
    def _validate_multipliers(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if len(v) != ROD_COUNT:
            raise ValueError(f"expected {ROD_COUNT} multipliers, got {len(v)}")
        if any(m <= 0 for m in v):
            raise ValueError("multipliers must be positive")
        return v

    @model_validator(mode="after")
    def _validate_threshold_reachable(self) -> ModeRules:
        if not self.is_winning(self.max_score):
            raise ValueError(f"threshold {self.threshold} cannot be reached with at most {self.max_score} points")
        return self

    def is_winning(self, score: int) -> bool:
        if self.inclusive:
            return score >= self.threshold
        return score > self.threshold

    @property
    def max_score(self) -> int:
        return ROD_CAPACITY * sum(self.multipliers)


MODE_RULES: dict[GameMode, ModeRules] = {
    GameMode.MODE_365: ModeRules(multipliers=(5, 10, 100), threshold=365, inclusive=False),
    GameMode.MODE_101: ModeRules(multipliers=(1, 10, 100), threshold=101, inclusive=True),
}

_missing = set(GameMode) - set(MODE_RULES)
if _missing:  # pragma: no cover
    raise RuntimeError(f"game modes without rules: {sorted(_missing)}")


def get_mode_rules(mode: GameMode) -> ModeRules:
    return MODE_RULES[mode]
