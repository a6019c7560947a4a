"""
Rod model and score calculation.

A rod set holds one bead count per significance level. Scores are never
stored; they are derived from the bead counts and the active mode's
multipliers every time they are needed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from abacus.logic.exceptions import InvalidRodError
from abacus.logic.modes import ROD_CAPACITY, ROD_COUNT

if TYPE_CHECKING:
    from collections.abc import Sequence

BeadCount = Annotated[int, Field(ge=0, le=ROD_CAPACITY)]


class RodSet(BaseModel):
    """Bead counts for one entrant, ordered low -> high significance."""

    model_config = ConfigDict(frozen=True)

    values: tuple[BeadCount, ...] = (0,) * ROD_COUNT

    @field_validator("values")
    @classmethod
    def _validate_length(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if len(v) != ROD_COUNT:
            raise ValueError(f"expected {ROD_COUNT} rods, got {len(v)}")
        return v

    def __getitem__(self, rod: int) -> int:
        return self.values[rod]

    @property
    def is_empty(self) -> bool:
        return not any(self.values)

    def with_value(self, rod: int, value: int) -> RodSet:
        """Return a copy with one rod replaced; the value is clamped to the rod capacity."""
        check_rod_index(rod)
        values = list(self.values)
        values[rod] = max(0, min(ROD_CAPACITY, value))
        return RodSet(values=tuple(values))


def check_rod_index(rod: int) -> None:
    if not (0 <= rod < ROD_COUNT):
        raise InvalidRodError(rod=rod, rods=ROD_COUNT)


def compute_score(values: Sequence[int], multipliers: Sequence[int]) -> int:
    """Return the dot product of bead counts and rod multipliers."""
    return sum(count * mult for count, mult in zip(values, multipliers))


def drag_bead(current: int, bead_index: int, *, to_counted: bool) -> int:
    """
    Return the new bead count after a single bead is dragged and released.

    Dragging bead ``bead_index`` to the counted side pulls every bead before
    it along; dragging it back releases it and every bead after it. Dropping
    a bead on the side it already sits on leaves the count unchanged.
    """
    if to_counted:
        return min(ROD_CAPACITY, max(current, bead_index + 1))
    return max(0, min(current, bead_index))
