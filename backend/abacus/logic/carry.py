"""
Carry resolution between rods.

A rod that fills up is emptied and its value is moved onto the next rod as
an equivalent number of beads. The conversion uses integer division, so
multiplier ratios that do not divide evenly lose the fractional remainder;
both built-in modes divide exactly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from abacus.logic.modes import ROD_CAPACITY, ROD_COUNT
from abacus.logic.rods import RodSet, check_rod_index

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = structlog.get_logger()

TOP_ROD = ROD_COUNT - 1


def carry_unit(multipliers: Sequence[int], rod: int) -> int:
    """Beads on ``rod + 1`` worth one full ``rod`` (truncated)."""
    return (ROD_CAPACITY * multipliers[rod]) // multipliers[rod + 1]


def add_beads_with_carry(rods: RodSet, rod: int, beads: int, multipliers: Sequence[int]) -> RodSet:
    """
    Add beads to a rod, pushing every full ten upward.

    The top rod has nowhere to overflow into, so it is clamped to the rod
    capacity and any excess is discarded.
    """
    values = list(rods.values)
    while beads > 0 and rod < ROD_COUNT:
        total = values[rod] + beads
        if rod == TOP_ROD:
            values[rod] = min(ROD_CAPACITY, total)
            break
        overflow, values[rod] = divmod(total, ROD_CAPACITY)
        beads = overflow * carry_unit(multipliers, rod)
        rod += 1
    return RodSet(values=tuple(values))


def perform_carry(rods: RodSet, from_rod: int, multipliers: Sequence[int]) -> RodSet:
    """
    Empty ``from_rod`` and move its value onto the next rod.

    The top rod never carries out, and a ratio that truncates to zero beads
    aborts the carry; both return the rods unchanged.
    """
    check_rod_index(from_rod)
    if from_rod == TOP_ROD:
        return rods

    beads_to_move = carry_unit(multipliers, from_rod)
    if beads_to_move == 0:
        logger.debug("carry aborted, ratio truncates to zero", from_rod=from_rod, multipliers=list(multipliers))
        return rods

    emptied = rods.with_value(from_rod, 0)
    return add_beads_with_carry(emptied, from_rod + 1, beads_to_move, multipliers)


def release_rod(rods: RodSet, rod: int, value: int, multipliers: Sequence[int]) -> RodSet:
    """Apply a bead-drag release; filling a rod to capacity triggers a carry."""
    updated = rods.with_value(rod, value)
    if updated[rod] == ROD_CAPACITY:
        return perform_carry(updated, rod, multipliers)
    return updated
