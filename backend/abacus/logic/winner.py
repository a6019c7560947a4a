"""
Win evaluation.

Two separate questions are answered here: who wins the game when it is
ended (ties at the top go to the lowest index), and which entrant the board
should light up right now (ties at the top light up nobody).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from abacus.logic.modes import get_mode_rules

if TYPE_CHECKING:
    from collections.abc import Sequence

    from abacus.logic.enums import GameMode


def is_winning_score(score: int, mode: GameMode) -> bool:
    return get_mode_rules(mode).is_winning(score)


def determine_winner(scores: Sequence[int], mode: GameMode) -> int | None:
    """
    Return the index of the game winner, or None when nobody crossed the threshold.

    Among several eligible entrants the highest score wins; equal top scores
    go to the lowest index.
    """
    eligible = [(index, score) for index, score in enumerate(scores) if is_winning_score(score, mode)]
    if not eligible:
        return None
    best = max(score for _, score in eligible)
    return next(index for index, score in eligible if score == best)


def live_highlight(scores: Sequence[int], mode: GameMode) -> list[bool]:
    """Flag the single eligible entrant whose score beats every other eligible score."""
    eligible = {index: score for index, score in enumerate(scores) if is_winning_score(score, mode)}
    flags = [False] * len(scores)
    for index, score in eligible.items():
        if all(score > other for other_index, other in eligible.items() if other_index != index):
            flags[index] = True
    return flags


def most_wins(win_counters: Sequence[int]) -> set[int]:
    """Return indices holding the highest win count, empty when nobody has won yet."""
    if not win_counters:
        return set()
    best = max(win_counters)
    if best <= 0:
        return set()
    return {index for index, wins in enumerate(win_counters) if wins == best}
