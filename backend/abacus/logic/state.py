"""
Match state model.

MatchState is frozen; every change goes through the reducers in
abacus.logic.match, which return a new state.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from abacus.logic.enums import GameMode, MatchMode, ScoreDisplayMode
from abacus.logic.modes import get_mode_rules
from abacus.logic.rods import RodSet, compute_score
from abacus.logic.types import GameSessionRecord


class MatchState(BaseModel):
    """
    Live state of the match being counted.

    ``rods`` and ``win_counters`` always hold exactly one slot per entrant of
    ``match_mode``. ``session_records`` collects shake-reset snapshots until
    the next history write.
    """

    model_config = ConfigDict(frozen=True)

    match_mode: MatchMode
    game_mode: GameMode = GameMode.MODE_365
    score_display: ScoreDisplayMode = ScoreDisplayMode.PER_TEAM
    rods: tuple[RodSet, ...]
    win_counters: tuple[int, ...]
    custom_names: tuple[str, ...] = ()
    session_records: tuple[GameSessionRecord, ...] = ()
    focused_entrant: int = 0

    @model_validator(mode="after")
    def _validate_entrant_slots(self) -> MatchState:
        count = self.match_mode.players_count
        if len(self.rods) != count:
            raise ValueError(f"{self.match_mode} needs {count} rod sets, got {len(self.rods)}")
        if len(self.win_counters) != count:
            raise ValueError(f"{self.match_mode} needs {count} win counters, got {len(self.win_counters)}")
        return self

    @property
    def entrant_count(self) -> int:
        return self.match_mode.players_count

    @property
    def multipliers(self) -> tuple[int, ...]:
        return get_mode_rules(self.game_mode).multipliers

    @property
    def scores(self) -> list[int]:
        multipliers = self.multipliers
        return [compute_score(rods.values, multipliers) for rods in self.rods]

    @property
    def is_pairs(self) -> bool:
        return self.match_mode == MatchMode.PAIRS_2

    @property
    def shared_board(self) -> bool:
        """The combined board only exists for two teams."""
        return self.is_pairs and self.score_display == ScoreDisplayMode.SHARED_BOARD
