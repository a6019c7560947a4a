"""Match controller: sequences the score engine and owns persistence side effects."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from abacus.logic.enums import ControllerPhase, GameMode, SwipeDirection
from abacus.logic.exceptions import EndGameNotRequestedError, MatchNotConfiguredError
from abacus.logic.match import (
    board_view,
    build_history_entry,
    configure_match,
    display_name,
    drag_entrant_bead,
    finish_match,
    focus_entrant,
    history_detail,
    new_match_state,
    record_game,
    reset_all_rods,
    reset_entrant,
    set_custom_name,
    set_rod_value,
    set_win_counter,
    update_match,
)
from abacus.logic.modes import get_mode_rules
from abacus.logic.timer import ModeSwitchCooldown
from abacus.logic.types import BoardView

if TYPE_CHECKING:
    from collections.abc import Callable

    from abacus.logic.enums import AbacusStyle, AppLanguage, MatchMode, ScoreDisplayMode
    from abacus.logic.state import MatchState
    from abacus.logic.types import GameSessionRecord, HistoryDetailView, HistoryEntry
    from abacus.session.history import HistoryRepository
    from abacus.session.preferences import Preferences, PreferencesRepository

logger = structlog.get_logger()


def swipe_target(current: GameMode, direction: SwipeDirection) -> GameMode | None:
    """Return the mode a swipe leads to, or None when the swipe does not apply to the current mode."""
    if direction == SwipeDirection.TOGGLE:
        return current.toggled()
    if direction == SwipeDirection.LEFT and current == GameMode.MODE_365:
        return GameMode.MODE_101
    if direction == SwipeDirection.RIGHT and current == GameMode.MODE_101:
        return GameMode.MODE_365
    return None


class MatchController:
    """
    State machine over one device's match.

    Phases:
    - UNCONFIGURED: no match mode chosen yet; only select_match_mode is accepted.
    - ACTIVE: rods, mode switches, resets and renames are accepted.
    - END_CONFIRM_PENDING: the end-of-match prompt is showing; confirm writes
      history, cancel returns to ACTIVE untouched.

    All methods are synchronous and run on the event loop thread. Mode
    switches schedule the cooldown release on the running loop.
    """

    def __init__(
        self,
        history: HistoryRepository,
        preferences: PreferencesRepository,
        cooldown: ModeSwitchCooldown | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._history = history
        self._preferences = preferences
        self._cooldown = cooldown or ModeSwitchCooldown()
        self._clock = clock or (lambda: datetime.now(tz=UTC))

        prefs = preferences.load()
        self._score_display = prefs.score_display
        self._state: MatchState | None = None
        self._phase = ControllerPhase.UNCONFIGURED
        if prefs.match_mode is not None:
            self._state = new_match_state(prefs.match_mode, score_display=prefs.score_display)
            self._phase = ControllerPhase.ACTIVE

    @property
    def phase(self) -> ControllerPhase:
        return self._phase

    @property
    def state(self) -> MatchState | None:
        return self._state

    @property
    def cooldown(self) -> ModeSwitchCooldown:
        return self._cooldown

    def _require_state(self) -> MatchState:
        if self._state is None:
            raise MatchNotConfiguredError("choose a match mode first")
        return self._state

    # --- Configuration ---

    def select_match_mode(self, match_mode: MatchMode) -> None:
        """
        Start a fresh match for the chosen entrant count, from any phase.

        Choosing the mode already in play only persists it; the running match
        and the current phase are left alone.
        """
        self._preferences.save(match_mode=match_mode)
        if self._state is not None and self._state.match_mode == match_mode:
            logger.debug("match mode unchanged", match_mode=match_mode)
            return
        if self._state is None:
            self._state = new_match_state(match_mode, score_display=self._score_display)
        else:
            self._state = configure_match(self._state, match_mode)
        self._phase = ControllerPhase.ACTIVE
        logger.info("match configured", match_mode=match_mode, entrants=match_mode.players_count)

    def set_score_display(self, score_display: ScoreDisplayMode) -> None:
        self._preferences.save(score_display=score_display)
        self._score_display = score_display
        if self._state is not None:
            self._state = update_match(self._state, score_display=score_display)

    def set_abacus_style(self, style: AbacusStyle) -> None:
        self._preferences.save(abacus_style=style)

    def set_app_language(self, language: AppLanguage) -> None:
        self._preferences.save(app_language=language)

    def complete_onboarding(self) -> None:
        self._preferences.save(has_seen_onboarding=True)

    def preferences(self) -> Preferences:
        return self._preferences.load()

    def switch_game_mode(self, direction: SwipeDirection = SwipeDirection.TOGGLE) -> bool:
        """
        Flip between 365 and 101 without touching the rods.

        Returns False when the swipe does not lead anywhere from the current
        mode, or when a previous switch is still cooling down.
        """
        state = self._require_state()
        target = swipe_target(state.game_mode, direction)
        if target is None:
            return False
        if not self._cooldown.try_engage():
            logger.debug("mode switch suppressed by cooldown", direction=direction)
            return False
        self._state = update_match(state, game_mode=target)
        logger.info("game mode switched", game_mode=target)
        return True

    def toggle_game_mode(self) -> bool:
        return self.switch_game_mode(SwipeDirection.TOGGLE)

    # --- Rods ---

    def set_rod(self, entrant: int, rod: int, value: int) -> None:
        """Apply a bead-drag release carrying the new bead count for one rod."""
        state = self._require_state()
        self._state = set_rod_value(state, entrant, rod, value)

    def drag_bead(self, entrant: int, rod: int, bead_index: int, *, to_counted: bool) -> None:
        state = self._require_state()
        self._state = drag_entrant_bead(state, entrant, rod, bead_index, to_counted=to_counted)

    def set_win_counter(self, entrant: int, value: int) -> None:
        state = self._require_state()
        self._state = set_win_counter(state, entrant, value)
        logger.info("win counter set", entrant=entrant, wins=list(self._state.win_counters))

    def focus_entrant(self, index: int) -> None:
        self._state = focus_entrant(self._require_state(), index)

    def reset_focused_entrant(self) -> None:
        state = self._require_state()
        self._state = reset_entrant(state, state.focused_entrant)

    def reset_all(self) -> None:
        """Zero every rod; wins and session records are kept."""
        self._state = reset_all_rods(self._require_state())

    def reset_by_shake(self) -> GameSessionRecord | None:
        """Close the current game of the session and clear the rods without writing history."""
        state = self._require_state()
        scores = state.scores
        self._state, winner, record = record_game(state, now=self._clock())
        logger.info("game closed by shake", scores=scores, winner=winner, wins=list(self._state.win_counters))
        return record

    # --- End of match ---

    def request_end_game(self) -> None:
        self._require_state()
        self._phase = ControllerPhase.END_CONFIRM_PENDING

    def cancel_end_game(self) -> None:
        if self._phase == ControllerPhase.END_CONFIRM_PENDING:
            self._phase = ControllerPhase.ACTIVE

    def confirm_end_game(self) -> HistoryEntry:
        """
        Record the match in history and start the next one from zero.

        A failed history write loses the entry but still resets the match.
        """
        state = self._require_state()
        if self._phase != ControllerPhase.END_CONFIRM_PENDING:
            raise EndGameNotRequestedError("end of match was not requested")

        entry = build_history_entry(state, now=self._clock())
        if not self._history.append(entry):
            logger.warning("match ended but history entry was not saved", entry_id=entry.entry_id)

        self._state = finish_match(state)
        self._phase = ControllerPhase.ACTIVE
        logger.info("match ended", entry_id=entry.entry_id, scores=list(entry.scores), winner=entry.winner)
        return entry

    # --- Names ---

    def set_custom_name(self, index: int, name: str) -> None:
        self._state = set_custom_name(self._require_state(), index, name)

    def display_name(self, index: int) -> str:
        return display_name(self._require_state(), index)

    # --- History ---

    def history(self) -> list[HistoryEntry]:
        return self._history.list_entries()

    def history_detail(self, entry_id: str) -> HistoryDetailView | None:
        """Return the detail view of one history entry, or None if it is gone."""
        for entry in self._history.list_entries():
            if entry.entry_id == entry_id:
                return history_detail(entry)
        return None

    def delete_history_entry(self, entry_id: str) -> bool:
        return self._history.delete(entry_id)

    # --- Views ---

    def board(self) -> BoardView:
        if self._state is None:
            game_mode = GameMode.MODE_365
            return BoardView(
                phase=self._phase,
                game_mode=game_mode,
                score_display=self._score_display,
                multipliers=get_mode_rules(game_mode).multipliers,
            )
        return board_view(self._state, self._phase)
