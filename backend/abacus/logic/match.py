"""
Pure state transitions for a match.

Every function takes a frozen MatchState and returns a new one (or a value
derived from it). Nothing here persists or logs; the match
controller sequences these transitions and owns the side effects.
"""

from __future__ import annotations

from datetime import UTC, datetime

from abacus.logic.carry import release_rod
from abacus.logic.enums import ControllerPhase, GameMode, MatchMode, ScoreDisplayMode
from abacus.logic.exceptions import InvalidEntrantError, SharedBoardRequiredError
from abacus.logic.modes import ROD_CAPACITY
from abacus.logic.rods import RodSet, check_rod_index, drag_bead
from abacus.logic.state import MatchState
from abacus.logic.types import (
    BoardView,
    EntrantView,
    GameSessionRecord,
    HistoryDetailView,
    HistoryEntrantView,
    HistoryEntry,
)
from abacus.logic.winner import determine_winner, live_highlight, most_wins

_MATCH_FIELDS = set(MatchState.model_fields)


def _fresh_slots(match_mode: MatchMode) -> tuple[tuple[RodSet, ...], tuple[int, ...]]:
    count = match_mode.players_count
    return tuple(RodSet() for _ in range(count)), (0,) * count


def new_match_state(
    match_mode: MatchMode,
    *,
    game_mode: GameMode = GameMode.MODE_365,
    score_display: ScoreDisplayMode = ScoreDisplayMode.PER_TEAM,
    custom_names: tuple[str, ...] = (),
) -> MatchState:
    """Create a match with empty rods and zero wins for every entrant."""
    rods, win_counters = _fresh_slots(match_mode)
    return MatchState(
        match_mode=match_mode,
        game_mode=game_mode,
        score_display=score_display,
        rods=rods,
        win_counters=win_counters,
        custom_names=custom_names,
    )


def update_match(state: MatchState, **updates: object) -> MatchState:
    """
    Return a new state with the given fields replaced.

    Raises:
        ValueError: If an update names a field MatchState does not have

    """
    invalid_fields = set(updates) - _MATCH_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid match fields: {invalid_fields}")
    return MatchState.model_validate({**dict(state), **updates})


def configure_match(state: MatchState | None, match_mode: MatchMode) -> MatchState:
    """
    Start over with a (possibly different) entrant count.

    Rods and win counters are resized and zeroed, pending session records are
    dropped, and an out-of-range focus falls back to the first entrant. The
    game mode, display mode, and custom names survive reconfiguration.
    """
    if state is None:
        return new_match_state(match_mode)
    rods, win_counters = _fresh_slots(match_mode)
    focused = state.focused_entrant if state.focused_entrant < match_mode.players_count else 0
    return update_match(
        state,
        match_mode=match_mode,
        rods=rods,
        win_counters=win_counters,
        session_records=(),
        focused_entrant=focused,
    )


def check_entrant(state: MatchState, index: int) -> None:
    if not (0 <= index < state.entrant_count):
        raise InvalidEntrantError(index=index, count=state.entrant_count)


def replace_rods(state: MatchState, entrant: int, rods: RodSet) -> MatchState:
    check_entrant(state, entrant)
    all_rods = list(state.rods)
    all_rods[entrant] = rods
    return update_match(state, rods=tuple(all_rods))


def set_rod_value(state: MatchState, entrant: int, rod: int, value: int) -> MatchState:
    """Apply a bead-drag release on one rod, carrying when the rod fills up."""
    check_entrant(state, entrant)
    updated = release_rod(state.rods[entrant], rod, value, state.multipliers)
    return replace_rods(state, entrant, updated)


def drag_entrant_bead(state: MatchState, entrant: int, rod: int, bead_index: int, *, to_counted: bool) -> MatchState:
    check_entrant(state, entrant)
    check_rod_index(rod)
    current = state.rods[entrant][rod]
    return set_rod_value(state, entrant, rod, drag_bead(current, bead_index, to_counted=to_counted))


def focus_entrant(state: MatchState, index: int) -> MatchState:
    """Select the entrant shown on single-board layouts; invalid indices fall back to 0."""
    if not (0 <= index < state.entrant_count):
        index = 0
    return update_match(state, focused_entrant=index)


def reset_entrant(state: MatchState, index: int) -> MatchState:
    check_entrant(state, index)
    if state.rods[index].is_empty:
        return state
    return replace_rods(state, index, RodSet())


def reset_all_rods(state: MatchState) -> MatchState:
    """Zero every rod. Win counters and session records are untouched."""
    if all(rods.is_empty for rods in state.rods):
        return state
    return update_match(state, rods=tuple(RodSet() for _ in state.rods))


def set_win_counter(state: MatchState, entrant: int, value: int) -> MatchState:
    """
    Correct a team's win count by hand, as dragging its win rod would.

    The count is clamped to the beads one rod holds.

    Raises:
        SharedBoardRequiredError: If the shared board is not in effect

    """
    check_entrant(state, entrant)
    if not state.shared_board:
        raise SharedBoardRequiredError("win counters are only shown on the shared board")
    win_counters = list(state.win_counters)
    win_counters[entrant] = max(0, min(ROD_CAPACITY, value))
    return update_match(state, win_counters=tuple(win_counters))


def record_game(
    state: MatchState,
    now: datetime | None = None,
) -> tuple[MatchState, int | None, GameSessionRecord | None]:
    """
    Close one game of a multi-game session and clear the rods.

    The winner is decided on the scores before they are zeroed. On the shared
    board the winner's counter goes up; in a pairs match the scores are kept
    as a session record for the next history entry.
    """
    scores = state.scores
    winner = determine_winner(scores, state.game_mode)

    win_counters = list(state.win_counters)
    if winner is not None and state.shared_board:
        win_counters[winner] += 1

    record: GameSessionRecord | None = None
    session_records = state.session_records
    if state.is_pairs:
        record = GameSessionRecord(date=now or datetime.now(tz=UTC), scores=tuple(scores), winner=winner)
        session_records = (*session_records, record)

    cleared = reset_all_rods(state)
    return update_match(cleared, win_counters=tuple(win_counters), session_records=session_records), winner, record


def build_history_entry(state: MatchState, now: datetime | None = None) -> HistoryEntry:
    """
    Snapshot the match for the history log.

    Names, win totals and session records are only kept for pairs matches;
    empty win totals or session lists are stored as absent.
    """
    scores = state.scores
    winner = determine_winner(scores, state.game_mode)

    names: tuple[str, ...] | None = None
    total_wins: tuple[int, ...] | None = None
    sessions: tuple[GameSessionRecord, ...] | None = None
    if state.is_pairs:
        names = padded_names(state)
        total_wins = state.win_counters or None
        sessions = state.session_records or None

    return HistoryEntry(
        date=now or datetime.now(tz=UTC),
        match_mode=state.match_mode,
        game_mode=state.game_mode,
        score_display=state.score_display,
        scores=tuple(scores),
        names=names,
        winner=winner,
        total_wins=total_wins,
        game_sessions=sessions,
    )


def finish_match(state: MatchState) -> MatchState:
    """Clear everything a finished match accumulated so the next one starts fresh."""
    cleared = reset_all_rods(state)
    return update_match(cleared, win_counters=(0,) * state.entrant_count, session_records=())


def padded_names(state: MatchState) -> tuple[str, ...]:
    names = state.custom_names[: state.entrant_count]
    return names + ("",) * (state.entrant_count - len(names))


def set_custom_name(state: MatchState, index: int, name: str) -> MatchState:
    check_entrant(state, index)
    names = list(state.custom_names)
    if len(names) <= index:
        names.extend([""] * (index + 1 - len(names)))
    names[index] = name
    return update_match(state, custom_names=tuple(names))


def custom_name(state: MatchState, index: int) -> str | None:
    """Return the trimmed custom name, or None when it is unset or blank."""
    if index >= len(state.custom_names):
        return None
    name = state.custom_names[index].strip()
    return name or None


def default_name(match_mode: MatchMode, index: int) -> str:
    if match_mode == MatchMode.PAIRS_2:
        return f"Team {index + 1}"
    return f"Player {index + 1}"


def display_name(state: MatchState, index: int) -> str:
    """Custom names only apply to pairs matches; everyone else gets the default label."""
    if state.is_pairs:
        name = custom_name(state, index)
        if name is not None:
            return name
    return default_name(state.match_mode, index)


def history_detail(entry: HistoryEntry) -> HistoryDetailView:
    """
    Project a stored entry for the history detail screen.

    An entrant counts as a winner if it won the final game or holds the most
    session wins.
    """
    leaders = most_wins(entry.total_wins or ())
    entrants = []
    for index, score in enumerate(entry.scores):
        name = entry.names[index].strip() if entry.names and index < len(entry.names) else ""
        wins = entry.total_wins[index] if entry.total_wins and index < len(entry.total_wins) else None
        entrants.append(
            HistoryEntrantView(
                index=index,
                name=name or default_name(entry.match_mode, index),
                score=score,
                wins=wins,
                is_winner=entry.winner == index or index in leaders,
            ),
        )
    return HistoryDetailView(
        entry_id=entry.entry_id,
        date=entry.date,
        match_mode=entry.match_mode,
        game_mode=entry.game_mode,
        score_display=entry.score_display,
        entrants=entrants,
        game_sessions=list(entry.game_sessions or ()),
    )


def board_view(state: MatchState, phase: ControllerPhase) -> BoardView:
    scores = state.scores
    highlight = live_highlight(scores, state.game_mode)
    entrants = [
        EntrantView(
            index=index,
            name=display_name(state, index),
            rods=state.rods[index].values,
            score=scores[index],
            is_highlighted=highlight[index],
            wins=state.win_counters[index],
        )
        for index in range(state.entrant_count)
    ]
    return BoardView(
        phase=phase,
        match_mode=state.match_mode,
        game_mode=state.game_mode,
        score_display=state.score_display,
        shared_board=state.shared_board,
        focused_entrant=state.focused_entrant,
        multipliers=state.multipliers,
        entrants=entrants,
    )
