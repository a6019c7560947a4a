from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from abacus.logic.exceptions import MatchError, MatchNotConfiguredError
from abacus.messaging.types import (
    BoardSnapshot,
    CancelEndGameEvent,
    ConfirmEndGameEvent,
    DeleteHistoryEntryEvent,
    DragBeadEvent,
    ErrorCode,
    ErrorMessage,
    FocusEntrantEvent,
    RenameEntrantEvent,
    RequestEndGameEvent,
    ResetAllEvent,
    ResetEntrantEvent,
    SelectMatchModeEvent,
    SetRodEvent,
    SetScoreDisplayEvent,
    SetWinCounterEvent,
    ShakeEvent,
    SwitchGameModeEvent,
    parse_client_event,
)

if TYPE_CHECKING:
    from abacus.messaging.types import ClientEvent
    from abacus.session.controller import MatchController

logger = logging.getLogger(__name__)


class EventRouter:
    """
    Routes UI events to the match controller.

    Every call returns either a fresh board snapshot or an error message;
    nothing raised by the controller for a bad event escapes.
    """

    def __init__(self, controller: MatchController) -> None:
        self._controller = controller

    @property
    def controller(self) -> MatchController:
        return self._controller

    async def handle_event(self, raw_event: dict[str, Any]) -> BoardSnapshot | ErrorMessage:
        try:
            event = parse_client_event(raw_event)
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning("invalid event: %s", e)
            return ErrorMessage(code=ErrorCode.INVALID_EVENT, message=str(e))

        try:
            extras = self._dispatch(event)
        except MatchNotConfiguredError as e:
            logger.warning("event %s before match configuration", event.type)
            return ErrorMessage(code=ErrorCode.MATCH_NOT_CONFIGURED, message=str(e))
        except MatchError as e:
            logger.warning("event %s rejected: %s", event.type, e)
            return ErrorMessage(code=ErrorCode.MATCH_RULE_VIOLATION, message=str(e))

        board = self._controller.board()
        return BoardSnapshot(**dict(board), **extras)

    def _dispatch(self, event: ClientEvent) -> dict[str, Any]:  # noqa: PLR0911, PLR0912, C901
        """Apply the event and return any extra snapshot fields it produced."""
        controller = self._controller
        if isinstance(event, SelectMatchModeEvent):
            controller.select_match_mode(event.match_mode)
        elif isinstance(event, SetScoreDisplayEvent):
            controller.set_score_display(event.score_display)
        elif isinstance(event, SwitchGameModeEvent):
            return {"game_mode_switched": controller.switch_game_mode(event.direction)}
        elif isinstance(event, SetRodEvent):
            controller.set_rod(event.entrant, event.rod, event.value)
        elif isinstance(event, DragBeadEvent):
            controller.drag_bead(event.entrant, event.rod, event.bead_index, to_counted=event.to_counted)
        elif isinstance(event, SetWinCounterEvent):
            controller.set_win_counter(event.entrant, event.value)
        elif isinstance(event, FocusEntrantEvent):
            controller.focus_entrant(event.entrant)
        elif isinstance(event, ResetEntrantEvent):
            controller.reset_focused_entrant()
        elif isinstance(event, ResetAllEvent):
            controller.reset_all()
        elif isinstance(event, ShakeEvent):
            controller.reset_by_shake()
        elif isinstance(event, RequestEndGameEvent):
            controller.request_end_game()
        elif isinstance(event, CancelEndGameEvent):
            controller.cancel_end_game()
        elif isinstance(event, ConfirmEndGameEvent):
            entry = controller.confirm_end_game()
            return {"history_entry_id": entry.entry_id}
        elif isinstance(event, RenameEntrantEvent):
            controller.set_custom_name(event.entrant, event.name)
        elif isinstance(event, DeleteHistoryEntryEvent):
            if not controller.delete_history_entry(event.entry_id):
                logger.info("history entry %s not deleted", event.entry_id)
        return {}
