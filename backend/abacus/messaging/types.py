from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from abacus.logic.enums import MatchMode, ScoreDisplayMode, SwipeDirection
from abacus.logic.modes import ROD_CAPACITY, ROD_COUNT
from abacus.logic.types import BoardView

# ASCII control character boundaries for input validation
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F

MAX_NAME_LENGTH = 40


class ClientEventType(StrEnum):
    SELECT_MATCH_MODE = "select_match_mode"
    SET_SCORE_DISPLAY = "set_score_display"
    SWITCH_GAME_MODE = "switch_game_mode"
    SET_ROD = "set_rod"
    DRAG_BEAD = "drag_bead"
    FOCUS_ENTRANT = "focus_entrant"
    RESET_ENTRANT = "reset_entrant"
    RESET_ALL = "reset_all"
    SHAKE = "shake"
    REQUEST_END_GAME = "request_end_game"
    CANCEL_END_GAME = "cancel_end_game"
    CONFIRM_END_GAME = "confirm_end_game"
    RENAME_ENTRANT = "rename_entrant"
    DELETE_HISTORY_ENTRY = "delete_history_entry"
    SET_WIN_COUNTER = "set_win_counter"


class ErrorCode(StrEnum):
    INVALID_EVENT = "invalid_event"
    MATCH_NOT_CONFIGURED = "match_not_configured"
    MATCH_RULE_VIOLATION = "match_rule_violation"


_ENTRANT_FIELD = Field(ge=0)
_ROD_FIELD = Field(ge=0, lt=ROD_COUNT)


class SelectMatchModeEvent(BaseModel):
    type: Literal[ClientEventType.SELECT_MATCH_MODE] = ClientEventType.SELECT_MATCH_MODE
    match_mode: MatchMode


class SetScoreDisplayEvent(BaseModel):
    type: Literal[ClientEventType.SET_SCORE_DISPLAY] = ClientEventType.SET_SCORE_DISPLAY
    score_display: ScoreDisplayMode


class SwitchGameModeEvent(BaseModel):
    type: Literal[ClientEventType.SWITCH_GAME_MODE] = ClientEventType.SWITCH_GAME_MODE
    direction: SwipeDirection = SwipeDirection.TOGGLE


class SetRodEvent(BaseModel):
    """Bead-drag release: the rod's new bead count."""

    type: Literal[ClientEventType.SET_ROD] = ClientEventType.SET_ROD
    entrant: int = _ENTRANT_FIELD
    rod: int = _ROD_FIELD
    value: int = Field(ge=0, le=ROD_CAPACITY)


class DragBeadEvent(BaseModel):
    type: Literal[ClientEventType.DRAG_BEAD] = ClientEventType.DRAG_BEAD
    entrant: int = _ENTRANT_FIELD
    rod: int = _ROD_FIELD
    bead_index: int = Field(ge=0, lt=ROD_CAPACITY)
    to_counted: bool


class SetWinCounterEvent(BaseModel):
    """Win rod drag on the shared board."""

    type: Literal[ClientEventType.SET_WIN_COUNTER] = ClientEventType.SET_WIN_COUNTER
    entrant: int = _ENTRANT_FIELD
    value: int = Field(ge=0, le=ROD_CAPACITY)


class FocusEntrantEvent(BaseModel):
    type: Literal[ClientEventType.FOCUS_ENTRANT] = ClientEventType.FOCUS_ENTRANT
    entrant: int


class ResetEntrantEvent(BaseModel):
    type: Literal[ClientEventType.RESET_ENTRANT] = ClientEventType.RESET_ENTRANT


class ResetAllEvent(BaseModel):
    type: Literal[ClientEventType.RESET_ALL] = ClientEventType.RESET_ALL


class ShakeEvent(BaseModel):
    type: Literal[ClientEventType.SHAKE] = ClientEventType.SHAKE


class RequestEndGameEvent(BaseModel):
    type: Literal[ClientEventType.REQUEST_END_GAME] = ClientEventType.REQUEST_END_GAME


class CancelEndGameEvent(BaseModel):
    type: Literal[ClientEventType.CANCEL_END_GAME] = ClientEventType.CANCEL_END_GAME


class ConfirmEndGameEvent(BaseModel):
    type: Literal[ClientEventType.CONFIRM_END_GAME] = ClientEventType.CONFIRM_END_GAME


class RenameEntrantEvent(BaseModel):
    type: Literal[ClientEventType.RENAME_ENTRANT] = ClientEventType.RENAME_ENTRANT
    entrant: int = _ENTRANT_FIELD
    name: str = Field(max_length=MAX_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        if any(ord(c) < _SPACE_ORD or ord(c) == _DEL_ORD for c in v):
            raise ValueError("name must not contain control characters")
        return v


class DeleteHistoryEntryEvent(BaseModel):
    type: Literal[ClientEventType.DELETE_HISTORY_ENTRY] = ClientEventType.DELETE_HISTORY_ENTRY
    entry_id: str = Field(min_length=1, max_length=100)


ClientEvent = Annotated[
    SelectMatchModeEvent
    | SetScoreDisplayEvent
    | SwitchGameModeEvent
    | SetRodEvent
    | DragBeadEvent
    | FocusEntrantEvent
    | ResetEntrantEvent
    | ResetAllEvent
    | ShakeEvent
    | RequestEndGameEvent
    | CancelEndGameEvent
    | ConfirmEndGameEvent
    | RenameEntrantEvent
    | DeleteHistoryEntryEvent
    | SetWinCounterEvent,
    Field(discriminator="type"),
]


class BoardSnapshot(BoardView):
    """Board state sent back to the UI after every accepted event."""

    type: Literal["board"] = "board"
    game_mode_switched: bool | None = None
    history_entry_id: str | None = None


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    code: ErrorCode
    message: str


_client_event_adapter = TypeAdapter(ClientEvent)


def parse_client_event(data: dict[str, Any]) -> ClientEvent:
    """Parse a raw dict into a typed ClientEvent, discriminated by ``type``."""
    return _client_event_adapter.validate_python(data)
