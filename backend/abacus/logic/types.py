"""
Pydantic models that cross component boundaries.

GameSessionRecord and HistoryEntry are persisted; their aliases are the
stored field names and must stay stable. EntrantView and BoardView are the
read-only snapshot handed to the UI after every event; the history detail
views are the read-only projection of one stored entry.
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from abacus.logic.enums import ControllerPhase, GameMode, MatchMode, ScoreDisplayMode


def _new_id() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(tz=UTC)


class GameSessionRecord(BaseModel):
    """Outcome of one game inside a multi-game session, captured on a shake reset."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_id: str = Field(default_factory=_new_id, alias="id")
    date: datetime = Field(default_factory=_now)
    scores: tuple[int, ...]
    winner: int | None = None


class HistoryEntry(BaseModel):
    """Finalized match record written when the end of a match is confirmed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    entry_id: str = Field(default_factory=_new_id, alias="id")
    date: datetime = Field(default_factory=_now)
    match_mode: MatchMode = Field(alias="matchMode")
    game_mode: GameMode = Field(alias="gameMode")
    score_display: ScoreDisplayMode = Field(alias="scoreDisplayMode")
    scores: tuple[int, ...]
    names: tuple[str, ...] | None = None  # pairs only
    winner: int | None = None
    total_wins: tuple[int, ...] | None = Field(default=None, alias="totalWins")  # pairs only
    game_sessions: tuple[GameSessionRecord, ...] | None = Field(default=None, alias="gameSessions")  # pairs only


class EntrantView(BaseModel):
    """What the board shows for one player or team."""

    index: int
    name: str
    rods: tuple[int, ...]
    score: int
    is_highlighted: bool
    wins: int


class BoardView(BaseModel):
    """Full board snapshot returned to the UI."""

    phase: ControllerPhase
    match_mode: MatchMode | None = None
    game_mode: GameMode
    score_display: ScoreDisplayMode
    shared_board: bool = False
    focused_entrant: int = 0
    multipliers: tuple[int, ...]
    entrants: list[EntrantView] = Field(default_factory=list)


class HistoryEntrantView(BaseModel):
    """One row of a finished match; ``wins`` is only known for pairs sessions."""

    index: int
    name: str
    score: int
    wins: int | None = None
    is_winner: bool


class HistoryDetailView(BaseModel):
    entry_id: str
    date: datetime
    match_mode: MatchMode
    game_mode: GameMode
    score_display: ScoreDisplayMode
    entrants: list[HistoryEntrantView]
    game_sessions: list[GameSessionRecord] = Field(default_factory=list)
