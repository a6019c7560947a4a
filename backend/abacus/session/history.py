"""Match history persistence.

The history is one JSON list stored under a single key. Every change reads
the whole list, edits it, and writes the whole list back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog
from pydantic import TypeAdapter, ValidationError

from abacus.logic.types import HistoryEntry

if TYPE_CHECKING:
    from shared.storage import KeyValueStorage

logger = structlog.get_logger()

HISTORY_KEY = "gameHistory"

_history_adapter = TypeAdapter(list[HistoryEntry])


def encode_history(entries: list[HistoryEntry]) -> str:
    return _history_adapter.dump_json(entries, by_alias=True).decode("utf-8")


def decode_history(raw: str | None) -> list[HistoryEntry]:
    """Decode stored history. Absent, empty, or malformed data decodes to an empty list."""
    if not raw:
        return []
    try:
        return _history_adapter.validate_json(raw)
    except ValidationError:
        logger.warning("stored history is malformed, treating as empty", exc_info=True)
        return []


class HistoryRepository(ABC):
    """Abstract interface for match history persistence."""

    @abstractmethod
    def list_entries(self) -> list[HistoryEntry]: ...

    @abstractmethod
    def append(self, entry: HistoryEntry) -> bool: ...

    @abstractmethod
    def delete(self, entry_id: str) -> bool: ...


class KeyValueHistoryRepository(HistoryRepository):
    """History stored as a JSON list under one key of a KeyValueStorage.

    Write failures are logged and reported through the boolean return value;
    they never propagate, so a full disk cannot break a running match.
    """

    def __init__(self, storage: KeyValueStorage, key: str = HISTORY_KEY) -> None:
        self._storage = storage
        self._key = key

    def list_entries(self) -> list[HistoryEntry]:
        try:
            raw = self._storage.get(self._key)
        except OSError:
            logger.exception("failed to read history")
            return []
        return decode_history(raw)

    def _write(self, entries: list[HistoryEntry]) -> bool:
        try:
            self._storage.set(self._key, encode_history(entries))
        except (OSError, ValueError, TypeError):
            logger.exception("failed to write history", entries=len(entries))
            return False
        return True

    def append(self, entry: HistoryEntry) -> bool:
        """Add an entry at the end. Returns False when the entry could not be saved."""
        saved = self._write([*self.list_entries(), entry])
        if saved:
            logger.info("history entry saved", entry_id=entry.entry_id, winner=entry.winner)
        return saved

    def delete(self, entry_id: str) -> bool:
        """Remove the entry with this id. Returns False when nothing was removed."""
        entries = self.list_entries()
        remaining = [e for e in entries if e.entry_id != entry_id]
        if len(remaining) == len(entries):
            return False
        deleted = self._write(remaining)
        if deleted:
            logger.info("history entry deleted", entry_id=entry_id)
        return deleted
