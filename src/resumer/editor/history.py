"""Bounded undo/redo history over document snapshots."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .document_model import Document

LOGGER = logging.getLogger(__name__)

MAX_HISTORY = 50


class HistoryState(str, Enum):
    EMPTY = "empty"
    AT_BOTTOM = "at_bottom"
    MID_STACK = "mid_stack"
    AT_TOP = "at_top"


@dataclass(slots=True, frozen=True)
class HistorySnapshot:
    """Immutable deep copy of a document at one instant."""

    document: Document
    label: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def capture(cls, document: Document, label: str = "") -> "HistorySnapshot":
        return cls(document=copy.deepcopy(document), label=label)

    def restore(self) -> Document:
        """Return a copy of the stored document safe to edit."""

        return copy.deepcopy(self.document)


class HistoryManager:
    """Undo/redo stack with a cursor.

    ``entries[:cursor]`` hold the states undo walks back through, most recent
    last; ``entries[cursor:]`` hold the states redo walks forward through.
    Undo swaps the current document into the slot it restores from, so redo
    after undo returns exactly the state that was current.
    """

    def __init__(self, limit: int = MAX_HISTORY) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        self._entries: list[HistorySnapshot] = []
        self._cursor = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries)

    @property
    def state(self) -> HistoryState:
        if not self._entries:
            return HistoryState.EMPTY
        if not self.can_undo:
            return HistoryState.AT_BOTTOM
        if not self.can_redo:
            return HistoryState.AT_TOP
        return HistoryState.MID_STACK

    def record(self, document: Document, label: str = "") -> HistorySnapshot:
        """Store the pre-mutation ``document`` and drop the redo branch."""

        snapshot = HistorySnapshot.capture(document, label)
        del self._entries[self._cursor :]
        self._entries.append(snapshot)
        self._cursor += 1
        if len(self._entries) > self._limit:
            self._entries.pop(0)
            self._cursor -= 1
        return snapshot

    def undo(self, current: Document) -> Optional[Document]:
        if not self.can_undo:
            return None
        self._cursor -= 1
        restored = self._entries[self._cursor]
        self._entries[self._cursor] = HistorySnapshot.capture(current, restored.label)
        LOGGER.debug("Undo %s (cursor=%d)", restored.label or "change", self._cursor)
        return restored.restore()

    def redo(self, current: Document) -> Optional[Document]:
        if not self.can_redo:
            return None
        restored = self._entries[self._cursor]
        self._entries[self._cursor] = HistorySnapshot.capture(current, restored.label)
        self._cursor += 1
        LOGGER.debug("Redo %s (cursor=%d)", restored.label or "change", self._cursor)
        return restored.restore()

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = 0

    def resize(self, limit: int) -> None:
        """Change the bound, evicting the oldest undo entries if needed."""

        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        while len(self._entries) > limit:
            if self._cursor > 0:
                self._entries.pop(0)
                self._cursor -= 1
            else:
                self._entries.pop()


__all__ = ["MAX_HISTORY", "HistoryManager", "HistorySnapshot", "HistoryState"]
