"""Bounded linear undo/redo history over buffer snapshots."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class EditHistory:
    """A ring of immutable snapshots with a cursor.

    ``record`` discards any redo branch, appends, and evicts the oldest
    snapshot once ``limit`` is exceeded.  ``undo``/``redo`` only move the
    cursor, so ``undo()`` followed by ``redo()`` returns the exact
    pre-undo snapshot.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._entries: list[str] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> str | None:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def record(self, buffer: str) -> None:
        """Append a snapshot, truncating forward history first."""
        if self.current == buffer:
            return
        del self._entries[self._cursor + 1 :]
        self._entries.append(buffer)
        self._cursor += 1
        if len(self._entries) > self.limit:
            self._entries.pop(0)
            self._cursor -= 1
            logger.debug("History full (%d), evicted oldest snapshot", self.limit)

    def undo(self) -> str | None:
        """Step back one snapshot; None when already at the oldest."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> str | None:
        """Step forward one snapshot; None when already at the newest."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = -1
