"""
History Manager: bounded snapshot stack for undo/redo.

Entries are immutable pre-image snapshots ``(runs, selection)`` holding deep
copies, so nothing in the history aliases the live run sequence.

The cursor model:
    - ``record()`` is called immediately before every mutation; it drops the
      redo tail and appends the pre-image.
    - while ``position == len(entries)`` the live state is not recorded; the
      first ``undo()`` stores it, so a full undo/redo sweep ends exactly on
      the state the sweep started from.
    - when capacity is exceeded the oldest entry is evicted and the cursor
      shifts down by one. Capacity counts undo steps; the stored live head
      is not included.

Module: richdelta/engine/history.py
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Iterable, Optional

from richdelta.model.run import Run
from richdelta.model.selection import Selection

logger: Final = logging.getLogger(__name__)

DEFAULT_CAPACITY: Final[int] = 50


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Immutable deep copy of document state."""

    runs: tuple[Run, ...]
    selection: Selection

    @classmethod
    def capture(cls, runs: Iterable[Run], selection: Selection) -> "HistoryEntry":
        return cls(runs=tuple(run.copy() for run in runs), selection=selection)

    def restore_runs(self) -> list[Run]:
        """Fresh copies of the stored runs, safe to hand to a live store."""
        return [run.copy() for run in self.runs]


class HistoryManager:
    """
    Undo/redo stack with a cursor.

    Example:
        >>> history = HistoryManager(capacity=10)
        >>> history.record(HistoryEntry.capture([Run("a")], Selection()))
        >>> history.can_undo
        True
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: list[HistoryEntry] = []
        self._position = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def position(self) -> int:
        return self._position

    @property
    def can_undo(self) -> bool:
        return self._position > 0

    @property
    def can_redo(self) -> bool:
        return self._position < len(self._entries) - 1

    def record(self, entry: HistoryEntry) -> None:
        """Push a pre-image snapshot, truncating the redo tail first."""
        del self._entries[self._position :]
        self._entries.append(entry)
        self._evict()
        self._position = len(self._entries)
        logger.debug(f"History recorded: {len(self._entries)} entries")

    def undo(self, live: HistoryEntry) -> Optional[HistoryEntry]:
        """
        Step back one entry.

        Args:
            live: Snapshot of the current state, stored when the live head is
                not yet part of the history.

        Returns:
            The entry to restore, or None when there is nothing to undo.
        """
        if self._position == 0:
            return None

        if self._position == len(self._entries):
            # The live head does not count against capacity.
            self._entries.append(live)

        self._position -= 1
        logger.debug(f"Undo to position {self._position}")
        return self._entries[self._position]

    def redo(self) -> Optional[HistoryEntry]:
        """Step forward one entry, or return None at the top."""
        if not self.can_redo:
            return None
        self._position += 1
        logger.debug(f"Redo to position {self._position}")
        return self._entries[self._position]

    def clear(self) -> None:
        self._entries.clear()
        self._position = 0

    def _evict(self) -> None:
        while len(self._entries) > self._capacity:
            self._entries.pop(0)
            self._position = max(0, self._position - 1)
            logger.debug(f"History capacity {self._capacity} reached; oldest entry evicted")

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"HistoryManager(entries={len(self._entries)}, position={self._position}, "
            f"capacity={self._capacity})"
        )


__all__ = ["DEFAULT_CAPACITY", "HistoryEntry", "HistoryManager"]
