"""
Form Designer Kernel — History Log

Append-only list of HistoryEntry records plus a `current_step` pointer.

Each entry keeps the full document snapshot from before and after its action,
so undo and redo restore visible state by swapping snapshots instead of
inverting actions. `current_step` is the index of the last applied entry;
-1 means nothing is applied (the initial document).
"""

from __future__ import annotations

import copy
from typing import Any

from form_designer.config import settings
from form_designer.kernel.types import HistoryEntry, now_iso


class HistoryLog:
    def __init__(self, limit: int | None = None) -> None:
        self._limit = limit if limit is not None else settings.HISTORY_LIMIT
        self.entries: list[HistoryEntry] = []
        self.current_step = -1

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def can_undo(self) -> bool:
        return self.current_step >= 0

    @property
    def can_redo(self) -> bool:
        return self.current_step < len(self.entries) - 1

    def record(self, action: dict[str, Any], before: dict[str, Any], after: dict[str, Any]) -> HistoryEntry:
        """
        Drop every entry after current_step, append, advance.
        Past the size limit the oldest entries fall off the front.
        """
        entry = HistoryEntry(
            action=copy.deepcopy(action),
            before=copy.deepcopy(before),
            after=copy.deepcopy(after),
            timestamp=action.get("timestamp") or now_iso(),
        )
        del self.entries[self.current_step + 1:]
        self.entries.append(entry)

        overflow = len(self.entries) - self._limit
        if overflow > 0:
            del self.entries[:overflow]

        self.current_step = len(self.entries) - 1
        return entry

    def undo(self) -> dict[str, Any] | None:
        """Step back one entry. Returns the document to restore, or None at the start."""
        if not self.can_undo:
            return None
        entry = self.entries[self.current_step]
        self.current_step -= 1
        return copy.deepcopy(entry.before)

    def redo(self) -> dict[str, Any] | None:
        """Step forward one entry. Returns the document to restore, or None at the end."""
        if not self.can_redo:
            return None
        self.current_step += 1
        return copy.deepcopy(self.entries[self.current_step].after)

    def clear(self) -> None:
        self.entries = []
        self.current_step = -1
