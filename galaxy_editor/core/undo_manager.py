"""Undo/Redo manager — bounded stacks of history entries.

Stores immutable HistoryEntry records in a history (undo) stack and a
redo stack. The history stack holds at most ``max_levels`` entries;
the oldest entry is evicted first. Pure Python class (no Qt dependency).

Also mints action-group ids: consecutive pushes made with
``group_with_previous=True`` share the id of the preceding push, so a
UI can treat them as one logical action.
"""

from __future__ import annotations

import logging
import time

from galaxy_editor.constants import MAX_HISTORY
from galaxy_editor.models.history import HistoryEntry

logger = logging.getLogger(__name__)


class UndoManager:
    """Snapshot-based undo/redo stacks.

    The live document is never stored here; only prior (history) and
    alternate-future (redo) states are.

    Usage::

        mgr = UndoManager()
        group = mgr.next_action_group(group_with_previous=False)
        mgr.push(entry)                # Before mutation
        entry = mgr.pop_undo()         # Caller restores entry.state
        mgr.push_redo(current_entry)
    """

    def __init__(self, max_levels: int = MAX_HISTORY) -> None:
        if max_levels < 1:
            raise ValueError(f"max_levels must be >= 1, got {max_levels}")
        self._undo_stack: list[HistoryEntry] = []
        self._redo_stack: list[HistoryEntry] = []
        self._max_levels = max_levels
        self._last_action_group: int | None = None

    @property
    def max_levels(self) -> int:
        return self._max_levels

    @property
    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    @property
    def undo_count(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_count(self) -> int:
        return len(self._redo_stack)

    @property
    def last_action_group(self) -> int | None:
        return self._last_action_group

    @property
    def undo_entries(self) -> tuple[HistoryEntry, ...]:
        """History entries, oldest first."""
        return tuple(self._undo_stack)

    @property
    def redo_entries(self) -> tuple[HistoryEntry, ...]:
        """Redo entries, oldest first (last one is redone next)."""
        return tuple(self._redo_stack)

    def peek_undo(self) -> HistoryEntry | None:
        return self._undo_stack[-1] if self._undo_stack else None

    def peek_redo(self) -> HistoryEntry | None:
        return self._redo_stack[-1] if self._redo_stack else None

    def next_action_group(self, group_with_previous: bool = False) -> int:
        """Return the group id for the next push and remember it.

        Grouped pushes reuse the previous id; otherwise a new id is
        minted from the wall clock [ms], bumped to stay strictly
        increasing when two actions land in the same millisecond.
        """
        if group_with_previous and self._last_action_group is not None:
            return self._last_action_group
        group = int(time.time() * 1000)
        if self._last_action_group is not None and group <= self._last_action_group:
            group = self._last_action_group + 1
        self._last_action_group = group
        return group

    def push(self, entry: HistoryEntry, *, group_with_previous: bool = False) -> None:
        """Record a new action. Clears redo unless it continues a group.

        Args:
            entry: Pre-mutation snapshot entry.
            group_with_previous: True when *entry* continues the previous
                action (redo stack is kept).
        """
        if self._redo_stack and not group_with_previous:
            logger.debug("New action '%s' clears %d redo entries",
                         entry.description, len(self._redo_stack))
            self._redo_stack.clear()
        self._push_bounded(entry)

    def _push_bounded(self, entry: HistoryEntry) -> None:
        if len(self._undo_stack) >= self._max_levels:
            dropped = self._undo_stack.pop(0)  # Drop oldest
            logger.debug("History full, evicted '%s'", dropped.description)
        self._undo_stack.append(entry)

    def pop_undo(self) -> HistoryEntry | None:
        """Pop the most recent history entry, or None if empty."""
        if not self._undo_stack:
            return None
        return self._undo_stack.pop()

    def pop_redo(self) -> HistoryEntry | None:
        """Pop the next redo entry, or None if empty."""
        if not self._redo_stack:
            return None
        return self._redo_stack.pop()

    def push_redo(self, entry: HistoryEntry) -> None:
        """Store the state an undo moved away from."""
        self._redo_stack.append(entry)

    def push_undo(self, entry: HistoryEntry) -> None:
        """Store the state a redo moved away from (bounded, keeps redo)."""
        self._push_bounded(entry)

    def clear(self) -> None:
        """Clear both stacks and the action-group marker (e.g. new map)."""
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._last_action_group = None
