"""Tests for UndoManager — bounded history/redo stacks and action groups.

Covers:
- Basic stack operations (push/pop/clear)
- FIFO eviction at the history bound
- Redo invalidation vs. grouped pushes
- Action-group id minting
"""

from datetime import datetime

import pytest

from galaxy_editor.constants import MAX_HISTORY
from galaxy_editor.core.undo_manager import UndoManager
from galaxy_editor.models.history import HistoryEntry


def _entry(desc: str, group: int = 0) -> HistoryEntry:
    return HistoryEntry(description=desc, timestamp=datetime.now(), action_group=group)


class TestUndoManagerBasics:
    """Core stack operations."""

    def test_initial_state_empty(self):
        mgr = UndoManager()
        assert not mgr.can_undo
        assert not mgr.can_redo
        assert mgr.undo_count == 0
        assert mgr.redo_count == 0
        assert mgr.last_action_group is None

    def test_push_enables_undo(self):
        mgr = UndoManager()
        mgr.push(_entry("A"))
        assert mgr.can_undo
        assert not mgr.can_redo

    def test_pop_undo_returns_latest(self):
        mgr = UndoManager()
        mgr.push(_entry("A"))
        mgr.push(_entry("B"))
        assert mgr.pop_undo().description == "B"
        assert mgr.undo_count == 1

    def test_pop_empty_returns_none(self):
        mgr = UndoManager()
        assert mgr.pop_undo() is None
        assert mgr.pop_redo() is None

    def test_peek_does_not_pop(self):
        mgr = UndoManager()
        mgr.push(_entry("A"))
        assert mgr.peek_undo().description == "A"
        assert mgr.undo_count == 1
        assert mgr.peek_redo() is None

    def test_push_clears_redo(self):
        mgr = UndoManager()
        mgr.push(_entry("A"))
        mgr.push_redo(_entry("B"))
        assert mgr.can_redo
        mgr.push(_entry("C"))  # new branch
        assert not mgr.can_redo

    def test_grouped_push_keeps_redo(self):
        mgr = UndoManager()
        mgr.push(_entry("A"))
        mgr.push_redo(_entry("B"))
        mgr.push(_entry("C"), group_with_previous=True)
        assert mgr.redo_count == 1

    def test_push_undo_keeps_redo(self):
        mgr = UndoManager()
        mgr.push_redo(_entry("B"))
        mgr.push_undo(_entry("A"))
        assert mgr.redo_count == 1
        assert mgr.undo_count == 1

    def test_entries_oldest_first(self):
        mgr = UndoManager()
        for desc in ("A", "B", "C"):
            mgr.push(_entry(desc))
        assert [e.description for e in mgr.undo_entries] == ["A", "B", "C"]

    def test_clear_empties_both_stacks(self):
        mgr = UndoManager()
        mgr.push(_entry("A"))
        mgr.push_redo(_entry("B"))
        mgr.next_action_group()
        mgr.clear()
        assert not mgr.can_undo
        assert not mgr.can_redo
        assert mgr.last_action_group is None


class TestUndoManagerLimits:
    """Stack size enforcement."""

    def test_max_levels(self):
        mgr = UndoManager(max_levels=3)
        for n in range(4):
            mgr.push(_entry(str(n)))
        assert mgr.undo_count == 3
        assert [e.description for e in mgr.undo_entries] == ["1", "2", "3"]

    def test_push_undo_is_bounded(self):
        mgr = UndoManager(max_levels=2)
        mgr.push(_entry("0"))
        mgr.push(_entry("1"))
        mgr.push_undo(_entry("2"))
        assert [e.description for e in mgr.undo_entries] == ["1", "2"]

    def test_default_max_levels(self):
        assert UndoManager().max_levels == MAX_HISTORY == 50

    @pytest.mark.parametrize("levels", [0, -1])
    def test_invalid_max_levels(self, levels):
        with pytest.raises(ValueError):
            UndoManager(max_levels=levels)


class TestActionGroups:
    """Group id minting."""

    def test_new_group_ids_strictly_increase(self):
        mgr = UndoManager()
        ids = [mgr.next_action_group() for _ in range(5)]
        assert ids == sorted(set(ids))

    def test_grouped_reuses_previous_id(self):
        mgr = UndoManager()
        first = mgr.next_action_group()
        assert mgr.next_action_group(group_with_previous=True) == first
        assert mgr.last_action_group == first

    def test_grouped_without_previous_mints_new(self):
        mgr = UndoManager()
        group = mgr.next_action_group(group_with_previous=True)
        assert mgr.last_action_group == group
