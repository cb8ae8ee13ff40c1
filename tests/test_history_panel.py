"""Tests for the history dock panel."""

import sys

from PyQt6.QtWidgets import QApplication

from galaxy_editor.models.system import Point2D, StarSystem
from galaxy_editor.ui.canvas.map_controller import MapController
from galaxy_editor.ui.panels.history_panel import HistoryPanel

# QApplication instance needed for widgets
_app = QApplication.instance() or QApplication(sys.argv)


def _labels(panel: HistoryPanel) -> list[str]:
    lw = panel.list_widget
    return [lw.item(i).text() for i in range(lw.count())]


class TestHistoryPanel:
    def setup_method(self):
        self.ctrl = MapController()
        self.ctrl.load_map([StarSystem(key="a", name="Alpha", coordinates=Point2D())])
        self.panel = HistoryPanel(self.ctrl)

    def test_empty_placeholder(self):
        assert _labels(self.panel) == ["No history yet"]

    def test_newest_first(self):
        self.ctrl.save_state("first")
        self.ctrl.save_state("second")
        labels = _labels(self.panel)
        assert len(labels) == 2
        assert labels[0].endswith("second")
        assert labels[1].endswith("first")

    def test_redo_entries_listed_above(self):
        self.ctrl.save_state("first")
        self.ctrl.save_state("second")
        self.ctrl.undo()
        labels = _labels(self.panel)
        assert labels[0] == "second"
        assert labels[1].endswith("first")

    def test_jump_to_history(self):
        for i in range(4):
            self.ctrl.save_state(f"step {i}")
        self.panel.jump_to_history(1)
        assert self.ctrl.undo_count == 2
        assert self.ctrl.redo_count == 2

    def test_jump_to_redo(self):
        for i in range(4):
            self.ctrl.save_state(f"step {i}")
        self.ctrl.undo_to(0)
        # Redo entries oldest first: index 2 is the second one redone
        self.panel.jump_to_redo(2)
        assert self.ctrl.undo_count == 2
        assert self.ctrl.redo_count == 2

    def test_refreshes_on_clear(self):
        self.ctrl.save_state("first")
        self.ctrl.clear_map_data()
        assert _labels(self.panel) == ["No history yet"]
