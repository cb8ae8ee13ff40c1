"""Tests for MainWindow Edit menu wiring."""

import sys

from PyQt6.QtWidgets import QApplication

from galaxy_editor.models.system import StarSystem
from galaxy_editor.main_window import MainWindow
from galaxy_editor.ui.canvas.map_controller import MapController

# QApplication instance needed for widgets
_app = QApplication.instance() or QApplication(sys.argv)
_app.setOrganizationName("GalaxyEditorTests")
_app.setApplicationName("GalaxyEditorTests")


class TestEditMenuState:
    def setup_method(self):
        self.ctrl = MapController()
        self.window = MainWindow(self.ctrl)

    def teardown_method(self):
        self.window.close()

    def test_initially_disabled(self):
        assert not self.window._action_undo.isEnabled()
        assert not self.window._action_redo.isEnabled()
        assert not self.window._action_delete.isEnabled()

    def test_undo_label_follows_history(self):
        self.ctrl.load_map([StarSystem(key="a", name="Alpha")])
        self.ctrl.select("a")
        assert self.window._action_undo.isEnabled()
        assert self.window._action_undo.text() == "Undo Selected Alpha"
        assert self.window._action_delete.isEnabled()

        self.window._on_undo()
        assert not self.window._action_undo.isEnabled()
        assert self.window._action_redo.text() == "Redo Selected Alpha"

    def test_history_error_in_status_bar(self):
        self.ctrl.history_error.emit("Undo failed: boom")
        assert self.window.statusBar().currentMessage() == "Undo failed: boom"

    def test_title_marks_modified(self):
        self.ctrl.load_map([StarSystem(key="a")], filename="sector.json")
        assert self.window.windowTitle().startswith("sector.json")
        self.ctrl.save_state("x")
        assert self.window.windowTitle().startswith("*sector.json")

    def test_new_map_clears(self):
        self.ctrl.load_map([StarSystem(key="a")])
        self.window._on_new()
        assert self.ctrl.document == []
