"""Main window — QMainWindow with system list, history dock, menus, status bar.

Layout:
  Menu:   File / Edit
  Center: SystemListPanel
  Right:  History panel (QDockWidget)
  Footer: QStatusBar
"""

import logging

from PyQt6.QtWidgets import QDockWidget, QMainWindow, QWidget
from PyQt6.QtCore import Qt, QSettings
from PyQt6.QtGui import QAction, QKeySequence

from galaxy_editor.constants import (
    APP_NAME, APP_VERSION, MIN_WINDOW_HEIGHT, MIN_WINDOW_WIDTH,
)
from galaxy_editor.core.i18n import TranslationManager, t, tf
from galaxy_editor.ui.canvas.map_controller import MapController
from galaxy_editor.ui.panels.history_panel import HistoryPanel
from galaxy_editor.ui.panels.system_list_panel import SystemListPanel

logger = logging.getLogger(__name__)

# Status bar message timeout (ms)
_STATUS_TIMEOUT = 5000


class MainWindow(QMainWindow):
    """Application main window wired to a single MapController."""

    def __init__(self, controller: MapController | None = None):
        super().__init__()
        self.setMinimumSize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)

        self._controller = controller or MapController(self)

        self._build_ui()
        self._build_menus()
        self._connect_signals()
        self._restore_state()
        self.retranslate_ui()
        self._update_edit_menu_state()
        self._update_title()

    @property
    def controller(self) -> MapController:
        return self._controller

    def _build_ui(self):
        self._system_panel = SystemListPanel(self._controller)
        self.setCentralWidget(self._system_panel)

        self._history_panel = HistoryPanel(self._controller)
        self._history_dock = self._create_dock(
            t("history.panel_title", "History"),
            Qt.DockWidgetArea.RightDockWidgetArea,
            self._history_panel,
        )

        TranslationManager.on_language_changed(self.retranslate_ui)

    def _build_menus(self):
        bar = self.menuBar()

        self._file_menu = bar.addMenu("")
        self._action_new = self._add_action(self._file_menu, "Ctrl+N", self._on_new)
        self._file_menu.addSeparator()
        self._action_quit = self._add_action(self._file_menu, "Ctrl+Q", self.close)

        self._edit_menu = bar.addMenu("")
        self._action_undo = self._add_action(self._edit_menu, "Ctrl+Z", self._on_undo)
        self._action_redo = self._add_action(self._edit_menu, "Ctrl+Y", self._on_redo)
        self._edit_menu.addSeparator()
        self._action_copy = self._add_action(self._edit_menu, "Ctrl+C", self._on_copy)
        self._action_paste = self._add_action(self._edit_menu, "Ctrl+V", self._on_paste)
        self._action_delete = self._add_action(self._edit_menu, "Delete", self._on_delete)
        self._edit_menu.addSeparator()
        self._action_deselect = self._add_action(
            self._edit_menu, "Ctrl+Shift+A", self._controller.deselect_all,
        )

    def _add_action(self, menu, shortcut: str, slot) -> QAction:
        action = QAction("", self)
        action.setShortcut(QKeySequence(shortcut))
        action.triggered.connect(lambda _checked=False: slot())
        menu.addAction(action)
        return action

    def retranslate_ui(self) -> None:
        """Update all translatable UI strings on language change."""
        self._history_dock.setWindowTitle(t("history.panel_title", "History"))
        self._file_menu.setTitle(t("menu.file", "File"))
        self._edit_menu.setTitle(t("menu.edit", "Edit"))
        self._action_new.setText(t("menu.new_map", "New Map"))
        self._action_quit.setText(t("menu.quit", "Quit"))
        self._action_copy.setText(t("menu.copy", "Copy"))
        self._action_paste.setText(t("menu.paste", "Paste"))
        self._action_delete.setText(t("menu.delete", "Delete"))
        self._action_deselect.setText(t("menu.deselect_all", "Deselect All"))
        self._update_edit_menu_state()
        self._update_title()
        self._history_panel.refresh()
        self.statusBar().showMessage(t("status.ready", "Ready"))

    def _connect_signals(self):
        self._controller.undo_state_changed.connect(self._update_edit_menu_state)
        self._controller.selection_changed.connect(self._update_edit_menu_state)
        self._controller.modified_changed.connect(lambda _m: self._update_title())
        self._controller.history_changed.connect(lambda _k: self._update_title())
        self._controller.history_error.connect(self._on_history_error)

    def _create_dock(self, title: str, area, widget: QWidget) -> QDockWidget:
        dock = QDockWidget(title, self)
        dock.setObjectName("HistoryDock")
        dock.setWidget(widget)
        dock.setFeatures(
            QDockWidget.DockWidgetFeature.DockWidgetMovable
            | QDockWidget.DockWidgetFeature.DockWidgetClosable
        )
        self.addDockWidget(area, dock)
        return dock

    def closeEvent(self, event):
        self._save_state()
        TranslationManager.remove_listener(self.retranslate_ui)
        super().closeEvent(event)

    def _save_state(self):
        settings = QSettings()
        settings.setValue("mainwindow/geometry", self.saveGeometry())
        settings.setValue("mainwindow/state", self.saveState())

    def _restore_state(self):
        settings = QSettings()
        geometry = settings.value("mainwindow/geometry")
        if geometry:
            self.restoreGeometry(geometry)
        state = settings.value("mainwindow/state")
        if state:
            self.restoreState(state)

    # ------------------------------------------------------------------
    # Edit menu handlers
    # ------------------------------------------------------------------

    def _on_undo(self) -> None:
        self._controller.undo()

    def _on_redo(self) -> None:
        self._controller.redo()

    def _on_copy(self) -> None:
        if self._controller.copy_selected():
            self._update_edit_menu_state()

    def _on_paste(self) -> None:
        # Offset from the selected system, else the map origin
        source = self._controller.selected_systems
        if source:
            x, y = source[0].coordinates.x + 10.0, source[0].coordinates.y - 10.0
        else:
            x, y = 0.0, 0.0
        self._controller.paste(x, y)

    def _on_delete(self) -> None:
        self._controller.delete_selected()

    def _update_edit_menu_state(self) -> None:
        """Sync Edit menu enabled/disabled state and labels with controller."""
        ctrl = self._controller
        self._action_undo.setEnabled(ctrl.can_undo)
        self._action_redo.setEnabled(ctrl.can_redo)
        if ctrl.can_undo:
            self._action_undo.setText(
                tf("menu.undo_action", "Undo {label}", label=ctrl.peek_undo_label()))
        else:
            self._action_undo.setText(t("menu.undo", "Undo"))
        if ctrl.can_redo:
            self._action_redo.setText(
                tf("menu.redo_action", "Redo {label}", label=ctrl.peek_redo_label()))
        else:
            self._action_redo.setText(t("menu.redo", "Redo"))

        has_selection = bool(ctrl.selected_keys)
        self._action_paste.setEnabled(ctrl.has_clipboard)
        self._action_copy.setEnabled(len(ctrl.selected_keys) == 1)
        self._action_delete.setEnabled(has_selection)
        self._action_deselect.setEnabled(has_selection)

    # ------------------------------------------------------------------
    # File menu handlers
    # ------------------------------------------------------------------

    def _on_new(self) -> None:
        self._controller.clear_map_data()
        logger.info("Started new map")

    def _on_history_error(self, message: str) -> None:
        self.statusBar().showMessage(message, _STATUS_TIMEOUT)

    def _update_title(self) -> None:
        name = self._controller.filename or t("app.untitled", "Untitled Map")
        marker = "*" if self._controller.is_modified else ""
        self.setWindowTitle(f"{marker}{name} - {APP_NAME} v{APP_VERSION}")
