"""System list panel — document systems in order, synced with the selection."""

from PyQt6.QtWidgets import (
    QAbstractItemView, QApplication, QLabel, QListWidget, QListWidgetItem,
    QVBoxLayout, QWidget,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor

from galaxy_editor.core.i18n import tf
from galaxy_editor.ui.canvas.map_controller import MapController
from galaxy_editor.ui.styles.colors import FACTION_COLORS, TEXT_PRIMARY

_ROLE_KEY = Qt.ItemDataRole.UserRole


class SystemListPanel(QWidget):
    """Clicking selects (Ctrl-click toggles); list follows undo/redo."""

    def __init__(self, controller: MapController, parent: QWidget | None = None):
        super().__init__(parent)
        self._controller = controller
        self._syncing = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        self._count_label = QLabel()
        layout.addWidget(self._count_label)

        self._list = QListWidget()
        self._list.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self._list.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self._list)

        controller.map_changed.connect(self.refresh)
        controller.selection_changed.connect(self._sync_selection)
        controller.system_moved.connect(self._on_system_moved)
        self.refresh()

    @property
    def list_widget(self) -> QListWidget:
        return self._list

    def refresh(self) -> None:
        self._list.clear()
        for system in self._controller.document:
            item = QListWidgetItem(self._label(system))
            item.setData(_ROLE_KEY, system.key)
            color = FACTION_COLORS.get(system.controlling_faction, TEXT_PRIMARY)
            item.setForeground(QColor(color))
            self._list.addItem(item)
        self._count_label.setText(
            tf("status.systems", "{count} systems", count=len(self._controller.document))
        )
        self._sync_selection()

    @staticmethod
    def _label(system) -> str:
        lock = " [locked]" if system.is_locked else ""
        return (f"{system.name}  ({system.coordinates.x:g}, "
                f"{system.coordinates.y:g}){lock}")

    def _sync_selection(self) -> None:
        selected = set(self._controller.selected_keys)
        for row in range(self._list.count()):
            item = self._list.item(row)
            font = item.font()
            font.setBold(item.data(_ROLE_KEY) in selected)
            item.setFont(font)

    def _on_system_moved(self, key: str) -> None:
        system = self._controller.system(key)
        if system is None:
            return
        for row in range(self._list.count()):
            item = self._list.item(row)
            if item.data(_ROLE_KEY) == key:
                item.setText(self._label(system))
                break

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        key = item.data(_ROLE_KEY)
        if QApplication.keyboardModifiers() & Qt.KeyboardModifier.ControlModifier:
            self._controller.toggle_selection(key)
        else:
            self._controller.select(key)
