"""History panel — dock list of undoable and redoable actions.

Newest entry on top. Redo entries are listed above the history in a
dimmed color; the most recent history entry is marked as current.
Clicking an entry moves the map to the state right after that action.
"""

from PyQt6.QtWidgets import QListWidget, QListWidgetItem, QVBoxLayout, QWidget
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QFont

from galaxy_editor.core.i18n import t
from galaxy_editor.ui.canvas.map_controller import MapController
from galaxy_editor.ui.styles.colors import ACCENT, TEXT_DISABLED, TEXT_PRIMARY

# Item data roles
_ROLE_KIND = Qt.ItemDataRole.UserRole
_ROLE_INDEX = Qt.ItemDataRole.UserRole + 1


class HistoryPanel(QWidget):
    """List view over MapController.history_entries / redo_entries."""

    def __init__(self, controller: MapController, parent: QWidget | None = None):
        super().__init__(parent)
        self._controller = controller

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        self._list = QListWidget()
        self._list.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self._list)

        controller.history_changed.connect(lambda _kind: self.refresh())
        self.refresh()

    @property
    def list_widget(self) -> QListWidget:
        return self._list

    def refresh(self) -> None:
        self._list.clear()
        history = self._controller.history_entries
        redo = self._controller.redo_entries

        if not history and not redo:
            item = QListWidgetItem(t("history.empty", "No history yet"))
            item.setFlags(Qt.ItemFlag.NoItemFlags)
            self._list.addItem(item)
            return

        # Redo stack: last element is redone next, so it sits just above
        # the current entry.
        for i, entry in enumerate(redo):
            item = QListWidgetItem(entry.description)
            item.setForeground(QColor(TEXT_DISABLED))
            item.setData(_ROLE_KIND, "redo")
            item.setData(_ROLE_INDEX, i)
            self._list.addItem(item)

        for i in range(len(history) - 1, -1, -1):
            entry = history[i]
            label = f"{entry.timestamp:%H:%M:%S}  {entry.description}"
            item = QListWidgetItem(label)
            item.setData(_ROLE_KIND, "history")
            item.setData(_ROLE_INDEX, i)
            if i == len(history) - 1:
                font = QFont()
                font.setBold(True)
                item.setFont(font)
                item.setForeground(QColor(ACCENT))
            else:
                item.setForeground(QColor(TEXT_PRIMARY))
            self._list.addItem(item)

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        kind = item.data(_ROLE_KIND)
        index = item.data(_ROLE_INDEX)
        if kind == "history":
            self.jump_to_history(index)
        elif kind == "redo":
            self.jump_to_redo(index)

    def jump_to_history(self, index: int) -> None:
        """Undo every action recorded after history entry *index*."""
        if index + 1 < self._controller.undo_count:
            self._controller.undo_to(index + 1)

    def jump_to_redo(self, index: int) -> None:
        """Redo up to and including redo entry *index*."""
        steps = self._controller.redo_count - index
        for _ in range(steps):
            if not self._controller.redo():
                break
