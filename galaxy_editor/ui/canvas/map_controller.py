"""Map controller — central mediator between the galaxy map document and UI.

Owns the single document (ordered StarSystem list), its key lookup
index, the selection, region definitions and the undo/redo history.
All mutations go through this controller, which emits Qt signals for
canvas/panel refresh; nothing here depends on rendering code.

History model:
    - ``save_state`` is called *before* a structural mutation and pushes
      a deep copy of the document onto the history stack.
    - Selection edits are recorded *after* the selection changes, as
      entries carrying SelectionChange metadata; undo/redo of those
      entries only touch the selection.
    - Undo/redo replace the document contents in place: ``document``
      always returns the same list object.
"""

from __future__ import annotations

import dataclasses
import logging
import types
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from galaxy_editor.constants import (
    CONTROLLING_FACTIONS,
    DEFAULT_PLANET_TYPES,
    DEFAULT_REGION_COLOR,
    FACTIONS,
    GALAXY_GRID_SPACING,
    MAX_HISTORY,
    MAX_SCALE,
    MAX_STARBASE_TIER,
    MAX_STARS_PER_SYSTEM,
    MIN_SCALE,
)
from galaxy_editor.core.i18n import t, tf
from galaxy_editor.core.serializers import (
    CaptureError,
    CorruptSnapshotError,
    build_lookup,
    copy_document,
    copy_regions,
    dict_to_region,
    dict_to_system,
    region_to_dict,
    restore_document,
    restore_regions,
    system_to_dict,
)
from galaxy_editor.core.spatial import (
    snap_to_grid,
    system_at_screen_point,
    systems_in_screen_rect,
)
from galaxy_editor.core.undo_manager import UndoManager
from galaxy_editor.models.history import (
    DragOperation,
    EntryMetadata,
    HistoryEntry,
    Keys,
    SelectionChange,
    StructuralEdit,
    is_selection_description,
    metadata_from_dict,
)
from galaxy_editor.models.system import (
    InteractionState,
    Point2D,
    Planet,
    RegionDefinition,
    Resource,
    Star,
    StarSystem,
    ViewTransform,
)

logger = logging.getLogger(__name__)

# Field name -> history label (system detail edits)
_FIELD_LABELS = {
    "name": "Name",
    "faction": "Faction",
    "controlling_faction": "Controlling Faction",
    "is_core": "CORE Status",
    "is_king": "KING Status",
    "is_locked": "Lock Status",
    "region_id": "Region",
    "starbase_tier": "Starbase Tier",
}

_STAR_FIELDS = frozenset({"name", "type", "scale"})
_PLANET_FIELDS = frozenset({"name", "type", "orbit", "angle", "scale"})


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class MapController(QObject):
    """Document controller and undo/redo history for the galaxy map.

    Signals carry no payload except where noted, so panels re-read the
    state they need from the controller properties.
    """

    # kind: "save" | "undo" | "redo" | "clear" | "load"
    history_changed = pyqtSignal(str)
    # Undo/redo availability changed (menu enable/disable)
    undo_state_changed = pyqtSignal()
    # Document or regions changed (full redraw)
    map_changed = pyqtSignal()
    # Single system moved during a drag (no full rebuild)
    system_moved = pyqtSignal(str)
    selection_changed = pyqtSignal()
    modified_changed = pyqtSignal(bool)
    # Transient hover/drag/link state was dropped
    interaction_reset = pyqtSignal()
    # Recoverable history failure (user-facing message)
    history_error = pyqtSignal(str)
    view_changed = pyqtSignal()

    def __init__(self, parent: QObject | None = None, *, max_history: int = MAX_HISTORY):
        super().__init__(parent)
        self._document: list[StarSystem] = []
        self._lookup: dict[str, StarSystem] = {}
        self._selection: list[StarSystem] = []
        self._regions: list[RegionDefinition] = []
        self._undo_manager = UndoManager(max_history)
        # Selection as of the last history operation (prev keys for
        # selection entries recorded without explicit metadata)
        self._selection_checkpoint: Keys = ()
        self._interaction = InteractionState()
        self._drag_prev_keys: Keys = ()
        self._view = ViewTransform()
        self._clipboard: dict[str, Any] | None = None
        self._filename: str | None = None
        self._modified: bool = False
        self._system_counter: int = 0
        self._restoring: bool = False
        self.snap_to_grid: bool = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def document(self) -> list[StarSystem]:
        """The live document (read-only reference; stable across undo/redo)."""
        return self._document

    @property
    def lookup(self) -> Mapping[str, StarSystem]:
        return types.MappingProxyType(self._lookup)

    @property
    def selected_systems(self) -> tuple[StarSystem, ...]:
        return tuple(self._selection)

    @property
    def selected_keys(self) -> Keys:
        return tuple(s.key for s in self._selection)

    @property
    def regions(self) -> tuple[RegionDefinition, ...]:
        return tuple(self._regions)

    @property
    def view(self) -> ViewTransform:
        return self._view

    @property
    def interaction(self) -> InteractionState:
        return self._interaction

    @property
    def filename(self) -> str | None:
        return self._filename

    @property
    def is_modified(self) -> bool:
        return self._modified

    @property
    def has_clipboard(self) -> bool:
        return self._clipboard is not None

    def system(self, key: str) -> StarSystem | None:
        return self._lookup.get(key)

    def region(self, region_id: str) -> RegionDefinition | None:
        for region in self._regions:
            if region.id == region_id:
                return region
        return None

    # -- History state --

    @property
    def can_undo(self) -> bool:
        return self._undo_manager.can_undo

    @property
    def can_redo(self) -> bool:
        return self._undo_manager.can_redo

    @property
    def undo_count(self) -> int:
        return self._undo_manager.undo_count

    @property
    def redo_count(self) -> int:
        return self._undo_manager.redo_count

    @property
    def max_history(self) -> int:
        return self._undo_manager.max_levels

    @property
    def history_entries(self) -> tuple[HistoryEntry, ...]:
        """Undoable entries, oldest first."""
        return self._undo_manager.undo_entries

    @property
    def redo_entries(self) -> tuple[HistoryEntry, ...]:
        """Redoable entries, oldest first (last is redone next)."""
        return self._undo_manager.redo_entries

    @property
    def last_action_group(self) -> int | None:
        return self._undo_manager.last_action_group

    def peek_undo_label(self) -> str:
        entry = self._undo_manager.peek_undo()
        return entry.description if entry else ""

    def peek_redo_label(self) -> str:
        entry = self._undo_manager.peek_redo()
        return entry.description if entry else ""

    # ------------------------------------------------------------------
    # History: capture
    # ------------------------------------------------------------------

    def save_state(
        self,
        description: str = "Unknown Action",
        group_with_previous: bool = False,
        force_empty: bool = False,
        metadata: EntryMetadata | Mapping[str, Any] | None = None,
    ) -> bool:
        """Push a snapshot of the current document onto the history.

        Args:
            description: History label.
            group_with_previous: Continue the previous action group (redo
                stack is kept).
            force_empty: Record even when the document is empty.
            metadata: Typed metadata, a legacy dict bag, or None to infer
                it from the description and current selection.

        Returns:
            True if an entry was pushed. A skipped empty document or a
            failed copy leaves both stacks untouched and returns False.
        """
        if self._restoring:
            logger.debug("Ignoring save '%s' during restore", description)
            return False
        if not force_empty and not self._document:
            logger.debug("Skipping save of empty document: '%s'", description)
            return False

        resolved = self._resolve_metadata(description, metadata)
        try:
            state = copy_document(self._document)
            regions = copy_regions(self._regions)
        except CaptureError:
            logger.exception("Snapshot capture failed for '%s'; history unchanged",
                             description)
            return False

        entry = HistoryEntry(
            description=description,
            timestamp=datetime.now(),
            action_group=self._undo_manager.next_action_group(group_with_previous),
            state=state,
            regions=regions,
            metadata=resolved,
        )
        self._undo_manager.push(entry, group_with_previous=group_with_previous)
        self._selection_checkpoint = self.selected_keys
        logger.debug("Saved '%s' (history %d, redo %d)", description,
                     self.undo_count, self.redo_count)

        self._set_modified(True)
        self.history_changed.emit("save")
        self.undo_state_changed.emit()
        return True

    def _resolve_metadata(
        self, description: str, metadata: EntryMetadata | Mapping[str, Any] | None,
    ) -> EntryMetadata:
        if isinstance(metadata, (SelectionChange, DragOperation, StructuralEdit)):
            return metadata
        if isinstance(metadata, Mapping):
            if metadata:
                bag = dict(metadata)
                if "selectedKeys" not in bag and "selected_keys" not in bag:
                    bag["selectedKeys"] = self.selected_keys
                return metadata_from_dict(bag, description)
        elif metadata is not None:
            raise TypeError(f"Unsupported history metadata: {type(metadata).__name__}")

        if is_selection_description(description):
            return SelectionChange(
                prev_keys=self._selection_checkpoint, new_keys=self.selected_keys,
            )
        return StructuralEdit(selected_keys=self.selected_keys)

    def _checkpoint(self, description: str, group_with_previous: bool = False,
                    **kwargs: Any) -> bool:
        """save_state for an edit about to mutate.

        False only when a snapshot was due but could not be captured; the
        caller must then leave the document untouched. A save skipped for
        an empty document or during a restore still returns True.
        """
        due = not self._restoring and (kwargs.get("force_empty", False) or bool(self._document))
        if self.save_state(description, group_with_previous, **kwargs) or not due:
            return True
        logger.warning("Aborted '%s': no undo checkpoint could be recorded", description)
        return False

    def _entry_like(self, entry: HistoryEntry, metadata: EntryMetadata) -> HistoryEntry:
        """Snapshot of the live document under *entry*'s label and group."""
        return dataclasses.replace(
            entry,
            state=copy_document(self._document),
            regions=copy_regions(self._regions),
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # History: undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        """Step back one history entry.

        Returns:
            True on success; False when there is nothing to undo or the
            stored entry could not be restored (stacks unchanged).
        """
        entry = self._undo_manager.pop_undo()
        if entry is None:
            return False
        logger.debug("Undo '%s' (%d left)", entry.description, self.undo_count)

        current_keys = self.selected_keys
        meta = entry.metadata
        if isinstance(meta, SelectionChange):
            mirror_meta: EntryMetadata = SelectionChange(meta.prev_keys, current_keys)
        elif isinstance(meta, DragOperation):
            mirror_meta = DragOperation(meta.prev_keys, current_keys)
        else:
            mirror_meta = StructuralEdit(current_keys)

        try:
            redo_entry = self._entry_like(entry, mirror_meta)
            if not isinstance(meta, SelectionChange):
                systems = restore_document(entry.state)
                regions = restore_regions(entry.regions)
        except (CaptureError, CorruptSnapshotError) as exc:
            self._undo_manager.push_undo(entry)
            self._report_failure("undo", entry, exc)
            return False
        self._undo_manager.push_redo(redo_entry)

        self._restoring = True
        try:
            if isinstance(meta, SelectionChange):
                self._apply_selection(meta.prev_keys)
                self._finish_step("undo", document_changed=False)
                return True

            self._replace_document(systems, regions)
            self.reset_interaction()
            if not self._undo_manager.can_undo and not systems:
                # Undone past the first edit of a map that started empty
                self._collapse_to_initial_state()
            elif isinstance(meta, DragOperation):
                self._apply_selection(meta.prev_keys)
            elif isinstance(meta, StructuralEdit) and meta.selected_keys is not None:
                self._apply_selection(meta.selected_keys)
            else:
                self._apply_selection(current_keys)
            self._finish_step("undo", document_changed=True)
            return True
        finally:
            self._restoring = False

    def redo(self) -> bool:
        """Re-apply the most recently undone entry.

        Returns:
            True on success; False when there is nothing to redo or the
            stored entry could not be restored (stacks unchanged).
        """
        entry = self._undo_manager.pop_redo()
        if entry is None:
            return False
        logger.debug("Redo '%s' (%d left)", entry.description, self.redo_count)

        current_keys = self.selected_keys
        meta = entry.metadata
        if isinstance(meta, SelectionChange):
            mirror_meta: EntryMetadata = SelectionChange(current_keys, meta.new_keys)
        elif isinstance(meta, DragOperation):
            mirror_meta = DragOperation(meta.prev_keys, current_keys)
        else:
            mirror_meta = StructuralEdit(current_keys)

        try:
            history_entry = self._entry_like(entry, mirror_meta)
            if not isinstance(meta, SelectionChange):
                systems = restore_document(entry.state)
                regions = restore_regions(entry.regions)
        except (CaptureError, CorruptSnapshotError) as exc:
            self._undo_manager.push_redo(entry)
            self._report_failure("redo", entry, exc)
            return False
        self._undo_manager.push_undo(history_entry)

        self._restoring = True
        try:
            if isinstance(meta, SelectionChange):
                self._apply_selection(meta.new_keys)
                self._finish_step("redo", document_changed=False)
                return True

            self._replace_document(systems, regions)
            self.reset_interaction()
            if isinstance(meta, DragOperation) and meta.selected_keys is not None:
                self._apply_selection(meta.selected_keys)
            elif isinstance(meta, StructuralEdit) and meta.selected_keys is not None:
                self._apply_selection(meta.selected_keys)
            else:
                self._apply_selection(current_keys)
            self._finish_step("redo", document_changed=True)
            return True
        finally:
            self._restoring = False

    def undo_to(self, index: int) -> bool:
        """Undo until *index* entries remain (history panel jump).

        Stops at the first failing undo.
        """
        if not (0 <= index < self.undo_count):
            logger.warning("Invalid history index: %d (history size %d)",
                           index, self.undo_count)
            return False
        while self.undo_count > index:
            if not self.undo():
                return False
        return True

    def undo_action_group(self) -> int:
        """Undo every consecutive entry sharing the top entry's action group.

        Returns:
            Number of entries undone.
        """
        top = self._undo_manager.peek_undo()
        if top is None:
            return 0
        undone = 0
        while True:
            entry = self._undo_manager.peek_undo()
            if entry is None or entry.action_group != top.action_group:
                break
            if not self.undo():
                break
            undone += 1
        return undone

    def _report_failure(self, kind: str, entry: HistoryEntry, exc: Exception) -> None:
        logger.error("%s of '%s' aborted: %s", kind.capitalize(), entry.description, exc)
        if kind == "undo":
            message = tf("status.undo_failed", "Undo failed: {reason}", reason=exc)
        else:
            message = tf("status.redo_failed", "Redo failed: {reason}", reason=exc)
        self.history_error.emit(message)

    def _finish_step(self, kind: str, *, document_changed: bool) -> None:
        self._selection_checkpoint = self.selected_keys
        if document_changed:
            self._set_modified(True)
            self.map_changed.emit()
        self.selection_changed.emit()
        self.history_changed.emit(kind)
        self.undo_state_changed.emit()

    def _replace_document(
        self, systems: list[StarSystem], regions: list[RegionDefinition],
    ) -> None:
        self._document[:] = systems
        self._regions[:] = regions
        self._rebuild_lookup()

    def _rebuild_lookup(self) -> None:
        self._lookup.clear()
        self._lookup.update(build_lookup(self._document))

    def _apply_selection(self, keys: Iterable[str]) -> None:
        """Rebuild the selection from keys (unknown keys are skipped)."""
        seen: set[str] = set()
        systems = []
        for key in keys:
            system = self._lookup.get(key)
            if system is not None and key not in seen:
                seen.add(key)
                systems.append(system)
        self._selection[:] = systems

    def _collapse_to_initial_state(self) -> None:
        self._document.clear()
        self._lookup.clear()
        self._selection.clear()
        self._regions.clear()
        logger.debug("Reached initial empty state")

    # ------------------------------------------------------------------
    # Whole-map operations
    # ------------------------------------------------------------------

    def clear_map_data(self) -> None:
        """Reset to an empty, unmodified map (new map / before load).

        The only operation that clears both history stacks.
        """
        self._document.clear()
        self._lookup.clear()
        self._selection.clear()
        self._regions.clear()
        self._undo_manager.clear()
        self._selection_checkpoint = ()
        self._clipboard = None
        self._filename = None
        self._system_counter = 0
        self._drag_prev_keys = ()
        self._interaction.reset()
        self._view = ViewTransform()
        self._modified = False
        logger.debug("Map data cleared")

        self.interaction_reset.emit()
        self.view_changed.emit()
        self.map_changed.emit()
        self.selection_changed.emit()
        self.modified_changed.emit(False)
        self.history_changed.emit("clear")
        self.undo_state_changed.emit()

    def load_map(
        self,
        systems: Iterable[StarSystem | Mapping[str, Any]],
        regions: Iterable[RegionDefinition | Mapping[str, Any]] = (),
        filename: str | None = None,
    ) -> None:
        """Replace everything with already-parsed map data.

        Inputs are deep-copied; history starts empty.

        Raises:
            CorruptSnapshotError: If a system or region is malformed
                (the current map is left untouched).
        """
        loaded = [
            dict_to_system(system_to_dict(s) if isinstance(s, StarSystem) else s)
            for s in systems
        ]
        loaded_regions = [
            dict_to_region(region_to_dict(r) if isinstance(r, RegionDefinition) else r)
            for r in regions
        ]
        self.clear_map_data()
        self._document.extend(loaded)
        self._regions.extend(loaded_regions)
        self._rebuild_lookup()
        self._system_counter = len(loaded)
        self._filename = filename
        logger.info("Loaded map %s with %d systems, %d regions",
                    filename or "<untitled>", len(loaded), len(loaded_regions))
        self.map_changed.emit()
        self.history_changed.emit("load")

    def mark_saved(self, filename: str | None = None) -> None:
        """Record that the map was written out (clears the modified flag)."""
        if filename is not None:
            self._filename = filename
        self._set_modified(False)

    def _set_modified(self, modified: bool) -> None:
        if self._modified != modified:
            self._modified = modified
            self.modified_changed.emit(modified)

    # ------------------------------------------------------------------
    # Transient interaction state / view
    # ------------------------------------------------------------------

    def reset_interaction(self) -> None:
        """Drop hover/drag/link/pan state that may name replaced systems."""
        self._interaction.reset()
        self._drag_prev_keys = ()
        self.interaction_reset.emit()

    def set_hovered(self, key: str | None) -> None:
        if key is not None and key not in self._lookup:
            key = None
        self._interaction.hovered_key = key

    def set_view(
        self,
        *,
        scale: float | None = None,
        offset_x: float | None = None,
        offset_y: float | None = None,
    ) -> None:
        if scale is not None:
            self._view.scale = min(max(scale, MIN_SCALE), MAX_SCALE)
        if offset_x is not None:
            self._view.offset_x = offset_x
        if offset_y is not None:
            self._view.offset_y = offset_y
        self.view_changed.emit()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def set_selection(self, keys: Iterable[str]) -> None:
        """Replace the selection without recording a history entry.

        Unknown keys are skipped. A later ``save_state`` with a selection
        label infers its previous keys from the last history operation,
        not from this call.
        """
        self._apply_selection(keys)
        self.selection_changed.emit()

    def _record_selection(self, description: str, prev_keys: Keys) -> bool:
        new_keys = self.selected_keys
        if prev_keys == new_keys:
            return False
        self.selection_changed.emit()
        self.save_state(
            description, metadata=SelectionChange(prev_keys=prev_keys, new_keys=new_keys),
        )
        return True

    def select(self, key: str, *, additive: bool = False) -> bool:
        """Select a system (replace, or add with *additive*)."""
        system = self._lookup.get(key)
        if system is None:
            return False
        prev = self.selected_keys
        if additive:
            if key not in prev:
                self._selection.append(system)
        else:
            self._selection[:] = [system]
        return self._record_selection(
            tf("history.selected", "Selected {name}", name=system.name), prev,
        )

    def toggle_selection(self, key: str) -> bool:
        system = self._lookup.get(key)
        if system is None:
            return False
        prev = self.selected_keys
        if key in prev:
            self._selection[:] = [s for s in self._selection if s.key != key]
            label = tf("history.deselected", "Deselected {name}", name=system.name)
        else:
            self._selection.append(system)
            label = tf("history.selected", "Selected {name}", name=system.name)
        return self._record_selection(label, prev)

    def deselect_all(self) -> bool:
        if not self._selection:
            return False
        prev = self.selected_keys
        self._selection.clear()
        return self._record_selection(
            t("history.deselected_all", "Deselected All Systems"), prev,
        )

    def select_in_rect(
        self, x1: float, y1: float, x2: float, y2: float, *, additive: bool = False,
    ) -> int:
        """Box-select in screen pixels.

        Returns:
            Number of systems in the box (0 leaves the selection alone).
        """
        in_box = systems_in_screen_rect(self._document, self._view, x1, y1, x2, y2)
        if not in_box:
            return 0
        prev = self.selected_keys
        if additive:
            added = [s for s in in_box if s.key not in prev]
            self._selection.extend(added)
            label = tf("history.added_to_selection",
                       "Added {count} Systems to Selection", count=len(added))
        else:
            self._selection[:] = in_box
            label = tf("history.selected_count", "Selected {count} Systems",
                       count=len(in_box))
        self._record_selection(label, prev)
        return len(in_box)

    def select_at(self, sx: float, sy: float, *, additive: bool = False) -> StarSystem | None:
        """Click-select at a screen position; empty space deselects all."""
        system = system_at_screen_point(self._document, self._view, sx, sy)
        if system is None:
            if not additive:
                self.deselect_all()
            return None
        if additive:
            self.toggle_selection(system.key)
        else:
            self.select(system.key)
        return system

    # ------------------------------------------------------------------
    # System mutations
    # ------------------------------------------------------------------

    def create_system(self, x: float, y: float, name: str | None = None) -> StarSystem | None:
        """Add a new system at map position (x, y) and select it."""
        if self.snap_to_grid:
            x, y = snap_to_grid(x, y, GALAXY_GRID_SPACING)
        name = name or f"System-{self._system_counter + 1}"
        if not self._checkpoint(
            tf("history.created_system", "Created System {name}", name=name),
            force_empty=True,
        ):
            return None
        self._system_counter += 1
        system = StarSystem(name=name, coordinates=Point2D(x, y), stars=[Star()])
        self._document.append(system)
        self._rebuild_lookup()
        self._selection[:] = [system]
        self._selection_checkpoint = self.selected_keys
        self.map_changed.emit()
        self.selection_changed.emit()
        return system

    def delete_selected(self) -> int:
        """Delete selected systems and every link pointing at them."""
        if not self._selection:
            return 0
        count = len(self._selection)
        if not self._checkpoint(
            tf("history.deleted_systems", "Deleted {count} System(s)", count=count),
        ):
            return 0
        doomed = set(self.selected_keys)
        for system in self._document:
            system.links = [k for k in system.links if k not in doomed]
        self._document[:] = [s for s in self._document if s.key not in doomed]
        self._rebuild_lookup()
        self._selection.clear()
        self._selection_checkpoint = ()
        self.map_changed.emit()
        self.selection_changed.emit()
        return count

    def toggle_link(self, key_a: str, key_b: str) -> bool:
        """Add the link a<->b, or remove it if either side has it."""
        a, b = self._lookup.get(key_a), self._lookup.get(key_b)
        if a is None or b is None or a is b:
            logger.warning("Cannot link %r and %r", key_a, key_b)
            return False
        exists = key_b in a.links or key_a in b.links
        if exists:
            label = tf("history.removed_link", "Removed Link: {a} - {b}", a=a.name, b=b.name)
        else:
            label = tf("history.added_link", "Added Link: {a} - {b}", a=a.name, b=b.name)
        if not self._checkpoint(label):
            return False
        if exists:
            a.links = [k for k in a.links if k != key_b]
            b.links = [k for k in b.links if k != key_a]
        else:
            a.links.append(key_b)
            b.links.append(key_a)
        self.map_changed.emit()
        return True

    def start_linking(self, key: str) -> bool:
        """Enter link mode with *key* as the source system."""
        if key not in self._lookup:
            return False
        self._interaction.is_linking = True
        self._interaction.link_source_key = key
        return True

    def finish_linking(self, target_key: str) -> bool:
        source = self._interaction.link_source_key
        self._interaction.is_linking = False
        self._interaction.link_source_key = None
        if source is None:
            return False
        return self.toggle_link(source, target_key)

    def set_system_field(
        self, key: str, field: str, value: Any, *, group_with_previous: bool = False,
    ) -> bool:
        """Edit one detail field of a system.

        Args:
            key: System key.
            field: One of name, faction, controlling_faction, is_core,
                is_king, is_locked, region_id, starbase_tier.
            value: New value (validated per field).
            group_with_previous: Join the previous action group, e.g.
                successive keystrokes in the same field.
        """
        system = self._lookup.get(key)
        if system is None:
            return False
        if field not in _FIELD_LABELS:
            logger.warning("Unknown system field: %r", field)
            return False
        if not self._valid_field_value(field, value):
            logger.warning("Rejected %s=%r for system %s", field, value, key)
            return False

        current = system.starbase.tier if field == "starbase_tier" else getattr(system, field)
        if current == value:
            return False

        if field == "name":
            label = tf("history.renamed_system", "Renamed System to {name}", name=value)
        else:
            label = tf("history.changed_field", "Changed {field} of {name}",
                       field=_FIELD_LABELS[field], name=system.name)
        if not self._checkpoint(label, group_with_previous):
            return False

        if field == "starbase_tier":
            system.starbase.tier = int(value)
        else:
            setattr(system, field, value)
        self.map_changed.emit()
        return True

    def _valid_field_value(self, field: str, value: Any) -> bool:
        if field == "name":
            return isinstance(value, str) and bool(value.strip())
        if field == "faction":
            return value is None or value in FACTIONS
        if field == "controlling_faction":
            return value in CONTROLLING_FACTIONS
        if field in ("is_core", "is_king", "is_locked"):
            return isinstance(value, bool)
        if field == "region_id":
            return value is None or self.region(value) is not None
        if field == "starbase_tier":
            return isinstance(value, int) and 0 <= value <= MAX_STARBASE_TIER
        return False

    def move_system(
        self, key: str, x: float, y: float, *, group_with_previous: bool = False,
    ) -> bool:
        """Set a system's coordinates from the details panel."""
        system = self._lookup.get(key)
        if system is None:
            return False
        if (system.coordinates.x, system.coordinates.y) == (x, y):
            return False
        if not self._checkpoint(t("history.changed_coordinates", "Changed System Coordinates"),
                                group_with_previous):
            return False
        system.coordinates = Point2D(x, y)
        self.map_changed.emit()
        return True

    def set_locked(self, locked: bool) -> int:
        """Lock or unlock every selected system."""
        targets = [s for s in self._selection if s.is_locked != locked]
        if not targets:
            return 0
        if locked:
            label = tf("history.locked_systems", "Locked {count} system(s)", count=len(targets))
        else:
            label = tf("history.unlocked_systems", "Unlocked {count} system(s)",
                       count=len(targets))
        if not self._checkpoint(label):
            return 0
        for system in targets:
            system.is_locked = locked
        self.map_changed.emit()
        return len(targets)

    # -- Stars, planets and resources --

    def add_star(self, key: str, star: Star | None = None) -> int | None:
        """Append a star to system *key*; returns its index.

        Without *star*, the new star is named after the system with a
        letter suffix (A, B, C).
        """
        system = self._lookup.get(key)
        if system is None:
            return None
        if system.star_count >= MAX_STARS_PER_SYSTEM:
            logger.warning("System %s already has %d stars", key, MAX_STARS_PER_SYSTEM)
            return None
        if star is None:
            star = Star(name=f"{system.name} {chr(ord('A') + system.star_count)}")
        if not self._checkpoint(tf("history.added_star", "Added Star {n} to System {name}",
                                   n=system.star_count + 1, name=system.name)):
            return None
        system.stars.append(star)
        self.map_changed.emit()
        return system.star_count - 1

    def remove_star(self, key: str, index: int) -> bool:
        system = self._lookup.get(key)
        if system is None or not 0 <= index < system.star_count:
            return False
        if not self._checkpoint(tf("history.removed_star", "Removed Star {n} from {name}",
                                   n=index + 1, name=system.name)):
            return False
        del system.stars[index]
        self.map_changed.emit()
        return True

    def update_star(
        self, key: str, index: int, field: str, value: Any, *,
        group_with_previous: bool = False,
    ) -> bool:
        """Edit one property (name, type, scale) of a star."""
        system = self._lookup.get(key)
        if system is None or not 0 <= index < system.star_count:
            return False
        if not self._valid_body_value(_STAR_FIELDS, field, value):
            logger.warning("Rejected star %s=%r in system %s", field, value, key)
            return False
        star = system.stars[index]
        if getattr(star, field) == value:
            return False
        label = tf("history.updated_star", "Updated {field} of Star {n} in System {name}",
                   field=field, n=index + 1, name=system.name)
        if not self._checkpoint(label, group_with_previous):
            return False
        setattr(star, field, value)
        self.map_changed.emit()
        return True

    def add_planet(self, key: str, name: str | None = None) -> int | None:
        """Append a planet on the next free orbit; returns its index."""
        system = self._lookup.get(key)
        if system is None:
            return None
        name = name or f"{system.name or 'SYS'}-P{system.planet_count + 1}"
        orbit = max((p.orbit for p in system.planets), default=0) + 1
        planet = Planet(
            name=name,
            type=DEFAULT_PLANET_TYPES.get(system.faction, 0),
            orbit=orbit,
        )
        if not self._checkpoint(tf("history.added_planet", "Added Planet {planet} to {name}",
                                   planet=name, name=system.name)):
            return None
        system.planets.append(planet)
        self.map_changed.emit()
        return system.planet_count - 1

    def remove_planet(self, key: str, index: int) -> bool:
        system = self._lookup.get(key)
        if system is None or not 0 <= index < system.planet_count:
            return False
        planet = system.planets[index]
        if not self._checkpoint(tf("history.removed_planet", "Removed Planet {planet}",
                                   planet=planet.name)):
            return False
        del system.planets[index]
        self.map_changed.emit()
        return True

    def update_planet(
        self, key: str, index: int, field: str, value: Any, *,
        group_with_previous: bool = False,
    ) -> bool:
        """Edit one property (name, type, orbit, angle, scale) of a planet."""
        system = self._lookup.get(key)
        if system is None or not 0 <= index < system.planet_count:
            return False
        if not self._valid_body_value(_PLANET_FIELDS, field, value):
            logger.warning("Rejected planet %s=%r in system %s", field, value, key)
            return False
        planet = system.planets[index]
        if getattr(planet, field) == value:
            return False
        label = tf("history.updated_planet", "Updated {field} of Planet {n} in System {name}",
                   field=field, n=index + 1, name=system.name)
        if not self._checkpoint(label, group_with_previous):
            return False
        setattr(planet, field, value)
        self.map_changed.emit()
        return True

    def _planet(self, key: str, index: int) -> Planet | None:
        system = self._lookup.get(key)
        if system is None or not 0 <= index < system.planet_count:
            return None
        return system.planets[index]

    def add_resource(
        self, key: str, planet_index: int, name: str, type: int = 0, richness: int = 1,
    ) -> bool:
        """Add a resource to a planet. Names are unique per planet (case-insensitive)."""
        planet = self._planet(key, planet_index)
        if planet is None:
            return False
        if not name.strip() or not _is_int(richness) or richness < 1:
            logger.warning("Rejected resource %r (richness %r)", name, richness)
            return False
        if any(r.name.lower() == name.lower() for r in planet.resources):
            logger.warning("%s is already on planet %s", name, planet.name)
            return False
        label = tf("history.added_resource", "Added Resource {resource} to {planet}",
                   resource=name, planet=planet.name)
        if not self._checkpoint(label):
            return False
        planet.resources.append(Resource(name=name, type=type, richness=richness))
        self.map_changed.emit()
        return True

    def remove_resource(self, key: str, planet_index: int, resource_index: int) -> bool:
        planet = self._planet(key, planet_index)
        if planet is None or not 0 <= resource_index < len(planet.resources):
            return False
        resource = planet.resources[resource_index]
        if not self._checkpoint(tf("history.removed_resource", "Removed Resource {resource}",
                                   resource=resource.name)):
            return False
        del planet.resources[resource_index]
        self.map_changed.emit()
        return True

    def set_resource_richness(
        self, key: str, planet_index: int, resource_index: int, richness: int, *,
        group_with_previous: bool = False,
    ) -> bool:
        planet = self._planet(key, planet_index)
        if planet is None or not 0 <= resource_index < len(planet.resources):
            return False
        if not _is_int(richness) or richness < 1:
            logger.warning("Rejected richness %r", richness)
            return False
        resource = planet.resources[resource_index]
        if resource.richness == richness:
            return False
        label = tf("history.updated_richness", "Updated richness of {resource} to {richness}",
                   resource=resource.name, richness=richness)
        if not self._checkpoint(label, group_with_previous):
            return False
        resource.richness = richness
        self.map_changed.emit()
        return True

    @staticmethod
    def _valid_body_value(fields: frozenset[str], field: str, value: Any) -> bool:
        if field not in fields:
            return False
        if field == "name":
            return isinstance(value, str) and bool(value.strip())
        if field == "type":
            return _is_int(value) and value >= 0
        if field == "orbit":
            return _is_int(value) and value >= 1
        if field == "angle":
            return _is_number(value) and 0.0 <= value < 360.0
        if field == "scale":
            return _is_number(value) and value > 0.0
        return False

    # -- Drag --

    def begin_drag(self, key: str) -> bool:
        """Start dragging *key* (locked systems do not drag)."""
        system = self._lookup.get(key)
        if system is None or system.is_locked:
            return False
        self._interaction.dragged_key = key
        self._interaction.did_drag = False
        self._drag_prev_keys = self.selected_keys
        return True

    def drag_to(self, x: float, y: float) -> bool:
        """Move the dragged system to map position (x, y).

        The first movement of a drag records one "Moved System" entry;
        later movements of the same drag add nothing to the history.
        """
        key = self._interaction.dragged_key
        system = self._lookup.get(key) if key else None
        if system is None:
            return False
        if self.snap_to_grid:
            x, y = snap_to_grid(x, y, GALAXY_GRID_SPACING)
        if not self._interaction.did_drag:
            if not self._checkpoint(
                t("history.moved_system", "Moved System"),
                metadata=DragOperation(
                    prev_keys=self._drag_prev_keys, selected_keys=self.selected_keys,
                ),
            ):
                return False
            self._interaction.did_drag = True
        system.coordinates = Point2D(x, y)
        self.system_moved.emit(system.key)
        return True

    def end_drag(self) -> bool:
        """Finish the drag. Returns True if the system actually moved."""
        if self._interaction.dragged_key is None:
            return False
        moved = self._interaction.did_drag
        self._interaction.dragged_key = None
        self._interaction.did_drag = False
        self._drag_prev_keys = ()
        if moved:
            self.map_changed.emit()
        return moved

    # -- Clipboard --

    def copy_selected(self) -> bool:
        """Copy the single selected system to the clipboard."""
        if len(self._selection) != 1:
            return False
        self._clipboard = system_to_dict(self._selection[0])
        return True

    def paste(self, x: float, y: float) -> StarSystem | None:
        """Paste the clipboard system at (x, y) as an unlinked, unlocked copy."""
        if self._clipboard is None:
            return None
        if self.snap_to_grid:
            x, y = snap_to_grid(x, y, GALAXY_GRID_SPACING)
        template = dict_to_system(self._clipboard)
        name = f"{template.name} (Copy)"
        if not self._checkpoint(
            tf("history.pasted_system", "Pasted System {name}", name=name),
            force_empty=True,
        ):
            return None
        system = dataclasses.replace(
            template,
            key=StarSystem().key,
            name=name,
            coordinates=Point2D(x, y),
            links=[],
            is_locked=False,
        )
        self._document.append(system)
        self._rebuild_lookup()
        self._selection[:] = [system]
        self._selection_checkpoint = self.selected_keys
        self.map_changed.emit()
        self.selection_changed.emit()
        return system

    # -- Regions --

    def create_region(
        self, name: str, color: str = DEFAULT_REGION_COLOR,
    ) -> RegionDefinition | None:
        """Define a new region (membership is assigned separately)."""
        if not self._checkpoint(tf("history.created_region", "Created Region {name}", name=name)):
            return None
        region = RegionDefinition(name=name, color=color)
        self._regions.append(region)
        self.map_changed.emit()
        return region

    def assign_region(self, region_id: str | None) -> int:
        """Put every selected system into *region_id* (None removes)."""
        region = self.region(region_id) if region_id is not None else None
        if region_id is not None and region is None:
            logger.warning("Unknown region: %r", region_id)
            return 0
        targets = [s for s in self._selection if s.region_id != region_id]
        if not targets:
            return 0
        if region is None:
            label = tf("history.removed_region", "Removed {count} System(s) from their Region",
                       count=len(targets))
        else:
            label = tf("history.assigned_region", "Added {count} Systems to Region {name}",
                       count=len(targets), name=region.name)
        if not self._checkpoint(label):
            return 0
        for system in targets:
            system.region_id = region_id
        self.map_changed.emit()
        return len(targets)
