"""History entry models — immutable undo/redo records.

Every entry stores a full serialized copy of the map document (no
diffing) plus typed metadata describing the kind of action, which
decides how undo/redo restore the selection.

Metadata variants:
    SelectionChange: pure selection edit; undo/redo never touch the
        document, only the selection.
    DragOperation: system move; undo restores the pre-drag selection.
    StructuralEdit: any other document edit.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

Keys = tuple[str, ...]

_SELECTION_DESCRIPTION = re.compile(r"\b(De)?[Ss]elected\b")


@dataclass(frozen=True)
class SelectionChange:
    """Selection moved from *prev_keys* to *new_keys*."""
    prev_keys: Keys = ()
    new_keys: Keys = ()


@dataclass(frozen=True)
class DragOperation:
    """One or more systems were dragged.

    Attributes:
        prev_keys: Selection before the drag started.
        selected_keys: Selection when the entry was recorded.
    """
    prev_keys: Keys = ()
    selected_keys: Keys | None = None


@dataclass(frozen=True)
class StructuralEdit:
    """Generic document edit; *selected_keys* is the selection to restore."""
    selected_keys: Keys | None = None


EntryMetadata = Union[SelectionChange, DragOperation, StructuralEdit]


@dataclass(frozen=True)
class HistoryEntry:
    """Single undo/redo record.

    Attributes:
        description: Human-readable action label (history panel text).
        timestamp: When the action was recorded.
        action_group: Entries sharing an id form one logical action.
        state: Read-only serialized copy of the document.
        regions: Read-only serialized copy of the region definitions.
        metadata: Action kind and selection keys.
    """
    description: str
    timestamp: datetime
    action_group: int
    state: tuple[Mapping[str, Any], ...] = ()
    regions: tuple[Mapping[str, Any], ...] = ()
    metadata: EntryMetadata = field(default_factory=StructuralEdit)

    @property
    def is_selection_only(self) -> bool:
        return isinstance(self.metadata, SelectionChange)


def is_selection_description(description: str) -> bool:
    """True for labels like ``"Selected Alpha"`` or ``"Deselected All Systems"``."""
    return bool(_SELECTION_DESCRIPTION.search(description or ""))


def _keys(value: Any) -> Keys | None:
    if value is None:
        return None
    return tuple(str(k) for k in value)


def metadata_from_dict(
    data: dict[str, Any] | None, description: str | None = None,
) -> EntryMetadata | None:
    """Convert a loose metadata bag into a typed variant.

    Recognized keys: ``selectedKeys``, ``prevSelectedKeys``,
    ``isDragOperation`` (snake_case spellings are accepted too).
    A bag with ``prevSelectedKeys`` is a selection change only when
    *description* is a selection label (or no description is given).

    Returns:
        The typed metadata, or None for an empty/None bag.
    """
    if not data:
        return None
    selected = _keys(data.get("selectedKeys", data.get("selected_keys")))
    prev = _keys(data.get("prevSelectedKeys", data.get("prev_selected_keys")))
    is_drag = bool(data.get("isDragOperation", data.get("is_drag_operation", False)))

    if is_drag:
        return DragOperation(prev_keys=prev or (), selected_keys=selected)
    if prev is not None and (description is None or is_selection_description(description)):
        return SelectionChange(prev_keys=prev, new_keys=selected or ())
    return StructuralEdit(selected_keys=selected)
