"""Serialization utilities — dataclass ↔ JSON-safe dict conversion.

Snapshots stored in the history are tuples of read-only mappings produced
here (dicts wrapped in MappingProxyType, lists turned into tuples), so a
stored entry cannot be edited after it is pushed.
Restoring a snapshot always builds fresh StarSystem objects, so nothing
in a stored entry is ever aliased into the live document.

Also provides the lookup-index rebuild used after every restore.
"""

from __future__ import annotations

import dataclasses
import logging
import types
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

import numpy as np

from galaxy_editor.models.system import (
    Planet,
    Point2D,
    RegionDefinition,
    Resource,
    Star,
    Starbase,
    StarSystem,
)

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Base class for snapshot capture/restore failures."""


class CaptureError(SnapshotError):
    """Deep copy of the live document failed."""


class CorruptSnapshotError(SnapshotError):
    """Stored state is not a well-formed sequence of systems."""


# =====================================================================
# Generic helpers
# =====================================================================


def _serialize_value(val: Any) -> Any:
    """Convert a value to a JSON-safe type."""
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, np.ndarray):
        return val.tolist()
    if isinstance(val, np.generic):
        return val.item()
    if dataclasses.is_dataclass(val) and not isinstance(val, type):
        return _dataclass_to_dict(val)
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (int, float, str, bool)):
        return val
    raise TypeError(f"Cannot serialize value of type {type(val).__name__}")


def _dataclass_to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a JSON-safe dict."""
    result = {}
    for f in dataclasses.fields(obj):
        val = getattr(obj, f.name)
        result[f.name] = _serialize_value(val)
    return result


# =====================================================================
# System serialization
# =====================================================================


def system_to_dict(system: StarSystem) -> dict:
    """Serialize a StarSystem to a JSON-safe dict."""
    return _dataclass_to_dict(system)


def _dict_to_point(d: Any) -> Point2D:
    # Legacy maps store coordinates as [x, y]
    if isinstance(d, Mapping):
        return Point2D(x=float(d.get("x", 0.0)), y=float(d.get("y", 0.0)))
    if isinstance(d, Sequence) and not isinstance(d, str) and len(d) == 2:
        return Point2D(x=float(d[0]), y=float(d[1]))
    return Point2D()


def _dict_to_resource(d: Mapping) -> Resource:
    return Resource(
        name=d.get("name", ""),
        type=int(d.get("type", 0)),
        richness=int(d.get("richness", 1)),
    )


def _dict_to_planet(d: Mapping) -> Planet:
    return Planet(
        name=d.get("name", ""),
        type=int(d.get("type", 0)),
        orbit=int(d.get("orbit", 1)),
        angle=float(d.get("angle", 0.0)),
        scale=float(d.get("scale", 1.0)),
        resources=[_dict_to_resource(r) for r in d.get("resources", [])],
    )


def _dict_to_star(d: Mapping) -> Star:
    return Star(
        name=d.get("name", "Solar"),
        type=int(d.get("type", 2)),
        scale=float(d.get("scale", 1.0)),
    )


def dict_to_system(data: Mapping) -> StarSystem:
    """Deserialize a dict to a fresh StarSystem.

    Accepts both snake_case keys (as written by :func:`system_to_dict`)
    and the camelCase keys of legacy map files.

    Raises:
        CorruptSnapshotError: If *data* is not a mapping or lacks a key.
    """
    if not isinstance(data, Mapping):
        raise CorruptSnapshotError(
            f"System entry must be a mapping, got {type(data).__name__}"
        )
    key = data.get("key")
    if not isinstance(key, str) or not key:
        raise CorruptSnapshotError(f"System entry has no valid key: {key!r}")

    starbase = data.get("starbase") or {}
    try:
        return StarSystem(
            key=key,
            name=data.get("name", ""),
            coordinates=_dict_to_point(data.get("coordinates")),
            faction=data.get("faction"),
            controlling_faction=data.get(
                "controlling_faction", data.get("controllingFaction", "Neutral"),
            ),
            stars=[_dict_to_star(s) for s in data.get("stars", [])],
            planets=[_dict_to_planet(p) for p in data.get("planets", [])],
            links=[str(k) for k in data.get("links", [])],
            is_locked=bool(data.get("is_locked", data.get("isLocked", False))),
            is_core=bool(data.get("is_core", data.get("isCore", False))),
            is_king=bool(data.get("is_king", data.get("isKing", False))),
            region_id=data.get("region_id", data.get("regionId")),
            starbase=Starbase(tier=int(starbase.get("tier", 0))),
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise CorruptSnapshotError(f"Malformed system {key!r}: {exc}") from exc


def region_to_dict(region: RegionDefinition) -> dict:
    return _dataclass_to_dict(region)


def dict_to_region(data: Mapping) -> RegionDefinition:
    if not isinstance(data, Mapping) or "id" not in data:
        raise CorruptSnapshotError(f"Malformed region definition: {data!r}")
    return RegionDefinition(
        id=str(data["id"]),
        name=data.get("name", ""),
        color=data.get("color", "#3B82F6"),
    )


# =====================================================================
# Snapshots
# =====================================================================


def _freeze(val: Any) -> Any:
    """Make a serialized value read-only, recursively."""
    if isinstance(val, dict):
        return types.MappingProxyType({k: _freeze(v) for k, v in val.items()})
    if isinstance(val, list):
        return tuple(_freeze(v) for v in val)
    return val


def copy_document(systems: Iterable[StarSystem]) -> tuple[Mapping, ...]:
    """Deep-copy the document into an immutable snapshot.

    Raises:
        CaptureError: If any system holds a value that cannot be copied.
    """
    try:
        return tuple(_freeze(system_to_dict(s)) for s in systems)
    except (TypeError, ValueError, AttributeError) as exc:
        raise CaptureError(f"Document copy failed: {exc}") from exc


def copy_regions(regions: Iterable[RegionDefinition]) -> tuple[Mapping, ...]:
    try:
        return tuple(_freeze(region_to_dict(r)) for r in regions)
    except (TypeError, ValueError, AttributeError) as exc:
        raise CaptureError(f"Region copy failed: {exc}") from exc


def restore_document(state: Any) -> list[StarSystem]:
    """Rebuild live StarSystem objects from a stored snapshot.

    Raises:
        CorruptSnapshotError: If *state* is not a sequence of system dicts.
    """
    if isinstance(state, (str, bytes, Mapping)) or not isinstance(state, Sequence):
        raise CorruptSnapshotError(
            f"Snapshot must be a sequence of systems, got {type(state).__name__}"
        )
    return [dict_to_system(item) for item in state]


def restore_regions(regions: Any) -> list[RegionDefinition]:
    if isinstance(regions, (str, bytes, Mapping)) or not isinstance(regions, Sequence):
        raise CorruptSnapshotError(
            f"Region snapshot must be a sequence, got {type(regions).__name__}"
        )
    return [dict_to_region(r) for r in regions]


def build_lookup(systems: Iterable[StarSystem]) -> dict[str, StarSystem]:
    """Build the key → system index for *systems*.

    Systems without a key are skipped. A duplicate key keeps the last
    occurrence and is logged.
    """
    lookup: dict[str, StarSystem] = {}
    for system in systems:
        if not system.key:
            continue
        if system.key in lookup:
            logger.warning("Duplicate system key in document: %s", system.key)
        lookup[system.key] = system
    return lookup
