"""Galaxy map data models.

A map document is an ordered list of StarSystem entities. Systems are
identified by ``key``; links between systems are stored as key lists on
both ends. Region definitions live beside the document as a parallel
collection and are referenced from systems through ``region_id``.

Coordinates are in map units with +Y pointing up (screen Y is flipped
by the view transform).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import uuid

from galaxy_editor.constants import (
    DEFAULT_CONTROLLING_FACTION,
    DEFAULT_OFFSET_X,
    DEFAULT_OFFSET_Y,
    DEFAULT_REGION_COLOR,
    DEFAULT_SCALE,
    DEFAULT_STAR_NAME,
    DEFAULT_STAR_TYPE,
)


@dataclass
class Point2D:
    """2D point in map units."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Star:
    name: str = DEFAULT_STAR_NAME
    type: int = DEFAULT_STAR_TYPE
    scale: float = 1.0


@dataclass
class Resource:
    """Extractable resource on a planet.

    Attributes:
        name: Resource display name.
        type: Resource type id from the game data tables.
        richness: Richness level (1 = common).
    """
    name: str = ""
    type: int = 0
    richness: int = 1


@dataclass
class Planet:
    """Planet orbiting a system.

    Attributes:
        name: Planet display name.
        type: Planet type id (faction-specific archetype).
        orbit: Orbit index around the system's stars.
        angle: Orbital angle [degree].
        scale: Display scale.
        resources: Resources available for extraction.
    """
    name: str = ""
    type: int = 0
    orbit: int = 1
    angle: float = 0.0
    scale: float = 1.0
    resources: list[Resource] = field(default_factory=list)


@dataclass
class Starbase:
    tier: int = 0


@dataclass
class StarSystem:
    """Single star system on the galaxy map.

    Attributes:
        key: Unique identity. Lookups, links and selections use the key,
            never object identity.
        name: Display name.
        coordinates: Position [map units].
        faction: Faction the system belongs to (None = unassigned).
        controlling_faction: Current owner.
        stars: Stars of the system.
        planets: Planets of the system.
        links: Keys of linked systems (kept symmetric by the editor).
        is_locked: Locked systems cannot be dragged.
        is_core: Core-system flag.
        is_king: KING-system flag.
        region_id: Region membership (None = no region).
        starbase: Starbase configuration.
    """
    key: str = field(default_factory=lambda: f"sys-{uuid.uuid4().hex[:12]}")
    name: str = ""
    coordinates: Point2D = field(default_factory=Point2D)
    faction: Optional[str] = None
    controlling_faction: str = DEFAULT_CONTROLLING_FACTION
    stars: list[Star] = field(default_factory=list)
    planets: list[Planet] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    is_locked: bool = False
    is_core: bool = False
    is_king: bool = False
    region_id: Optional[str] = None
    starbase: Starbase = field(default_factory=Starbase)

    @property
    def planet_count(self) -> int:
        return len(self.planets)

    @property
    def star_count(self) -> int:
        return len(self.stars)


@dataclass
class RegionDefinition:
    """Named, colored group of systems."""
    id: str = field(default_factory=lambda: f"region-{uuid.uuid4().hex[:8]}")
    name: str = ""
    color: str = DEFAULT_REGION_COLOR


@dataclass
class ViewTransform:
    """Galaxy view zoom and pan.

    screen_x = x * scale + offset_x
    screen_y = -y * scale + offset_y
    """
    scale: float = DEFAULT_SCALE
    offset_x: float = DEFAULT_OFFSET_X
    offset_y: float = DEFAULT_OFFSET_Y


@dataclass
class InteractionState:
    """Transient pointer interaction state.

    Holds keys rather than StarSystem references so nothing here can
    point at an entity that an undo/redo has replaced.
    """
    hovered_key: Optional[str] = None
    dragged_key: Optional[str] = None
    link_source_key: Optional[str] = None
    is_panning: bool = False
    is_linking: bool = False
    is_selecting: bool = False
    did_drag: bool = False

    def reset(self) -> None:
        self.hovered_key = None
        self.dragged_key = None
        self.link_source_key = None
        self.is_panning = False
        self.is_linking = False
        self.is_selecting = False
        self.did_drag = False
