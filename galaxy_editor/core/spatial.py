"""Spatial queries on the galaxy map — coordinate transforms and hit tests.

Map space has +Y up; screen space has +Y down:

    screen_x =  x * scale + offset_x
    screen_y = -y * scale + offset_y

All queries vectorize over the whole document with NumPy.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from galaxy_editor.constants import GALAXY_GRID_SPACING, SYSTEM_HIT_RADIUS_PX
from galaxy_editor.models.system import StarSystem, ViewTransform


def map_positions(systems: Sequence[StarSystem]) -> np.ndarray:
    """Return an (N, 2) array of map coordinates."""
    if not systems:
        return np.empty((0, 2), dtype=float)
    return np.array(
        [(s.coordinates.x, s.coordinates.y) for s in systems], dtype=float,
    )


def map_to_screen(points: np.ndarray, view: ViewTransform) -> np.ndarray:
    """Convert (N, 2) map coordinates to screen pixels."""
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    out = np.empty_like(pts)
    out[:, 0] = pts[:, 0] * view.scale + view.offset_x
    out[:, 1] = -pts[:, 1] * view.scale + view.offset_y
    return out


def screen_to_map(sx: float, sy: float, view: ViewTransform) -> tuple[float, float]:
    """Convert a screen pixel position to map coordinates."""
    return (
        (sx - view.offset_x) / view.scale,
        -(sy - view.offset_y) / view.scale,
    )


def systems_in_screen_rect(
    systems: Sequence[StarSystem],
    view: ViewTransform,
    x1: float, y1: float, x2: float, y2: float,
) -> list[StarSystem]:
    """Systems whose screen position lies inside the box (edges inclusive).

    Corner order does not matter. Locked systems are included; result
    keeps document order.
    """
    if not systems:
        return []
    screen = map_to_screen(map_positions(systems), view)
    left, right = min(x1, x2), max(x1, x2)
    top, bottom = min(y1, y2), max(y1, y2)
    mask = (
        (screen[:, 0] >= left) & (screen[:, 0] <= right)
        & (screen[:, 1] >= top) & (screen[:, 1] <= bottom)
    )
    return [systems[i] for i in np.flatnonzero(mask)]


def system_at_screen_point(
    systems: Sequence[StarSystem],
    view: ViewTransform,
    sx: float, sy: float,
    radius: float = SYSTEM_HIT_RADIUS_PX,
) -> StarSystem | None:
    """Closest system within *radius* pixels of (sx, sy), or None."""
    if not systems:
        return None
    screen = map_to_screen(map_positions(systems), view)
    dist = np.hypot(screen[:, 0] - sx, screen[:, 1] - sy)
    idx = int(np.argmin(dist))
    if dist[idx] > radius:
        return None
    return systems[idx]


def snap_to_grid(
    x: float, y: float, spacing: float = GALAXY_GRID_SPACING,
) -> tuple[float, float]:
    """Round a map position to the nearest grid intersection."""
    if spacing <= 0:
        return x, y
    return (
        float(np.round(x / spacing) * spacing),
        float(np.round(y / spacing) * spacing),
    )
