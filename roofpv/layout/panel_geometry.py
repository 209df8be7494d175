"""Panel footprint geometry.

A panel is a rectangle given by its center, its rotation in degrees and its
base length/width in meters. The four corners are derived from those and are
never edited directly.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from roofpv.geo.containment import point_in_polygon
from roofpv.geo.crs import meters_per_degree
from roofpv.geo.metrics import normalize_angle

from .models import DEFAULT_PANEL, PANEL_LENGTH, PANEL_WIDTH, PanelSpec, SolarPanel, new_id

Point = Tuple[float, float]

# Corner order before rotation: (-,-), (+,-), (+,+), (-,+)
_UNIT_CORNERS = np.array([[-1.0, -1.0], [1.0, -1.0], [1.0, 1.0], [-1.0, 1.0]])


def panel_dimensions(rotation: float, length: float = PANEL_LENGTH, width: float = PANEL_WIDTH) -> Tuple[float, float]:
    """Effective (length, width); swapped only for a rotation of exactly 90 degrees."""

    if rotation == 90:
        return width, length
    return length, width


def rotation_matrix(angle_deg: float) -> np.ndarray:
    a = np.radians(angle_deg)
    c, s = np.cos(a), np.sin(a)
    return np.array([[c, -s], [s, c]])


def panel_corners(
    center: Sequence[float],
    rotation: float,
    length: float = PANEL_LENGTH,
    width: float = PANEL_WIDTH,
) -> Tuple[Point, ...]:
    """Four geographic corners of a panel.

    Offsets of +/- half length (east) and +/- half width (north) are rotated
    counter-clockwise by `rotation` in meters, then converted back to degrees
    at the center latitude.
    """

    lng, lat = float(center[0]), float(center[1])
    actual_length, actual_width = panel_dimensions(rotation, length, width)

    offsets_m = _UNIT_CORNERS * np.array([actual_length / 2.0, actual_width / 2.0])
    rotated = offsets_m @ rotation_matrix(rotation).T

    per_lat, per_lng = meters_per_degree(lat)
    return tuple(
        (lng + float(east) / per_lng, lat + float(north) / per_lat) for east, north in rotated
    )


def make_panel(
    center: Sequence[float],
    rotation: float = 0.0,
    spec: PanelSpec = DEFAULT_PANEL,
    prefix: str = "panel",
    panel_id: Optional[str] = None,
) -> SolarPanel:
    rotation = normalize_angle(rotation)
    position = (float(center[0]), float(center[1]))
    return SolarPanel(
        id=panel_id or new_id(prefix),
        position=position,
        corners=panel_corners(position, rotation, spec.length, spec.width),
        rotation=rotation,
        length=spec.length,
        width=spec.width,
        power=spec.power,
    )


def with_pose(panel: SolarPanel, position: Optional[Sequence[float]] = None, rotation: Optional[float] = None) -> SolarPanel:
    """Copy of `panel` moved and/or rotated, with corners recomputed."""

    pos = panel.position if position is None else (float(position[0]), float(position[1]))
    rot = panel.rotation if rotation is None else normalize_angle(rotation)
    return replace(
        panel,
        position=pos,
        rotation=rot,
        corners=panel_corners(pos, rot, panel.length, panel.width),
    )


def find_panel_at(point: Sequence[float], panels: Iterable[SolarPanel]) -> Optional[SolarPanel]:
    """Panel whose corner rectangle contains `point`.

    The most recently added panel wins when footprints overlap, matching the
    drawing order of the map layer.
    """

    hits: List[SolarPanel] = [p for p in panels if point_in_polygon(point, p.corners)]
    return hits[-1] if hits else None
