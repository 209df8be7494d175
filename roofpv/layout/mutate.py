"""Drag, rotate and delete placed panels.

Dragging is unrestricted: the panel follows the pointer and is committed where
it is released, with no containment or overlap check. Rotation is validated
against the roof holding the panel unless free placement is on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from roofpv.geo.containment import count_corners_inside, distance_to_edges
from roofpv.geo.metrics import normalize_angle

from .manual import containing_polygon
from .models import (
    ROTATION_STEP,
    PlacementResult,
    PlacementSettings,
    Rejection,
    RoofPolygon,
    SolarPanel,
)
from .panel_geometry import panel_corners, with_pose

log = logging.getLogger(__name__)

Point = Tuple[float, float]


def _find(panels: Sequence[SolarPanel], panel_id: str) -> Optional[SolarPanel]:
    for p in panels:
        if p.id == panel_id:
            return p
    return None


def _replace_panel(panels: Sequence[SolarPanel], updated: SolarPanel) -> Tuple[SolarPanel, ...]:
    return tuple(updated if p.id == updated.id else p for p in panels)


@dataclass(frozen=True)
class DragState:
    """Where a drag started: the panel center and the pointer, both (lng, lat)."""

    panel_id: str
    origin_position: Point
    origin_pointer: Point

    def target(self, pointer: Sequence[float]) -> Point:
        return (
            self.origin_position[0] + (float(pointer[0]) - self.origin_pointer[0]),
            self.origin_position[1] + (float(pointer[1]) - self.origin_pointer[1]),
        )


def start_drag(panels: Sequence[SolarPanel], panel_id: str, pointer: Sequence[float]) -> Optional[DragState]:
    panel = _find(panels, panel_id)
    if panel is None:
        log.debug("Cannot drag unknown panel %s", panel_id)
        return None
    return DragState(
        panel_id=panel_id,
        origin_position=panel.position,
        origin_pointer=(float(pointer[0]), float(pointer[1])),
    )


def drag_to(panels: Sequence[SolarPanel], state: DragState, pointer: Sequence[float]) -> Tuple[SolarPanel, ...]:
    """Move the dragged panel by the pointer offset since drag start."""

    panel = _find(panels, state.panel_id)
    if panel is None:
        return tuple(panels)
    return _replace_panel(panels, with_pose(panel, position=state.target(pointer)))


def end_drag(panels: Sequence[SolarPanel], state: DragState) -> Tuple[SolarPanel, ...]:
    """Commit the dragged panel where it is; only its corners are refreshed."""

    panel = _find(panels, state.panel_id)
    if panel is None:
        return tuple(panels)
    return _replace_panel(panels, with_pose(panel))


def cancel_drag(panels: Sequence[SolarPanel], state: DragState) -> Tuple[SolarPanel, ...]:
    """Put the dragged panel back where the drag started."""

    panel = _find(panels, state.panel_id)
    if panel is None:
        return tuple(panels)
    return _replace_panel(panels, with_pose(panel, position=state.origin_position))


def fits_roof(
    position: Sequence[float],
    rotation: float,
    panel: SolarPanel,
    polygon: RoofPolygon,
    edge_buffer: float,
) -> bool:
    """At least 2 corners inside the roof and the center clear of every edge."""

    corners = panel_corners(position, rotation, panel.length, panel.width)
    if count_corners_inside(corners, polygon.coordinates) < 2:
        return False
    return distance_to_edges(position, polygon.coordinates) >= edge_buffer


def rotate_panel(
    panels: Sequence[SolarPanel],
    panel_id: str,
    polygons: Sequence[RoofPolygon],
    settings: PlacementSettings,
    increment: float = ROTATION_STEP,
    free_placement: bool = False,
) -> PlacementResult:
    """Rotate a panel by `increment` degrees, falling back to `-increment`.

    When the panel center lies on a roof and free placement is off, the new
    pose must fit that roof; if neither direction fits the panel keeps its
    rotation and the request is rejected.
    """

    panel = _find(panels, panel_id)
    if panel is None:
        return PlacementResult(accepted=False, panels=tuple(panels), reason=Rejection.UNKNOWN_PANEL)

    rotation = normalize_angle(panel.rotation + increment)
    polygon = containing_polygon(panel.position, polygons)

    if polygon is not None and not free_placement:
        if not fits_roof(panel.position, rotation, panel, polygon, settings.edge_buffer):
            rotation = normalize_angle(panel.rotation - increment)
            if not fits_roof(panel.position, rotation, panel, polygon, settings.edge_buffer):
                log.debug("Rotation of %s by +/-%s blocked by roof %s", panel_id, increment, polygon.id)
                return PlacementResult(
                    accepted=False,
                    panels=tuple(panels),
                    panel=panel,
                    reason=Rejection.ROTATION_BLOCKED,
                )

    rotated = with_pose(panel, rotation=rotation)
    return PlacementResult(accepted=True, panels=_replace_panel(panels, rotated), panel=rotated)


def delete_panel(panels: Sequence[SolarPanel], panel_id: str) -> PlacementResult:
    panel = _find(panels, panel_id)
    if panel is None:
        return PlacementResult(accepted=False, panels=tuple(panels), reason=Rejection.UNKNOWN_PANEL)
    return PlacementResult(
        accepted=True,
        panels=tuple(p for p in panels if p.id != panel_id),
        panel=panel,
    )
