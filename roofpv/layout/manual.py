"""Click-to-place panels: roof lookup, default rotation, grid snap, validation.

Manual placement is more permissive than auto-placement: the edge
clearance is `MANUAL_EDGE_BUFFER` instead of the settings buffer, and overlap
with existing panels is a plain center-distance exclusion.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Tuple

from roofpv.geo.containment import count_corners_inside, distance_to_edges, point_in_polygon
from roofpv.geo.crs import meters_per_degree, offset_to_meters
from roofpv.geo.metrics import bounding_box, normalize_angle, polygon_centroid

from .models import (
    DEFAULT_PANEL,
    MANUAL_EDGE_BUFFER,
    PanelSpec,
    PlacementResult,
    PlacementSettings,
    Rejection,
    RoofPolygon,
    SolarPanel,
)
from .panel_geometry import make_panel, panel_corners

log = logging.getLogger(__name__)

Point = Tuple[float, float]


def containing_polygon(point: Sequence[float], polygons: Sequence[RoofPolygon]) -> Optional[RoofPolygon]:
    """First roof, in list order, whose outline contains `point`."""

    for polygon in polygons:
        if point_in_polygon(point, polygon.coordinates):
            return polygon
    return None


def default_rotation(polygon: Optional[RoofPolygon]) -> float:
    """90 for roofs whose longest edge runs closer to north-south, else 0."""

    if polygon is None:
        return 0.0
    angle = normalize_angle(polygon.orientation)
    if 45.0 < angle < 135.0 or 225.0 < angle < 315.0:
        return 90.0
    return 0.0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def snap_to_grid(
    point: Sequence[float],
    polygon: RoofPolygon,
    settings: PlacementSettings,
    spec: PanelSpec = DEFAULT_PANEL,
) -> Point:
    """Nearest node of the roof's placement grid.

    The grid is anchored at the top-left of the roof bounding box, inset by the
    edge buffer plus half a panel, with a step of one panel plus spacing per
    axis. Snapping an already snapped point returns it unchanged.
    """

    if not polygon.coordinates:
        return float(point[0]), float(point[1])

    min_lng, min_lat, _, max_lat = bounding_box(polygon.coordinates)
    per_lat, per_lng = meters_per_degree((min_lat + max_lat) / 2.0)

    step_lng = (spec.length + settings.spacing) / per_lng
    step_lat = (spec.width + settings.spacing) / per_lat
    anchor_lng = min_lng + (settings.edge_buffer + spec.length / 2.0) / per_lng
    anchor_lat = max_lat - (settings.edge_buffer + spec.width / 2.0) / per_lat

    col = _round_half_up((float(point[0]) - anchor_lng) / step_lng)
    row = _round_half_up((anchor_lat - float(point[1])) / step_lat)
    return anchor_lng + col * step_lng, anchor_lat - row * step_lat


def _reject(panels: Sequence[SolarPanel], reason: Rejection, point: Sequence[float]) -> PlacementResult:
    log.debug("Rejected panel at (%.7f, %.7f): %s", point[0], point[1], reason.value)
    return PlacementResult(accepted=False, panels=tuple(panels), reason=reason)


def too_close_to_panels(
    point: Sequence[float],
    panels: Sequence[SolarPanel],
    settings: PlacementSettings,
    spec: PanelSpec = DEFAULT_PANEL,
) -> bool:
    """Circular exclusion: any panel center nearer than one panel length plus spacing."""

    min_distance = spec.length + settings.spacing
    for existing in panels:
        east, north = offset_to_meters(
            float(point[0]) - existing.position[0],
            float(point[1]) - existing.position[1],
            float(point[1]),
        )
        if math.hypot(east, north) < min_distance:
            return True
    return False


def place_panel(
    point: Sequence[float],
    polygons: Sequence[RoofPolygon],
    panels: Sequence[SolarPanel],
    settings: PlacementSettings,
    spec: PanelSpec = DEFAULT_PANEL,
    free_placement: bool = False,
    snap: bool = True,
) -> PlacementResult:
    """Place one panel where the user clicked.

    Args:
        point: clicked (lng, lat).
        polygons: roofs in drawing order.
        panels: current panel collection (not modified).
        settings: spacing and edge buffer used for snapping and exclusion.
        free_placement: skip roof containment and edge checks; the first roof,
            if any, is still used as the snapping grid.
        snap: snap to the roof grid when a roof is known.

    Returns:
        PlacementResult holding the new collection on success, or the original
        collection and a `Rejection` reason.
    """

    target = containing_polygon(point, polygons)
    if target is None:
        if not free_placement:
            return _reject(panels, Rejection.OUTSIDE_ROOF, point)
        target = polygons[0] if polygons else None

    rotation = default_rotation(target)
    if snap and target is not None:
        point = snap_to_grid(point, target, settings, spec)

    if target is not None and not free_placement:
        corners = panel_corners(point, rotation, spec.length, spec.width)
        if count_corners_inside(corners, target.coordinates) < 2:
            return _reject(panels, Rejection.CORNERS_OUTSIDE, point)
        if distance_to_edges(point, target.coordinates) < MANUAL_EDGE_BUFFER:
            return _reject(panels, Rejection.TOO_CLOSE_TO_EDGE, point)

    if too_close_to_panels(point, panels, settings, spec):
        return _reject(panels, Rejection.OVERLAPS_PANEL, point)

    panel = make_panel(point, rotation, spec, prefix="panel-manual")
    log.debug("Placed %s at (%.7f, %.7f), rotation %.0f", panel.id, point[0], point[1], rotation)
    return PlacementResult(accepted=True, panels=tuple(panels) + (panel,), panel=panel)


def add_panel_at_center(
    polygons: Sequence[RoofPolygon],
    panels: Sequence[SolarPanel],
    spec: PanelSpec = DEFAULT_PANEL,
) -> PlacementResult:
    """Drop a panel at the vertex mean of the first roof, without validation."""

    if not polygons or not polygons[0].coordinates:
        log.debug("No roof to add a panel to")
        return PlacementResult(accepted=False, panels=tuple(panels), reason=Rejection.NO_ROOF)

    target = polygons[0]
    panel = make_panel(polygon_centroid(target.coordinates), default_rotation(target), spec, prefix="panel-button")
    return PlacementResult(accepted=True, panels=tuple(panels) + (panel,), panel=panel)
