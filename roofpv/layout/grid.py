"""Grid auto-placement of panels on a roof outline.

The roof is projected into a metric frame centred on its vertex mean and
rotated so the longest edge runs along local X. The frame is tiled row by row
(top to bottom, left to right) with a step of one panel length (X) or width
(Y) plus spacing, and each cell is accepted first-fit when

  - its center is inside the roof,
  - at least 2 of its 4 corners are inside the roof,
  - it does not overlap any panel already accepted in the same pass.

Panels keep rotation 0; only the grid follows the roof. Rejected cells are
skipped, nothing is retried.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Sequence, Tuple

import numpy as np

from roofpv.geo.containment import count_corners_inside, point_in_polygon
from roofpv.geo.crs import meters_per_degree
from roofpv.geo.metrics import detect_orientation, polygon_centroid

from .models import (
    DEFAULT_PANEL,
    AutoPlacement,
    PanelSpec,
    PlacementSettings,
    RoofPolygon,
    SolarPanel,
    new_id,
)
from .overlap import half_extents, overlaps_any
from .panel_geometry import make_panel, rotation_matrix

log = logging.getLogger(__name__)

MIN_CORNERS_INSIDE = 2


def _grid_count(span: float, step: float) -> int:
    if step <= 0:
        return 1
    return max(1, int(math.floor(span / step)))


def auto_place_panels(
    polygon: RoofPolygon,
    settings: PlacementSettings,
    spec: PanelSpec = DEFAULT_PANEL,
) -> AutoPlacement:
    """Fill one roof with a roof-aligned grid of panels.

    Args:
        polygon: roof outline, at least 3 vertices to produce anything.
        settings: spacing (m) between panels and edge buffer (m) to the roof
            bounding box in the local frame.
        spec: panel footprint and rating.

    Returns:
        AutoPlacement with the accepted panels in row-major order and a copy
        of `settings` whose orientation is 0 (panels lie flat).
    """

    flat_settings = replace(settings, orientation=0.0)
    coords = polygon.coordinates
    if len(coords) < 3:
        log.debug("Roof %s has %d vertices, nothing to place", polygon.id, len(coords))
        return AutoPlacement(panels=(), settings=flat_settings)

    center_lng, center_lat = polygon_centroid(coords)
    per_lat, per_lng = meters_per_degree(center_lat)

    # Roof angle from the (lng, lat) ring; the same edge measured in meters
    # gives the frame angle.
    roof_angle = detect_orientation(coords)
    a = math.radians(roof_angle)
    theta = math.degrees(math.atan2(math.sin(a) * per_lat, math.cos(a) * per_lng))

    ring = np.asarray(coords, dtype=float)
    metric = np.column_stack(((ring[:, 0] - center_lng) * per_lng, (ring[:, 1] - center_lat) * per_lat))
    local = metric @ rotation_matrix(-theta).T
    min_x, min_y = local.min(axis=0)
    max_x, max_y = local.max(axis=0)

    # Panels stay axis-aligned globally; their projected extent sets the margins.
    half_x, half_y = half_extents(spec.length, spec.width, theta)

    step_x = spec.length + settings.spacing
    step_y = spec.width + settings.spacing
    buffer = settings.edge_buffer

    columns = _grid_count(max_x - min_x - 2.0 * buffer, step_x)
    rows = _grid_count(max_y - min_y - 2.0 * buffer, step_y)
    start_x = min_x + buffer + half_x
    start_y = max_y - buffer - half_y

    to_global = rotation_matrix(theta)
    placed: List[SolarPanel] = []
    for row in range(rows):
        for col in range(columns):
            local_center = np.array([start_x + col * step_x, start_y - row * step_y])
            east, north = to_global @ local_center
            center = (center_lng + float(east) / per_lng, center_lat + float(north) / per_lat)

            if not point_in_polygon(center, coords):
                continue
            candidate = make_panel(center, 0.0, spec, panel_id=new_id(f"panel-{row}-{col}"))
            if count_corners_inside(candidate.corners, coords) < MIN_CORNERS_INSIDE:
                continue
            if overlaps_any(center, spec.length, spec.width, placed, settings.spacing):
                continue
            placed.append(candidate)

    log.info(
        "Auto-placed %d panels on roof %s (%d x %d grid, roof angle %.1f deg)",
        len(placed),
        polygon.id,
        rows,
        columns,
        roof_angle,
    )
    return AutoPlacement(
        panels=tuple(placed),
        settings=flat_settings,
        orientation=roof_angle,
        frame_angle=theta,
        rows=rows,
        columns=columns,
    )


def auto_place_all(
    polygons: Sequence[RoofPolygon],
    settings: PlacementSettings,
    spec: PanelSpec = DEFAULT_PANEL,
) -> Tuple[Tuple[SolarPanel, ...], PlacementSettings]:
    """Run auto-placement on every roof in order and concatenate the panels.

    Each roof is packed independently; the result replaces any existing panels.
    """

    panels: List[SolarPanel] = []
    out_settings = replace(settings, orientation=0.0)
    for polygon in polygons:
        result = auto_place_panels(polygon, settings, spec)
        panels.extend(result.panels)
        out_settings = result.settings
    return tuple(panels), out_settings
