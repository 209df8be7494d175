"""Point-in-polygon and point-to-edge distance on (lng, lat) rings."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

from .crs import offset_to_meters

Point = Tuple[float, float]


def point_in_polygon(point: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    """Ray-casting parity test.

    Points exactly on an edge may fall either way; rings with fewer than 3
    vertices contain nothing.
    """

    if ring is None or len(ring) < 3:
        return False
    x, y = float(point[0]), float(point[1])
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = float(ring[i][0]), float(ring[i][1])
        xj, yj = float(ring[j][0]), float(ring[j][1])
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def count_corners_inside(corners: Iterable[Sequence[float]], ring: Sequence[Sequence[float]]) -> int:
    return sum(1 for c in corners if point_in_polygon(c, ring))


def _closest_on_segment(px: float, py: float, ax: float, ay: float, bx: float, by: float) -> Point:
    cx = bx - ax
    cy = by - ay
    len_sq = cx * cx + cy * cy
    if len_sq == 0.0:
        return ax, ay
    t = ((px - ax) * cx + (py - ay) * cy) / len_sq
    t = min(1.0, max(0.0, t))
    return ax + t * cx, ay + t * cy


def distance_to_edges(point: Sequence[float], ring: Sequence[Sequence[float]]) -> float:
    """Minimum distance in meters from `point` to any edge of the ring.

    The closest point is found per edge in degree space (projection clamped to
    the segment), and the residual is converted to meters at the query
    latitude. An empty ring is infinitely far away.
    """

    if ring is None or len(ring) == 0:
        return math.inf
    px, py = float(point[0]), float(point[1])
    best = math.inf
    n = len(ring)
    for i in range(n):
        ax, ay = float(ring[i][0]), float(ring[i][1])
        bx, by = float(ring[(i + 1) % n][0]), float(ring[(i + 1) % n][1])
        qx, qy = _closest_on_segment(px, py, ax, ay, bx, by)
        east, north = offset_to_meters(px - qx, py - qy, py)
        best = min(best, math.hypot(east, north))
    return best
