"""Polygon metrics for roof outlines.

Rings are sequences of (x, y) pairs; for geographic rings x is longitude and y
is latitude. Rings are implicitly closed (the last vertex connects back to the
first) and are never reordered, so the vertex order decides ties.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .crs import meters_per_degree

Point = Tuple[float, float]


def _as_points(points: Sequence[Sequence[float]]) -> List[Point]:
    out: List[Point] = []
    for p in points or []:
        if len(p) != 2:
            raise ValueError(f"points must be (x, y) pairs, got {p!r}")
        x, y = float(p[0]), float(p[1])
        if math.isnan(x) or math.isnan(y):
            raise ValueError("points must not contain NaN")
        out.append((x, y))
    return out


def normalize_angle(angle_deg: float) -> float:
    """Map any angle in degrees into [0, 360)."""

    a = float(angle_deg) % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if a >= 360.0 else a


def planar_area(points: Sequence[Sequence[float]]) -> float:
    """Unsigned shoelace area in the ring's own units."""

    pts = _as_points(points)
    if len(pts) < 3:
        return 0.0
    total = 0.0
    for (x0, y0), (x1, y1) in zip(pts, pts[1:] + pts[:1]):
        total += x0 * y1 - x1 * y0
    return abs(total) / 2.0


def polygon_area(points: Sequence[Sequence[float]]) -> float:
    """Approximate area in square meters of a (lng, lat) ring.

    The shoelace area in square degrees is scaled through the flat-earth
    projection at the first vertex latitude. Fewer than 3 vertices give 0.
    """

    pts = _as_points(points)
    if len(pts) < 3:
        return 0.0
    per_lat, per_lng = meters_per_degree(pts[0][1])
    return planar_area(pts) * per_lat * per_lng


def detect_orientation(points: Sequence[Sequence[float]]) -> float:
    """Angle in degrees of the longest edge of the ring.

    The angle is `atan2(dy, dx)` of the edge direction in the ring's own units,
    so it lies in (-180, 180]. Only a strictly longer edge replaces the current
    best, which makes the earliest edge win a tie. Fewer than 3 vertices give 0.
    """

    pts = _as_points(points)
    if len(pts) < 3:
        return 0.0

    max_length = 0.0
    max_angle = 0.0
    for (x0, y0), (x1, y1) in zip(pts, pts[1:] + pts[:1]):
        dx = x1 - x0
        dy = y1 - y0
        length = math.hypot(dx, dy)
        if length > max_length:
            max_length = length
            max_angle = math.degrees(math.atan2(dy, dx))
    return max_angle


def polygon_centroid(points: Sequence[Sequence[float]]) -> Point:
    """Mean of the vertices (not the area centroid)."""

    pts = _as_points(points)
    if not pts:
        raise ValueError("cannot take the centroid of an empty ring")
    n = float(len(pts))
    return sum(p[0] for p in pts) / n, sum(p[1] for p in pts) / n


def bounding_box(points: Sequence[Sequence[float]]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""

    pts = _as_points(points)
    if not pts:
        raise ValueError("cannot take the bounding box of an empty ring")
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return min(xs), min(ys), max(xs), max(ys)
