"""Conservative rectangle separation test used by auto-placement."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

from roofpv.geo.crs import offset_to_meters

from .models import SolarPanel
from .panel_geometry import panel_dimensions

# Rectangles closer than this (m) to touching still count as touching
TOUCH_TOLERANCE = 1e-4


def half_extents(length: float, width: float, rotation: float = 0.0) -> Tuple[float, float]:
    """Half width (east) and half height (north) of the rotated rectangle's bounding box."""

    if rotation % 180 == 0:
        return length / 2.0, width / 2.0
    a = math.radians(rotation)
    c, s = abs(math.cos(a)), abs(math.sin(a))
    return length / 2.0 * c + width / 2.0 * s, length / 2.0 * s + width / 2.0 * c


def rectangles_may_overlap(
    center1: Sequence[float],
    length1: float,
    width1: float,
    center2: Sequence[float],
    length2: float,
    width2: float,
    spacing: float = 0.0,
    rotation1: float = 0.0,
    rotation2: float = 0.0,
) -> bool:
    """True when two rectangles (plus the spacing margin) may overlap.

    Centers further apart than both half-diagonals plus spacing are always
    separate. Closer pairs are decided per axis on the bounding boxes of the
    rotated rectangles: overlapping when |dx| and |dy| are both below the summed
    half-extents plus spacing. A rotated pair may be reported as overlapping
    when it is not; a pair that really overlaps is never reported as separate.
    """

    lng1, lat1 = float(center1[0]), float(center1[1])
    lng2, lat2 = float(center2[0]), float(center2[1])
    dx, dy = offset_to_meters(lng2 - lng1, lat2 - lat1, (lat1 + lat2) / 2.0)

    reach = math.hypot(length1 / 2.0, width1 / 2.0) + math.hypot(length2 / 2.0, width2 / 2.0) + spacing
    if math.hypot(dx, dy) >= reach - TOUCH_TOLERANCE:
        return False

    ex1, ey1 = half_extents(length1, width1, rotation1)
    ex2, ey2 = half_extents(length2, width2, rotation2)
    min_sep_x = ex1 + ex2 + spacing
    min_sep_y = ey1 + ey2 + spacing
    return abs(dx) < min_sep_x - TOUCH_TOLERANCE and abs(dy) < min_sep_y - TOUCH_TOLERANCE


def panels_may_overlap(a: SolarPanel, b: SolarPanel, spacing: float = 0.0) -> bool:
    la, wa = panel_dimensions(a.rotation, a.length, a.width)
    lb, wb = panel_dimensions(b.rotation, b.length, b.width)
    return rectangles_may_overlap(a.position, la, wa, b.position, lb, wb, spacing, a.rotation, b.rotation)


def overlaps_any(
    center: Sequence[float],
    length: float,
    width: float,
    panels: Iterable[SolarPanel],
    spacing: float = 0.0,
    rotation: float = 0.0,
) -> bool:
    for other in panels:
        lo, wo = panel_dimensions(other.rotation, other.length, other.width)
        if rectangles_may_overlap(center, length, width, other.position, lo, wo, spacing, rotation, other.rotation):
            return True
    return False
