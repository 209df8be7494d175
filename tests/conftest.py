from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

# Ensure repo root is importable when running pytest from any CWD.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from roofpv.geo.crs import meters_to_offset  # noqa: E402
from roofpv.layout.models import RoofPolygon  # noqa: E402

ORIGIN = (121.0437, 14.5547)  # lng, lat


def to_lnglat(points_m, origin=ORIGIN):
    """(east, north) meters around `origin` -> (lng, lat), projected at the origin latitude."""

    out = []
    for east, north in points_m:
        dlng, dlat = meters_to_offset(east, north, origin[1])
        out.append((origin[0] + dlng, origin[1] + dlat))
    return out


def rotated_rect_m(half_along, half_across, angle_deg, center=(0.0, 0.0)):
    a = math.radians(angle_deg)
    c, s = math.cos(a), math.sin(a)
    pts = []
    for u, v in ((-half_along, -half_across), (half_along, -half_across), (half_along, half_across), (-half_along, half_across)):
        pts.append((center[0] + u * c - v * s, center[1] + u * s + v * c))
    return pts


@pytest.fixture
def make_roof():
    def _make(points_m, polygon_id="roof", origin=ORIGIN):
        return RoofPolygon.from_points(to_lnglat(points_m, origin), polygon_id=polygon_id)

    return _make


@pytest.fixture
def square_roof(make_roof):
    """10 m x 10 m axis-aligned roof centred on ORIGIN."""

    return make_roof([(-5, -5), (5, -5), (5, 5), (-5, 5)], polygon_id="square")
