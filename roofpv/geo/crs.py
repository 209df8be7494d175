"""Projection helpers.

Roofs are small, so the engine works in a local flat-earth approximation:
one degree of latitude is 111 km everywhere and one degree of longitude shrinks
with cos(latitude). `utm_crs_from_latlon` is only used when exporting a layout
into a proper metric CRS.
"""

from __future__ import annotations

import math
from typing import Tuple

from pyproj import CRS

METERS_PER_DEGREE = 111000.0


def meters_per_degree(lat: float) -> Tuple[float, float]:
    """Return (meters per degree latitude, meters per degree longitude) at `lat`."""

    return METERS_PER_DEGREE, METERS_PER_DEGREE * math.cos(math.radians(lat))


def offset_to_meters(dlng: float, dlat: float, lat: float) -> Tuple[float, float]:
    """Convert a (dlng, dlat) degree offset into (east, north) meters at `lat`."""

    per_lat, per_lng = meters_per_degree(lat)
    return dlng * per_lng, dlat * per_lat


def meters_to_offset(east: float, north: float, lat: float) -> Tuple[float, float]:
    """Convert an (east, north) offset in meters into (dlng, dlat) degrees at `lat`."""

    per_lat, per_lng = meters_per_degree(lat)
    return east / per_lng, north / per_lat


def utm_crs_from_latlon(lat: float, lon: float) -> CRS:
    """Return the UTM CRS whose zone contains (lat, lon)."""
    zone = int((lon + 180) / 6) + 1
    south = lat < 0
    return CRS.from_dict({"proj": "utm", "zone": zone, "south": south})
