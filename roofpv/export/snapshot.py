"""Storable snapshot of a design: address, anchor, roofs, panels, totals.

The snapshot is plain data for a persistence collaborator; nothing here writes
files or talks to a database.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

from roofpv.layout.models import PlacementSettings, RoofPolygon, SolarPanel
from roofpv.score.score import SystemCalculation, capacity_kw

Point = Tuple[float, float]


@dataclass(frozen=True)
class ProjectSnapshot:
    address: str
    coordinates: Point  # anchor (lng, lat)
    roof_polygons: Tuple[RoofPolygon, ...]
    panels: Tuple[SolarPanel, ...]
    panel_count: int
    capacity_kw: float
    roof_area: float
    number_of_strings: int
    calculation: Optional[SystemCalculation] = None
    created_at: str = ""


def coordinates_label(coordinates: Point) -> str:
    """Address stand-in when none was resolved: 'Coordinates: lat, lng'."""

    lng, lat = coordinates
    return f"Coordinates: {lat:.6f}, {lng:.6f}"


def build_snapshot(
    address: Optional[str],
    coordinates: Point,
    roof_polygons: Sequence[RoofPolygon],
    panels: Sequence[SolarPanel],
    settings: PlacementSettings,
    calculation: Optional[SystemCalculation] = None,
) -> ProjectSnapshot:
    roofs = tuple(roof if roof.area is not None else roof.with_area() for roof in roof_polygons)
    return ProjectSnapshot(
        address=(address or "").strip() or coordinates_label(coordinates),
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        roof_polygons=roofs,
        panels=tuple(panels),
        panel_count=len(panels),
        capacity_kw=capacity_kw(panels),
        roof_area=float(sum(roof.area or 0.0 for roof in roofs)),
        number_of_strings=settings.number_of_strings,
        calculation=calculation,
        created_at=datetime.now(timezone.utc).isoformat(),
    )


def snapshot_to_dict(snapshot: ProjectSnapshot) -> Dict[str, Any]:
    """JSON-ready dict; tuples become lists."""

    data = asdict(snapshot)

    def _listify(obj):
        if isinstance(obj, (list, tuple)):
            return [_listify(v) for v in obj]
        if isinstance(obj, dict):
            return {k: _listify(v) for k, v in obj.items()}
        return obj

    return _listify(data)
