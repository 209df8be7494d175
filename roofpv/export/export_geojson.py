"""GeoJSON export of a design.

Builds a FeatureCollection with one feature per roof and per panel. Geometry
stays in EPSG:4326 by default; pass `dst_crs` (a CRS string, a pyproj CRS, or
"utm" for the UTM zone of the anchor) to reproject for CAD tools.
"""

from typing import Any, Dict, List, Optional, Union

from pyproj import CRS, Transformer
from shapely.geometry import LineString, Point, Polygon, mapping
from shapely.ops import transform

from roofpv.geo.crs import utm_crs_from_latlon
from roofpv.layout.models import RoofPolygon, SolarPanel

from .snapshot import ProjectSnapshot

SRC_CRS = "EPSG:4326"


def roof_geometry(roof: RoofPolygon):
    """Polygon for 3+ vertices, LineString for 2, Point for 1, None when empty."""

    coords = list(roof.coordinates)
    if len(coords) >= 3:
        return Polygon(coords)
    if len(coords) == 2:
        return LineString(coords)
    if len(coords) == 1:
        return Point(coords[0])
    return None


def panel_geometry(panel: SolarPanel) -> Polygon:
    return Polygon(list(panel.corners))


def _resolve_crs(dst_crs: Any, snapshot: ProjectSnapshot) -> CRS:
    if isinstance(dst_crs, str) and dst_crs.lower() == "utm":
        lng, lat = snapshot.coordinates
        return utm_crs_from_latlon(lat, lng)
    return CRS.from_user_input(dst_crs)


def layout_to_feature_collection(
    snapshot: ProjectSnapshot,
    dst_crs: Optional[Union[str, CRS]] = None,
) -> Dict[str, Any]:
    """Roofs and panels of `snapshot` as a GeoJSON FeatureCollection dict.

    Args:
        snapshot: the design to export.
        dst_crs: None keeps EPSG:4326 (lon, lat); otherwise the target CRS.

    Returns:
        {"type": "FeatureCollection", "properties": {...}, "features": [...]}
        with roof features first, in drawing order, then panels.
    """

    project = None
    crs_name = SRC_CRS
    if dst_crs is not None:
        target = _resolve_crs(dst_crs, snapshot)
        tx = Transformer.from_crs(SRC_CRS, target, always_xy=True)
        crs_name = target.to_string()

        def project(x, y, z=None):
            return tx.transform(x, y)

    def _geom(geom):
        return mapping(geom if project is None else transform(project, geom))

    features: List[Dict[str, Any]] = []
    for roof in snapshot.roof_polygons:
        geom = roof_geometry(roof)
        if geom is None:
            continue
        features.append(
            {
                "type": "Feature",
                "properties": {"type": "roof", "id": roof.id, "area_m2": roof.area},
                "geometry": _geom(geom),
            }
        )
    for panel in snapshot.panels:
        features.append(
            {
                "type": "Feature",
                "properties": {
                    "type": "panel",
                    "id": panel.id,
                    "rotation": panel.rotation,
                    "power_kw": panel.power,
                    "length_m": panel.length,
                    "width_m": panel.width,
                },
                "geometry": _geom(panel_geometry(panel)),
            }
        )

    return {
        "type": "FeatureCollection",
        "properties": {
            "crs": crs_name,
            "address": snapshot.address,
            "panel_count": snapshot.panel_count,
            "capacity_kw": snapshot.capacity_kw,
            "roof_area_m2": snapshot.roof_area,
        },
        "features": features,
    }
