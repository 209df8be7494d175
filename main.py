import json
import logging

from roofpv.export.export_geojson import layout_to_feature_collection
from roofpv.geo.crs import meters_to_offset
from roofpv.layout.models import PlacementSettings
from roofpv.logging_config import setup_logging
from roofpv.session.designer import DesignerSession

# 1) Anchor: a house in Manila (lng, lat), as an address search would return it
anchor = (121.0437, 14.5547)

# 2) A simple L-shaped roof, drawn in meters east/north of the anchor
roof_m = [(0, 0), (14, 0), (14, 6), (6, 6), (6, 11), (0, 11)]

# 3) Placement parameters
spacing = 0.0        # m between panels
edge_buffer = 0.2    # m from roof edge
monthly_bill = 5000  # for the savings estimate


def roof_points():
    pts = []
    for east, north in roof_m:
        dlng, dlat = meters_to_offset(east, north, anchor[1])
        pts.append((anchor[0] + dlng, anchor[1] + dlat))
    return pts


session = DesignerSession(coordinates=anchor, settings=PlacementSettings(spacing=spacing, edge_buffer=edge_buffer))
session.begin_drawing()
for p in roof_points():
    session.add_point(p)
roof = session.finish_drawing()
session.cancel_drawing()

# 4) Auto-place panels on the roof
session.auto_place()


def summary():
    calc = session.calculation(monthly_bill)
    print(f"Roof area:         {roof.area:.1f} m2")
    print(f"Panels:            {len(session.panels)}")
    print(f"DC capacity:       {sum(p.power for p in session.panels):.2f} kWp")
    if calc is not None:
        print(f"Daily production:  {calc.estimated_daily_production} kWh")
        print(f"Yearly production: {calc.estimated_yearly_production:,.0f} kWh")
        print(f"Payback:           {calc.payback_months} months")


def export(path: str = "layout.geojson"):
    fc = layout_to_feature_collection(session.snapshot(monthly_bill))
    with open(path, "w", encoding="utf-8") as f:
        json.dump(fc, f)
    print(f"Wrote {len(fc['features'])} features to {path}")


if __name__ == "__main__":
    setup_logging(logging.INFO)
    summary()
    export()
