"""Roof, panel and settings records.

All records are frozen; edits go through `dataclasses.replace` and the layout
functions hand back new tuples instead of mutating collections.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from roofpv.geo.metrics import detect_orientation, polygon_area

log = logging.getLogger(__name__)

Point = Tuple[float, float]

# Default module: 2382 mm x 1134 mm, 620 W
PANEL_LENGTH = 2.382
PANEL_WIDTH = 1.134
PANEL_POWER = 0.62  # kW

DEFAULT_SPACING = 0.0
DEFAULT_EDGE_BUFFER = 0.2
MANUAL_EDGE_BUFFER = 0.1
ROTATION_STEP = 15.0

MIN_STRINGS = 1
MAX_STRINGS = 10
DEFAULT_STRINGS = 2


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class PanelSpec:
    """Physical footprint (m) and rating (kW) of one module."""

    length: float = PANEL_LENGTH
    width: float = PANEL_WIDTH
    power: float = PANEL_POWER

    def __post_init__(self) -> None:
        if not (self.length > 0 and self.width > 0):
            raise ValueError(f"panel footprint must be positive, got {self.length} x {self.width}")
        if self.power < 0:
            raise ValueError(f"panel power must be >= 0, got {self.power}")


DEFAULT_PANEL = PanelSpec()


@dataclass(frozen=True)
class PlacementSettings:
    """Caller-owned placement parameters.

    Out-of-range values are clamped rather than rejected: spacing and
    edge_buffer to >= 0, number_of_strings to [1, 10].
    """

    spacing: float = DEFAULT_SPACING
    edge_buffer: float = DEFAULT_EDGE_BUFFER
    orientation: float = 0.0
    allow_rotation: bool = True
    number_of_strings: int = DEFAULT_STRINGS

    def __post_init__(self) -> None:
        spacing = max(0.0, float(self.spacing))
        edge_buffer = max(0.0, float(self.edge_buffer))
        strings = min(MAX_STRINGS, max(MIN_STRINGS, int(self.number_of_strings)))
        if (spacing, edge_buffer, strings) != (self.spacing, self.edge_buffer, self.number_of_strings):
            log.debug(
                "Clamped placement settings: spacing=%s edge_buffer=%s strings=%s",
                spacing,
                edge_buffer,
                strings,
            )
        object.__setattr__(self, "spacing", spacing)
        object.__setattr__(self, "edge_buffer", edge_buffer)
        object.__setattr__(self, "number_of_strings", strings)
        object.__setattr__(self, "orientation", float(self.orientation))


@dataclass(frozen=True)
class RoofPolygon:
    id: str
    coordinates: Tuple[Point, ...] = ()
    area: Optional[float] = None  # m^2, cached

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "coordinates", tuple((float(lng), float(lat)) for lng, lat in self.coordinates)
        )

    @classmethod
    def from_points(cls, points, polygon_id: Optional[str] = None) -> "RoofPolygon":
        roof = cls(id=polygon_id or new_id("polygon"), coordinates=tuple(points))
        return roof.with_area()

    def with_area(self) -> "RoofPolygon":
        return replace(self, area=polygon_area(self.coordinates))

    @property
    def orientation(self) -> float:
        return detect_orientation(self.coordinates)

    def __len__(self) -> int:
        return len(self.coordinates)


@dataclass(frozen=True)
class SolarPanel:
    id: str
    position: Point
    corners: Tuple[Point, ...]
    rotation: float = 0.0
    length: float = PANEL_LENGTH
    width: float = PANEL_WIDTH
    power: float = PANEL_POWER

    @property
    def spec(self) -> PanelSpec:
        return PanelSpec(length=self.length, width=self.width, power=self.power)


class Rejection(str, Enum):
    """Why a placement, rotation or drag request was turned down."""

    NO_ROOF = "no_roof"
    OUTSIDE_ROOF = "outside_roof"
    CORNERS_OUTSIDE = "corners_outside"
    TOO_CLOSE_TO_EDGE = "too_close_to_edge"
    OVERLAPS_PANEL = "overlaps_panel"
    ROTATION_BLOCKED = "rotation_blocked"
    UNKNOWN_PANEL = "unknown_panel"
    NOT_DRAGGING = "not_dragging"


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of an interactive request.

    A rejected request leaves `panels` equal to the collection it was given;
    `reason` is an advisory for the caller to surface, not an error.
    """

    accepted: bool
    panels: Tuple[SolarPanel, ...]
    panel: Optional[SolarPanel] = None
    reason: Optional[Rejection] = None

    def __bool__(self) -> bool:
        return self.accepted


@dataclass(frozen=True)
class AutoPlacement:
    """Result of one auto-placement pass."""

    panels: Tuple[SolarPanel, ...] = field(default_factory=tuple)
    settings: PlacementSettings = field(default_factory=PlacementSettings)
    orientation: float = 0.0  # detect_orientation of the (lng, lat) ring, degrees
    frame_angle: float = 0.0  # the same edge measured in meters; the grid follows this
    rows: int = 0
    columns: int = 0
