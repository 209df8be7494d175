"""Interactive designer session.

`DesignerSession` owns the roofs, the panels and every piece of interaction
state (the roof being drawn, the active drag, the selection, the placement
flags). Event handlers read that state through the session at call time, so a
handler never acts on a stale copy. Collections are tuples and are replaced
wholesale on every change.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple

from roofpv.export.snapshot import ProjectSnapshot, build_snapshot
from roofpv.layout import grid, manual, mutate
from roofpv.layout.models import (
    DEFAULT_PANEL,
    ROTATION_STEP,
    PanelSpec,
    PlacementResult,
    PlacementSettings,
    Rejection,
    RoofPolygon,
    SolarPanel,
    new_id,
)
from roofpv.layout.mutate import DragState
from roofpv.layout.panel_geometry import find_panel_at
from roofpv.score.score import SystemCalculation, calculate_system

log = logging.getLogger(__name__)

Point = Tuple[float, float]


class DesignerSession:
    """Single-user roof/panel editor driven by discrete geographic events."""

    def __init__(
        self,
        coordinates: Point = (0.0, 0.0),
        address: str = "",
        settings: Optional[PlacementSettings] = None,
        spec: PanelSpec = DEFAULT_PANEL,
    ):
        self.coordinates: Point = (float(coordinates[0]), float(coordinates[1]))
        self.address = address
        self.settings = settings or PlacementSettings()
        self.spec = spec
        self.snap_to_grid = True
        self.free_placement = False
        self.manual_mode = False

        self._roofs: Tuple[RoofPolygon, ...] = ()
        self._panels: Tuple[SolarPanel, ...] = ()
        self._draft: Optional[Tuple[Point, ...]] = None
        self._drag: Optional[DragState] = None
        self._selected: Optional[str] = None
        self.last_rejection: Optional[Rejection] = None

    # -- state -----------------------------------------------------------

    @property
    def roofs(self) -> Tuple[RoofPolygon, ...]:
        return self._roofs

    @property
    def panels(self) -> Tuple[SolarPanel, ...]:
        return self._panels

    @property
    def drawing(self) -> bool:
        return self._draft is not None

    @property
    def draft_points(self) -> Tuple[Point, ...]:
        return self._draft or ()

    @property
    def dragging(self) -> Optional[str]:
        return self._drag.panel_id if self._drag else None

    @property
    def selected(self) -> Optional[SolarPanel]:
        if self._selected is None:
            return None
        for panel in self._panels:
            if panel.id == self._selected:
                return panel
        return None

    def set_anchor(self, coordinates: Point, address: str = "") -> None:
        """Anchor coordinates resolved by the host's address search."""

        self.coordinates = (float(coordinates[0]), float(coordinates[1]))
        self.address = address

    def update_settings(self, **changes) -> PlacementSettings:
        self.settings = replace(self.settings, **changes)
        return self.settings

    def _apply(self, result: PlacementResult) -> PlacementResult:
        self.last_rejection = result.reason
        if result.accepted:
            self._panels = result.panels
        return result

    # -- drawing ---------------------------------------------------------

    def begin_drawing(self) -> None:
        if self._draft is None:
            self._draft = ()

    def add_point(self, point: Sequence[float]) -> None:
        if self._draft is None:
            self._draft = ()
        self._draft = self._draft + ((float(point[0]), float(point[1])),)

    def undo_point(self) -> Optional[Point]:
        if not self._draft:
            return None
        removed = self._draft[-1]
        self._draft = self._draft[:-1]
        return removed

    def finish_drawing(self) -> Optional[RoofPolygon]:
        """Commit the drawn outline as a roof; needs at least 2 points.

        Drawing mode stays on so further roofs can be drawn.
        """

        if not self._draft or len(self._draft) < 2:
            log.debug("Cannot finish a roof with %d point(s)", len(self._draft or ()))
            return None
        roof = RoofPolygon.from_points(self._draft, polygon_id=new_id("polygon"))
        self._roofs = self._roofs + (roof,)
        self._draft = ()
        log.info("Added roof %s: %d vertices, %.1f m2", roof.id, len(roof), roof.area or 0.0)
        return roof

    def cancel_drawing(self) -> None:
        """Leave drawing mode, discarding the outline in progress."""

        self._draft = None

    def delete_roof(self, roof_id: str) -> bool:
        remaining = tuple(r for r in self._roofs if r.id != roof_id)
        if len(remaining) == len(self._roofs):
            return False
        self._roofs = remaining
        return True

    # -- placement -------------------------------------------------------

    def auto_place(self) -> Tuple[SolarPanel, ...]:
        """Replace all panels with a fresh grid on every roof."""

        if not self._roofs:
            self.last_rejection = Rejection.NO_ROOF
            return self._panels
        self._panels, self.settings = grid.auto_place_all(self._roofs, self.settings, self.spec)
        self.last_rejection = None
        self._selected = None
        return self._panels

    def place_at(self, point: Sequence[float]) -> PlacementResult:
        result = manual.place_panel(
            point,
            self._roofs,
            self._panels,
            self.settings,
            self.spec,
            free_placement=self.free_placement,
            snap=self.snap_to_grid,
        )
        self._apply(result)
        if result.accepted:
            self._selected = result.panel.id
            if self.settings.orientation != result.panel.rotation:
                self.settings = replace(self.settings, orientation=result.panel.rotation)
        return result

    def add_panel_at_center(self) -> PlacementResult:
        result = self._apply(manual.add_panel_at_center(self._roofs, self._panels, self.spec))
        if result.accepted:
            self._selected = result.panel.id
        return result

    def click(self, point: Sequence[float]) -> Optional[PlacementResult]:
        """Route a map click: draw, select a panel, or place one in manual mode."""

        if self._draft is not None:
            self.add_point(point)
            return None
        hit = find_panel_at(point, self._panels)
        if hit is not None:
            self.select_panel(hit.id)
            return None
        if self.manual_mode:
            return self.place_at(point)
        return None

    def panel_at(self, point: Sequence[float]) -> Optional[SolarPanel]:
        return find_panel_at(point, self._panels)

    def select_panel(self, panel_id: Optional[str]) -> None:
        """Select a panel; selecting the selected panel clears the selection."""

        self._selected = None if panel_id is None or panel_id == self._selected else panel_id

    def clear_panels(self) -> None:
        self._panels = ()
        self._selected = None
        self._drag = None

    # -- mutation --------------------------------------------------------

    def start_drag(self, panel_id: str, pointer: Sequence[float]) -> bool:
        # A new drag always replaces whatever drag was in progress.
        self._drag = mutate.start_drag(self._panels, panel_id, pointer)
        if self._drag is None:
            self.last_rejection = Rejection.UNKNOWN_PANEL
            return False
        self._selected = panel_id
        return True

    def drag_to(self, pointer: Sequence[float]) -> Tuple[SolarPanel, ...]:
        if self._drag is None:
            self.last_rejection = Rejection.NOT_DRAGGING
            return self._panels
        self._panels = mutate.drag_to(self._panels, self._drag, pointer)
        return self._panels

    def end_drag(self) -> Tuple[SolarPanel, ...]:
        if self._drag is None:
            return self._panels
        self._panels = mutate.end_drag(self._panels, self._drag)
        self._drag = None
        return self._panels

    def cancel_drag(self) -> Tuple[SolarPanel, ...]:
        if self._drag is None:
            return self._panels
        self._panels = mutate.cancel_drag(self._panels, self._drag)
        self._drag = None
        return self._panels

    def rotate_panel(self, panel_id: str, increment: float = ROTATION_STEP) -> PlacementResult:
        return self._apply(
            mutate.rotate_panel(
                self._panels,
                panel_id,
                self._roofs,
                self.settings,
                increment=increment,
                free_placement=self.free_placement,
            )
        )

    def rotate_selected(self, increment: float = ROTATION_STEP) -> Optional[PlacementResult]:
        if self._selected is None:
            return None
        return self.rotate_panel(self._selected, increment)

    def delete_panel(self, panel_id: str) -> PlacementResult:
        result = self._apply(mutate.delete_panel(self._panels, panel_id))
        if result.accepted:
            if self._selected == panel_id:
                self._selected = None
            if self._drag is not None and self._drag.panel_id == panel_id:
                self._drag = None
        return result

    def handle_key(self, key: str) -> Optional[PlacementResult]:
        """Keyboard shortcuts for the selected panel: r / q rotate, Delete removes."""

        if self._selected is None:
            return None
        if key in ("r", "R"):
            return self.rotate_panel(self._selected, ROTATION_STEP)
        if key in ("q", "Q"):
            return self.rotate_panel(self._selected, -ROTATION_STEP)
        if key in ("Delete", "Backspace"):
            return self.delete_panel(self._selected)
        return None

    # -- output ----------------------------------------------------------

    @property
    def total_roof_area(self) -> float:
        return float(sum(r.area or 0.0 for r in self._roofs))

    def calculation(self, monthly_bill: float = 5000.0) -> Optional[SystemCalculation]:
        return calculate_system(self.total_roof_area, self._panels, monthly_bill)

    def snapshot(self, monthly_bill: Optional[float] = None) -> ProjectSnapshot:
        calc = self.calculation(monthly_bill) if monthly_bill is not None else None
        return build_snapshot(
            self.address,
            self.coordinates,
            self._roofs,
            self._panels,
            self.settings,
            calculation=calc,
        )
