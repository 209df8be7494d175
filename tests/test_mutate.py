import pytest

from roofpv.layout.models import PlacementSettings, Rejection
from roofpv.layout.mutate import (
    cancel_drag,
    delete_panel,
    drag_to,
    end_drag,
    rotate_panel,
    start_drag,
)
from roofpv.layout.panel_geometry import make_panel, panel_corners

from conftest import ORIGIN, rotated_rect_m, to_lnglat


@pytest.fixture
def panel():
    return make_panel(ORIGIN, 0, panel_id="p1")


def test_drag_follows_pointer_offset(panel):
    other = make_panel(to_lnglat([(10, 10)])[0], panel_id="p2")
    panels = (panel, other)
    grab = to_lnglat([(0.5, 0.2)])[0]
    state = start_drag(panels, "p1", grab)

    moved = drag_to(panels, state, to_lnglat([(3.5, -1.8)])[0])
    expected = to_lnglat([(3.0, -2.0)])[0]
    assert moved[0].position == pytest.approx(expected, abs=1e-12)
    assert moved[0].corners == panel_corners(moved[0].position, 0)
    assert moved[1] is other
    assert panels[0] is panel


def test_drag_is_not_validated(panel):
    state = start_drag((panel,), "p1", ORIGIN)
    far = to_lnglat([(100, 100)])[0]
    moved = drag_to((panel,), state, far)
    assert moved[0].position == pytest.approx(far, abs=1e-12)


def test_end_drag_commits_position(panel):
    state = start_drag((panel,), "p1", ORIGIN)
    moved = drag_to((panel,), state, to_lnglat([(2, 2)])[0])
    committed = end_drag(moved, state)
    assert committed[0].position == moved[0].position


def test_cancel_drag_restores_position(panel):
    state = start_drag((panel,), "p1", ORIGIN)
    moved = drag_to((panel,), state, to_lnglat([(2, 2)])[0])
    restored = cancel_drag(moved, state)
    assert restored[0].position == panel.position
    assert restored[0].corners == panel.corners


def test_start_drag_unknown_panel(panel):
    assert start_drag((panel,), "missing", ORIGIN) is None


def test_rotate_forward_then_back(panel, square_roof):
    settings = PlacementSettings()
    forward = rotate_panel((panel,), "p1", [square_roof], settings)
    assert forward.accepted
    assert forward.panel.rotation == 15

    back = rotate_panel(forward.panels, "p1", [square_roof], settings, increment=-15)
    assert back.accepted
    assert back.panel.rotation == 0
    assert back.panel.corners == panel.corners


def test_rotation_wraps_around(square_roof):
    tilted = make_panel(ORIGIN, 350, panel_id="t")
    result = rotate_panel((tilted,), "t", [square_roof], PlacementSettings())
    assert result.panel.rotation == 5


def test_rotation_falls_back_to_other_direction(panel, make_roof):
    # roof only slightly larger than the panel, turned 15 degrees
    snug = make_roof(rotated_rect_m(1.25, 0.6, 15.0), polygon_id="snug")
    result = rotate_panel((panel,), "p1", [snug], PlacementSettings(), increment=-15)
    assert result.accepted
    assert result.panel.rotation == 15


def test_rotation_blocked_keeps_panel(panel, make_roof):
    strip = make_roof([(-10, -0.2), (10, -0.2), (10, 0.2), (-10, 0.2)], polygon_id="strip")
    result = rotate_panel((panel,), "p1", [strip], PlacementSettings())
    assert not result.accepted
    assert result.reason is Rejection.ROTATION_BLOCKED
    assert result.panels == (panel,)
    assert result.panels[0].rotation == 0


def test_free_placement_rotates_anyway(panel, make_roof):
    strip = make_roof([(-10, -0.2), (10, -0.2), (10, 0.2), (-10, 0.2)], polygon_id="strip")
    result = rotate_panel((panel,), "p1", [strip], PlacementSettings(), free_placement=True)
    assert result.accepted
    assert result.panel.rotation == 15


def test_panel_off_roof_rotates_freely(panel, make_roof):
    elsewhere = make_roof([(20, 20), (30, 20), (30, 30), (20, 30)])
    result = rotate_panel((panel,), "p1", [elsewhere], PlacementSettings(), increment=30)
    assert result.accepted
    assert result.panel.rotation == 30


def test_rotate_unknown_panel(panel, square_roof):
    result = rotate_panel((panel,), "nope", [square_roof], PlacementSettings())
    assert result.reason is Rejection.UNKNOWN_PANEL
    assert result.panels == (panel,)


def test_delete_panel(panel):
    other = make_panel(to_lnglat([(5, 0)])[0], panel_id="p2")
    result = delete_panel((panel, other), "p1")
    assert result.accepted
    assert result.panels == (other,)
    assert result.panel is panel

    missing = delete_panel((other,), "p1")
    assert not missing
    assert missing.reason is Rejection.UNKNOWN_PANEL
