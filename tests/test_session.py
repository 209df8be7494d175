import pytest

from roofpv.layout.models import PlacementSettings, Rejection
from roofpv.session.designer import DesignerSession

from conftest import ORIGIN, to_lnglat

SQUARE_M = [(-5, -5), (5, -5), (5, 5), (-5, 5)]


@pytest.fixture
def session():
    return DesignerSession(coordinates=ORIGIN)


@pytest.fixture
def roofed(session):
    session.begin_drawing()
    for p in to_lnglat(SQUARE_M):
        session.add_point(p)
    session.finish_drawing()
    session.cancel_drawing()
    return session


def test_drawing_a_roof(session):
    session.begin_drawing()
    assert session.drawing
    first, *rest = to_lnglat(SQUARE_M)

    session.add_point(first)
    assert session.finish_drawing() is None

    for p in rest:
        session.add_point(p)
    session.add_point(to_lnglat([(40, 40)])[0])
    assert session.undo_point() == pytest.approx(to_lnglat([(40, 40)])[0])

    roof = session.finish_drawing()
    assert roof is not None
    assert roof.area == pytest.approx(100.0, rel=1e-6)
    assert session.roofs == (roof,)
    # still drawing, ready for the next outline
    assert session.drawing
    assert session.draft_points == ()


def test_cancel_drawing_discards_outline(session):
    session.begin_drawing()
    session.add_point(ORIGIN)
    session.cancel_drawing()
    assert not session.drawing
    assert session.draft_points == ()
    assert session.roofs == ()


def test_clicks_add_points_while_drawing(session):
    session.begin_drawing()
    for p in to_lnglat(SQUARE_M):
        assert session.click(p) is None
    assert len(session.draft_points) == 4


def test_auto_place_needs_a_roof(session):
    assert session.auto_place() == ()
    assert session.last_rejection is Rejection.NO_ROOF


def test_auto_place_fills_the_roof(roofed):
    roofed.update_settings(orientation=90)
    panels = roofed.auto_place()
    assert len(panels) == 32
    assert roofed.settings.orientation == 0
    assert roofed.last_rejection is None


def test_manual_click_places_then_selects(roofed):
    roofed.manual_mode = True
    click = to_lnglat([(-3.5, 4.0)])[0]

    result = roofed.click(click)
    assert result.accepted
    assert roofed.selected == result.panel

    # clicking the panel toggles the selection instead of placing another
    assert roofed.click(click) is None
    assert len(roofed.panels) == 1
    assert roofed.selected is None
    roofed.click(click)
    assert roofed.selected == result.panel


def test_click_outside_roof_records_rejection(roofed):
    roofed.manual_mode = True
    result = roofed.click(to_lnglat([(30, 30)])[0])
    assert not result.accepted
    assert roofed.last_rejection is Rejection.OUTSIDE_ROOF
    assert roofed.panels == ()


def test_click_without_manual_mode_does_nothing(roofed):
    assert roofed.click(ORIGIN) is None
    assert roofed.panels == ()


def test_place_on_tall_roof_updates_orientation(session):
    session.begin_drawing()
    for p in to_lnglat([(-3, -6), (3, -6), (3, 6), (-3, 6)]):
        session.add_point(p)
    session.finish_drawing()
    session.cancel_drawing()
    session.snap_to_grid = False

    result = session.place_at(ORIGIN)
    assert result.panel.rotation == 90
    assert session.settings.orientation == 90


def test_drag_flow(roofed):
    panel = roofed.add_panel_at_center().panel
    assert roofed.start_drag(panel.id, ORIGIN)
    assert roofed.dragging == panel.id

    roofed.drag_to(to_lnglat([(1, 1)])[0])
    roofed.end_drag()
    assert roofed.dragging is None
    assert roofed.panels[0].position == pytest.approx(to_lnglat([(1, 1)])[0], abs=1e-12)

    roofed.start_drag(panel.id, ORIGIN)
    roofed.drag_to(to_lnglat([(-2, 0)])[0])
    roofed.cancel_drag()
    assert roofed.panels[0].position == pytest.approx(to_lnglat([(1, 1)])[0], abs=1e-12)


def test_drag_requires_active_drag(roofed):
    roofed.add_panel_at_center()
    before = roofed.panels
    assert roofed.drag_to(ORIGIN) == before
    assert roofed.last_rejection is Rejection.NOT_DRAGGING
    assert not roofed.start_drag("missing", ORIGIN)
    assert roofed.last_rejection is Rejection.UNKNOWN_PANEL


def test_keyboard_shortcuts(roofed):
    panel = roofed.add_panel_at_center().panel
    assert roofed.selected.id == panel.id

    assert roofed.handle_key("r").panel.rotation == 15
    assert roofed.handle_key("Q").panel.rotation == 0
    assert roofed.handle_key("x") is None

    deleted = roofed.handle_key("Delete")
    assert deleted.accepted
    assert roofed.panels == ()
    assert roofed.selected is None
    assert roofed.handle_key("r") is None


def test_calculation_and_snapshot(roofed):
    assert roofed.total_roof_area == pytest.approx(100.0, rel=1e-6)
    roofed.auto_place()

    calc = roofed.calculation(5000)
    assert calc.panel_count == 32
    assert calc.system_size_kw == pytest.approx(19.8)

    snap = roofed.snapshot(5000)
    assert snap.panel_count == 32
    assert snap.capacity_kw == pytest.approx(32 * 0.62)
    assert snap.address == f"Coordinates: {ORIGIN[1]:.6f}, {ORIGIN[0]:.6f}"
    assert snap.calculation == calc
    assert snap.number_of_strings == 2


def test_empty_session_has_no_calculation(session):
    assert session.calculation() is None
    assert session.snapshot().calculation is None


def test_settings_are_clamped(session):
    settings = session.update_settings(spacing=-1, number_of_strings=50)
    assert settings == PlacementSettings(spacing=0.0, number_of_strings=10)


def test_clear_and_delete_roof(roofed):
    roofed.auto_place()
    roofed.clear_panels()
    assert roofed.panels == ()
    roof_id = roofed.roofs[0].id
    assert roofed.delete_roof(roof_id)
    assert not roofed.delete_roof(roof_id)
    assert roofed.roofs == ()
