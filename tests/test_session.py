import numpy as np
import pytest

from conftest import BLACK, BLUE, RED, WHITE
from errors import SessionAlreadyActive, SnapshotMismatch
from geometry import ToolKind, paint_shape, shape_for
from raster import Point, RasterSurface
from session import SessionState, StrokeSession, StrokeStyle


def _drag(session, tool, style, points):
    session.begin(points[0], tool, style)
    for point in points[1:]:
        session.move_to(point)
    session.end()


def test_rectangle_drag_leaves_only_final_outline(surface, session, outline_style):
    _drag(session, ToolKind.RECTANGLE, outline_style, [(5, 5), (5, 5), (40, 40)])

    expected = RasterSurface(50, 50)
    expected.paint_rect((5, 5), (40, 40), 2, BLACK)
    assert np.array_equal(surface.pixels(), expected.pixels())
    assert session.state is SessionState.IDLE


@pytest.mark.parametrize("tool", [ToolKind.RECTANGLE, ToolKind.CIRCLE, ToolKind.TRIANGLE])
@pytest.mark.parametrize("filled", [False, True])
def test_shape_preview_frames_leave_no_trail(surface, session, tool, filled):
    # Permanent content painted before the gesture must survive the previews
    surface.paint_segment((0, 48), (49, 48), 2, BLUE)
    style = StrokeStyle(color=RED, width_px=3, filled=filled)
    path = [(25, 20), (30, 22), (12, 35), (40, 8), (33, 30)]
    _drag(session, tool, style, path)

    expected = RasterSurface(50, 50)
    expected.paint_segment((0, 48), (49, 48), 2, BLUE)
    paint_shape(expected, shape_for(path[0], path[-1], tool), style)
    assert np.array_equal(surface.pixels(), expected.pixels())


def test_begin_does_not_touch_raster(surface, session, outline_style):
    before = surface.pixels()
    session.begin((10, 10), ToolKind.BRUSH, outline_style)
    assert np.array_equal(before, surface.pixels())
    assert session.active
    assert session.anchor == session.previous == Point(10, 10)


def test_brush_accumulates_segments(surface, session):
    style = StrokeStyle(color=RED, width_px=1)
    session.begin((10, 10), ToolKind.BRUSH, style)
    session.move_to((20, 10))
    session.move_to((20, 20))
    assert session.previous == Point(20, 20)
    assert session.anchor == Point(10, 10)
    session.end()
    assert surface.pixel_at((15, 10)) == RED
    assert surface.pixel_at((20, 15)) == RED
    # No segment from the anchor to the last sample
    assert surface.pixel_at((15, 15)) == WHITE


def test_sequential_brush_gestures_both_persist(surface, session):
    _drag(session, ToolKind.BRUSH, StrokeStyle(color=RED, width_px=3), [(10, 10), (40, 10)])
    _drag(session, ToolKind.BRUSH, StrokeStyle(color=BLUE, width_px=3), [(10, 40), (40, 40)])
    assert surface.pixel_at((25, 10)) == RED
    assert surface.pixel_at((25, 40)) == BLUE
    assert surface.pixel_at((25, 25)) == WHITE


def test_eraser_paints_background_regardless_of_color(surface, session):
    surface.paint_rect((0, 0), (50, 50), 1, BLACK, filled=True)
    _drag(session, ToolKind.ERASER, StrokeStyle(color=RED, width_px=4), [(5, 25), (45, 25)])
    assert surface.pixel_at((25, 25)) == WHITE
    assert surface.pixel_at((25, 10)) == BLACK


def test_second_begin_is_rejected(surface, session, outline_style):
    session.begin((5, 5), ToolKind.RECTANGLE, outline_style)
    anchor, snapshot = session.anchor, session.snapshot

    with pytest.raises(SessionAlreadyActive):
        session.begin((30, 30), ToolKind.CIRCLE, StrokeStyle(color=RED))

    assert session.anchor == anchor
    assert session.snapshot is snapshot
    assert session.tool is ToolKind.RECTANGLE
    assert session.style == outline_style


def test_stray_events_are_ignored(surface, session):
    before = surface.pixels()
    session.move_to((10, 10))
    session.end()
    assert session.state is SessionState.IDLE
    assert np.array_equal(before, surface.pixels())


def test_end_releases_gesture(session, outline_style):
    session.begin((5, 5), ToolKind.CIRCLE, outline_style)
    session.end()
    assert not session.active
    assert session.snapshot is None
    assert session.anchor is None
    assert session.style is None


def test_resize_mid_gesture_aborts_shape_gesture(surface, session, outline_style):
    session.begin((5, 5), ToolKind.RECTANGLE, outline_style)
    session.move_to((20, 20))
    surface.initialize(60, 60)

    with pytest.raises(SnapshotMismatch):
        session.move_to((30, 30))
    assert session.state is SessionState.IDLE
    assert session.snapshot is None
    assert np.all(surface.pixels() == 255)

    # The next gesture starts fresh against the new buffer
    _drag(session, ToolKind.RECTANGLE, outline_style, [(5, 5), (50, 50)])
    assert surface.pixel_at((50, 20)) == BLACK


def test_abort_leaves_raster_as_is(surface, session, outline_style):
    session.begin((5, 5), ToolKind.RECTANGLE, outline_style)
    session.move_to((30, 30))
    session.abort()
    assert not session.active
    assert surface.pixel_at((30, 15)) == BLACK


def test_stroke_style_validation():
    assert StrokeStyle(color="#f00").color == RED
    with pytest.raises(ValueError):
        StrokeStyle(width_px=0)
    with pytest.raises(ValueError):
        StrokeStyle(width_px=2.5)
