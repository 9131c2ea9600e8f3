import re

import numpy as np
import pytest

from canvas import Canvas, DrawState, default_export_name
from conftest import BLACK, RED, WHITE
from errors import InvalidDimensions, SessionAlreadyActive
from geometry import ToolKind
from input_adapter import GestureEvent, GestureKind
from raster import Point


@pytest.fixture
def canvas():
    return Canvas(50, 50)


def test_default_state():
    state = DrawState()
    assert state.tool is ToolKind.BRUSH
    assert state.color == BLACK
    assert state.brush_size == 5
    assert state.filled is False


def test_style_is_frozen_at_pointer_down(canvas):
    canvas.set_brush_size(1)
    canvas.pointer_down((10, 10))
    canvas.set_color(RED)
    canvas.set_brush_size(9)
    canvas.pointer_move((40, 10))
    canvas.pointer_up()

    assert canvas.surface.pixel_at((25, 10)) == BLACK
    assert canvas.surface.pixel_at((25, 13)) == WHITE

    # The change applies to the next gesture
    canvas.execute({"action": "gesture", "points": [[10, 30], [40, 30]]})
    assert canvas.surface.pixel_at((25, 30)) == RED
    assert canvas.surface.pixel_at((25, 33)) == RED


def test_execute_unknown_action(canvas):
    with pytest.raises(ValueError):
        canvas.execute({"action": "undo"})


def test_execute_settings(canvas):
    canvas.execute({"action": "set_tool", "tool": "triangle"})
    canvas.execute({"action": "set_color", "r": 1, "g": 2, "b": 3})
    canvas.execute({"action": "set_fill", "filled": True})
    canvas.execute({"action": "set_brush_size", "size": 500})
    assert canvas.state == DrawState(ToolKind.TRIANGLE, (1, 2, 3), 50, True)

    canvas.execute({"action": "set_color", "color": "#ff0000"})
    canvas.execute({"action": "set_brush_size", "size": 0})
    assert canvas.state.color == RED
    assert canvas.state.brush_size == 1


def test_set_tool_rejects_unknown(canvas):
    with pytest.raises(ValueError):
        canvas.execute({"action": "set_tool", "tool": "lasso"})
    assert canvas.state.tool is ToolKind.BRUSH


def test_pointer_commands_draw_rectangle(canvas):
    canvas.execute({"action": "set_tool", "tool": "rectangle"})
    canvas.execute({"action": "set_brush_size", "size": 2})
    canvas.execute({"action": "pointer_down", "x": 5, "y": 5})
    canvas.execute({"action": "pointer_move", "x": 20, "y": 20})
    canvas.execute({"action": "pointer_move", "x": 40, "y": 40})
    canvas.execute({"action": "pointer_up"})
    assert canvas.surface.pixel_at((40, 30)) == BLACK
    assert canvas.surface.pixel_at((20, 30)) == WHITE
    assert not canvas.session.active


def test_gesture_command_selects_tool(canvas):
    canvas.set_fill(True)
    canvas.execute({"action": "gesture", "tool": "circle", "points": [[25, 25], [35, 25]]})
    assert canvas.state.tool is ToolKind.CIRCLE
    assert canvas.surface.pixel_at((25, 25)) == BLACK
    assert not canvas.session.active


def test_gesture_command_while_active_is_rejected(canvas):
    canvas.pointer_down((1, 1))
    with pytest.raises(SessionAlreadyActive):
        canvas.execute({"action": "gesture", "points": [[10, 10], [20, 20]]})
    assert canvas.session.anchor == Point(1, 1)


def test_handle_gesture_events(canvas):
    canvas.handle(GestureEvent(GestureKind.BEGIN, Point(10, 25)))
    canvas.handle(GestureEvent(GestureKind.MOVE, Point(40, 25)))
    canvas.handle(GestureEvent(GestureKind.END, Point(40, 25)))
    assert canvas.surface.pixel_at((25, 25)) == BLACK
    assert not canvas.session.active


def test_invalid_resize_aborts_gesture(canvas):
    canvas.pointer_down((5, 5))
    with pytest.raises(InvalidDimensions):
        canvas.execute({"action": "resize", "width": 0, "height": 40})
    assert not canvas.session.active
    assert (canvas.width, canvas.height) == (50, 50)


def test_resize_resets_to_background(canvas):
    canvas.execute({"action": "gesture", "points": [[0, 0], [49, 49]]})
    canvas.resize(80, 30)
    assert (canvas.width, canvas.height) == (80, 30)
    assert np.all(canvas.surface.pixels() == 255)


def test_clear(canvas):
    canvas.execute({"action": "gesture", "points": [[0, 0], [49, 49]]})
    canvas.execute({"action": "clear"})
    assert np.all(canvas.surface.pixels() == 255)


def test_save_uses_extension(canvas, tmp_path):
    path = canvas.save(str(tmp_path / "out.png"))
    with open(path, "rb") as f:
        assert f.read().startswith(b"\x89PNG")


def test_save_without_path_uses_timestamp_name(canvas, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = canvas.save()
    assert re.fullmatch(r"\d+\.jpg", path)
    assert (tmp_path / path).read_bytes().startswith(b"\xff\xd8")


def test_default_export_name():
    assert re.fullmatch(r"\d{13,}\.jpg", default_export_name())


def test_get_pixels_rgb(canvas):
    region = canvas.get_pixels_rgb(0, 0, 3, 2)
    assert region == [[[255, 255, 255]] * 3] * 2


def test_describe_reports_current_size_and_settings(canvas):
    canvas.set_tool("circle")
    canvas.set_color("#102030")
    canvas.resize(120, 90)
    assert canvas.describe() == (
        "Canvas: 120x90, tool: circle, color: rgb(16, 32, 48), brush_size: 5, fill: off"
    )
