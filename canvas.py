"""Drawing engine: routes tool settings, gestures and lifecycle commands
into the raster surface and the active stroke session."""

import logging
import os
import time
from dataclasses import dataclass

from errors import InvalidDimensions
from geometry import ToolKind
from input_adapter import GestureEvent, GestureKind
from raster import RasterSurface, parse_color
from session import StrokeSession, StrokeStyle

logger = logging.getLogger(__name__)

MIN_BRUSH_SIZE = 1
MAX_BRUSH_SIZE = 50


def default_export_name() -> str:
    """File name used for exports: epoch milliseconds, JPEG."""
    return f"{int(time.time() * 1000)}.jpg"


@dataclass
class DrawState:
    tool: ToolKind = ToolKind.BRUSH
    color: tuple = (0, 0, 0)
    brush_size: int = 5
    filled: bool = False

    def stroke_style(self) -> StrokeStyle:
        return StrokeStyle(color=self.color, width_px=self.brush_size, filled=self.filled)


class Canvas:
    def __init__(self, width: int, height: int):
        self.state = DrawState()
        self.surface = RasterSurface(width, height)
        self.session = StrokeSession(self.surface)

    @property
    def width(self) -> int:
        return self.surface.width

    @property
    def height(self) -> int:
        return self.surface.height

    def execute(self, cmd: dict):
        action = cmd.get("action")
        method = getattr(self, f"_do_{action}", None)
        if method is None:
            raise ValueError(f"Unknown action: {action}")
        method(cmd)

    # --- Tool settings (read at the next pointer_down) ---

    def set_tool(self, tool):
        self.state.tool = ToolKind.parse(tool)

    def set_color(self, color):
        self.state.color = parse_color(color)

    def set_brush_size(self, size: int):
        self.state.brush_size = max(MIN_BRUSH_SIZE, min(MAX_BRUSH_SIZE, int(size)))

    def set_fill(self, filled: bool):
        self.state.filled = bool(filled)

    # --- Gestures ---

    def pointer_down(self, point):
        self.session.begin(point, self.state.tool, self.state.stroke_style())

    def pointer_move(self, point):
        self.session.move_to(point)

    def pointer_up(self):
        self.session.end()

    def handle(self, event: GestureEvent):
        if event.kind is GestureKind.BEGIN:
            self.pointer_down(event.point)
        elif event.kind is GestureKind.MOVE:
            self.pointer_move(event.point)
        else:
            self.pointer_up()

    # --- Lifecycle ---

    def resize(self, width: int, height: int):
        """Re-initialize the raster. An active shape gesture fails on its
        next move because its snapshot no longer fits."""
        try:
            self.surface.initialize(width, height)
        except InvalidDimensions:
            self.session.abort()
            raise
        logger.info("Canvas resized to %dx%d", width, height)

    def clear(self):
        self.surface.clear()
        logger.info("Canvas cleared")

    def encode_image(self, fmt: str = "png") -> bytes:
        return self.surface.encode_image(fmt)

    def save(self, path: str | None = None) -> str:
        """Write the canvas to `path` (format from its extension) and return the path."""
        if not path:
            path = default_export_name()
        ext = os.path.splitext(path)[1] or ".png"
        data = self.encode_image(ext)
        with open(path, "wb") as f:
            f.write(data)
        logger.info("Canvas saved to %s", path)
        return path

    def describe(self) -> str:
        r, g, b = self.state.color
        return (
            f"Canvas: {self.width}x{self.height}, "
            f"tool: {self.state.tool.value}, "
            f"color: rgb({r}, {g}, {b}), "
            f"brush_size: {self.state.brush_size}, "
            f"fill: {'on' if self.state.filled else 'off'}"
        )

    def get_pixels_rgb(self, x: int = 0, y: int = 0,
                       w: int | None = None, h: int | None = None) -> list[list[list[int]]]:
        return self.surface.get_pixels_rgb(x, y, w, h)

    # --- Command handlers ---

    def _do_set_tool(self, cmd: dict):
        self.set_tool(cmd["tool"])

    def _do_set_color(self, cmd: dict):
        if "color" in cmd:
            self.set_color(cmd["color"])
        else:
            self.set_color((cmd["r"], cmd["g"], cmd["b"]))

    def _do_set_brush_size(self, cmd: dict):
        self.set_brush_size(cmd["size"])

    def _do_set_fill(self, cmd: dict):
        self.set_fill(cmd["filled"])

    def _do_pointer_down(self, cmd: dict):
        self.pointer_down((cmd["x"], cmd["y"]))

    def _do_pointer_move(self, cmd: dict):
        self.pointer_move((cmd["x"], cmd["y"]))

    def _do_pointer_up(self, cmd: dict):
        self.pointer_up()

    def _do_gesture(self, cmd: dict):
        """A whole drag in one command: down on the first point, move through the rest."""
        points = cmd["points"]
        if not points:
            return
        if "tool" in cmd:
            self.set_tool(cmd["tool"])
        self.pointer_down(points[0])
        try:
            for point in points[1:]:
                self.pointer_move(point)
        finally:
            self.pointer_up()

    def _do_clear(self, cmd: dict):
        self.clear()

    def _do_resize(self, cmd: dict):
        self.resize(cmd["width"], cmd["height"])
