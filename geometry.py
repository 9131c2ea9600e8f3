"""Tool geometry: maps (anchor, current, tool) to a drawable shape."""

import math
from enum import Enum
from typing import NamedTuple

from raster import Point, RasterSurface, as_point


class ToolKind(Enum):
    BRUSH = "brush"
    ERASER = "eraser"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    TRIANGLE = "triangle"

    @classmethod
    def parse(cls, value) -> "ToolKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown tool: {value!r} (expected one of {names})") from None

    @property
    def is_shape(self) -> bool:
        return self in (ToolKind.RECTANGLE, ToolKind.CIRCLE, ToolKind.TRIANGLE)

    @property
    def is_freehand(self) -> bool:
        return not self.is_shape


class SegmentShape(NamedTuple):
    start: Point
    end: Point


class RectShape(NamedTuple):
    p1: Point
    p2: Point


class CircleShape(NamedTuple):
    center: Point
    radius: float


class TriangleShape(NamedTuple):
    p1: Point
    p2: Point
    p3: Point


def circle_radius(anchor, current) -> float:
    anchor, current = as_point(anchor), as_point(current)
    return math.hypot(current.x - anchor.x, current.y - anchor.y)


def mirror_vertex(anchor, current) -> Point:
    """Reflect `current` across the vertical line through `anchor`.

    The triangle tool always draws the isosceles triangle this produces;
    its third vertex is not independently controllable."""
    anchor, current = as_point(anchor), as_point(current)
    return Point(2 * anchor.x - current.x, current.y)


def segment_for(previous, current) -> SegmentShape:
    return SegmentShape(as_point(previous), as_point(current))


def shape_for(anchor, current, tool: ToolKind):
    """Return the shape descriptor a shape tool previews for this drag."""
    anchor, current = as_point(anchor), as_point(current)
    if tool is ToolKind.RECTANGLE:
        return RectShape(anchor, current)
    if tool is ToolKind.CIRCLE:
        return CircleShape(anchor, circle_radius(anchor, current))
    if tool is ToolKind.TRIANGLE:
        return TriangleShape(anchor, current, mirror_vertex(anchor, current))
    raise ValueError(f"{tool.value} is a freehand tool; use segment_for")


def paint_shape(surface: RasterSurface, shape, style, color=None):
    """Paint a shape descriptor with a StrokeStyle; `color` overrides style.color."""
    color = style.color if color is None else color
    if isinstance(shape, SegmentShape):
        surface.paint_segment(shape.start, shape.end, style.width_px, color)
    elif isinstance(shape, RectShape):
        surface.paint_rect(shape.p1, shape.p2, style.width_px, color, style.filled)
    elif isinstance(shape, CircleShape):
        surface.paint_ellipse(shape.center, shape.radius, style.width_px, color,
                              style.filled)
    elif isinstance(shape, TriangleShape):
        surface.paint_triangle(shape.p1, shape.p2, shape.p3, style.width_px, color,
                               style.filled)
    else:
        raise TypeError(f"Not a shape descriptor: {shape!r}")
