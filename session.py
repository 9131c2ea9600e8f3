"""Stroke session: the state machine for one pointer-drag gesture.

Shape tools restore the pre-gesture snapshot before every preview frame, so
the raster never holds more than one uncommitted outline. Freehand tools
paint only the segment since the last sample and never restore.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from errors import SessionAlreadyActive, SnapshotMismatch
from geometry import ToolKind, paint_shape, segment_for, shape_for
from raster import Point, RasterSurface, Snapshot, as_point, parse_color

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrokeStyle:
    color: tuple = (0, 0, 0)
    width_px: int = 5
    filled: bool = False

    def __post_init__(self):
        if not isinstance(self.width_px, int) or self.width_px <= 0:
            raise ValueError(f"Stroke width must be a positive integer, got {self.width_px!r}")
        object.__setattr__(self, "color", parse_color(self.color))


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class _Gesture:
    anchor: Point
    previous: Point
    tool: ToolKind
    style: StrokeStyle
    snapshot: Snapshot


class StrokeSession:
    def __init__(self, surface: RasterSurface):
        self.surface = surface
        self._gesture: _Gesture | None = None

    @property
    def state(self) -> SessionState:
        return SessionState.IDLE if self._gesture is None else SessionState.ACTIVE

    @property
    def active(self) -> bool:
        return self._gesture is not None

    @property
    def anchor(self) -> Point | None:
        return self._gesture.anchor if self._gesture else None

    @property
    def previous(self) -> Point | None:
        return self._gesture.previous if self._gesture else None

    @property
    def tool(self) -> ToolKind | None:
        return self._gesture.tool if self._gesture else None

    @property
    def style(self) -> StrokeStyle | None:
        return self._gesture.style if self._gesture else None

    @property
    def snapshot(self) -> Snapshot | None:
        return self._gesture.snapshot if self._gesture else None

    def begin(self, point, tool: ToolKind, style: StrokeStyle):
        if self._gesture is not None:
            raise SessionAlreadyActive()
        point = as_point(point)
        self._gesture = _Gesture(
            anchor=point,
            previous=point,
            tool=ToolKind.parse(tool),
            style=style,
            snapshot=self.surface.capture_snapshot(),
        )
        logger.debug("Gesture began at %s with %s", point, self._gesture.tool.value)

    def move_to(self, point):
        gesture = self._gesture
        if gesture is None:
            logger.debug("Ignoring stray move to %s", point)
            return
        point = as_point(point)

        if gesture.tool.is_shape:
            try:
                self.surface.restore_snapshot(gesture.snapshot)
            except SnapshotMismatch:
                self.abort()
                raise
            paint_shape(self.surface, shape_for(gesture.anchor, point, gesture.tool),
                        gesture.style)
            return

        color = None
        if gesture.tool is ToolKind.ERASER:
            color = self.surface.background
        paint_shape(self.surface, segment_for(gesture.previous, point), gesture.style,
                    color=color)
        gesture.previous = point

    def end(self):
        if self._gesture is None:
            logger.debug("Ignoring stray gesture end")
            return
        logger.debug("Gesture ended (%s)", self._gesture.tool.value)
        self._gesture = None

    def abort(self):
        """Drop the active gesture and its snapshot without touching the raster."""
        if self._gesture is not None:
            logger.warning("Aborting %s gesture", self._gesture.tool.value)
        self._gesture = None
