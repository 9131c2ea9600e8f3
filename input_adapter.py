"""Turns pygame mouse and touch events into one canvas-local gesture stream."""

from enum import Enum
from typing import NamedTuple

import pygame

from raster import Point

MOUSE = "mouse"


class GestureKind(Enum):
    BEGIN = "begin"
    MOVE = "move"
    END = "end"


class GestureEvent(NamedTuple):
    kind: GestureKind
    point: Point


class InputAdapter:
    """Tracks a single pointer (the mouse or the first finger down).

    `canvas_rect` is where the canvas sits in the window; emitted points are
    relative to its top-left corner. Presses outside it are ignored.
    """

    def __init__(self, canvas_rect, window_size: tuple[int, int]):
        self.canvas_rect = pygame.Rect(canvas_rect)
        self.window_size = window_size
        self._pointer = None

    def resize(self, canvas_rect, window_size: tuple[int, int]):
        self.canvas_rect = pygame.Rect(canvas_rect)
        self.window_size = window_size

    def _local(self, x: float, y: float) -> Point:
        return Point(x - self.canvas_rect.x, y - self.canvas_rect.y)

    def _finger_pos(self, event) -> tuple[float, float]:
        # Finger coordinates are normalized to 0..1 of the window
        return event.x * self.window_size[0], event.y * self.window_size[1]

    def translate(self, event) -> GestureEvent | None:
        etype = event.type

        if etype in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEMOTION, pygame.MOUSEBUTTONUP):
            # SDL also synthesizes mouse events from touches; the finger
            # events already carry those contacts.
            if getattr(event, "touch", False):
                return None
            if etype == pygame.MOUSEBUTTONDOWN:
                if event.button != 1 or self._pointer is not None:
                    return None
                if not self.canvas_rect.collidepoint(event.pos):
                    return None
                self._pointer = MOUSE
                return GestureEvent(GestureKind.BEGIN, self._local(*event.pos))
            if self._pointer != MOUSE:
                return None
            if etype == pygame.MOUSEMOTION:
                return GestureEvent(GestureKind.MOVE, self._local(*event.pos))
            if event.button != 1:
                return None
            self._pointer = None
            return GestureEvent(GestureKind.END, self._local(*event.pos))

        if etype in (pygame.FINGERDOWN, pygame.FINGERMOTION, pygame.FINGERUP):
            pos = self._finger_pos(event)
            finger = ("finger", event.finger_id)
            if etype == pygame.FINGERDOWN:
                if self._pointer is not None:
                    return None
                if not self.canvas_rect.collidepoint(int(pos[0]), int(pos[1])):
                    return None
                self._pointer = finger
                return GestureEvent(GestureKind.BEGIN, self._local(*pos))
            if self._pointer != finger:
                return None
            if etype == pygame.FINGERMOTION:
                return GestureEvent(GestureKind.MOVE, self._local(*pos))
            self._pointer = None
            return GestureEvent(GestureKind.END, self._local(*pos))

        return None
