"""Raster surface: pygame.Surface wrapper with paint primitives and snapshots."""

import io
import logging
import re
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
import pygame

from errors import InvalidDimensions, SnapshotMismatch

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = (255, 255, 255)

# pygame picks the encoder from the file-name hint
IMAGE_FORMATS = {"png": "png", "jpg": "jpg", "jpeg": "jpg", "bmp": "bmp", "tga": "tga"}

_RGB_FUNC = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+\s*)?\)$"
)
_HEX_DIGITS = set("0123456789abcdef")


class Point(NamedTuple):
    x: float
    y: float


def as_point(value) -> Point:
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(x, y)


def parse_color(value) -> tuple:
    """Normalize a color to an (r, g, b) tuple.

    Accepts RGB(A) sequences, pygame.Color, "#rgb"/"#rrggbb"/"#rrggbbaa" hex,
    CSS "rgb(r, g, b)" / "rgba(r, g, b, a)" strings (what a computed style
    yields) and pygame color names. Alpha is dropped; the raster is opaque.
    """
    if isinstance(value, pygame.Color):
        return (value.r, value.g, value.b)
    if isinstance(value, (tuple, list)):
        if len(value) not in (3, 4):
            raise ValueError(f"Color needs 3 or 4 components, got {value!r}")
        rgb = tuple(int(c) for c in value[:3])
        if any(c < 0 or c > 255 for c in rgb):
            raise ValueError(f"Color components must be 0-255, got {value!r}")
        return rgb
    if not isinstance(value, str):
        raise ValueError(f"Unsupported color value: {value!r}")

    text = value.strip().lower()
    if text.startswith("#"):
        digits = text[1:]
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits)
        if len(digits) not in (6, 8) or not set(digits) <= _HEX_DIGITS:
            raise ValueError(f"Invalid hex color: {value!r}")
        return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))

    match = _RGB_FUNC.match(text)
    if match:
        return parse_color([int(g) for g in match.groups()])

    try:
        color = pygame.Color(text)
    except ValueError:
        raise ValueError(f"Unknown color: {value!r}") from None
    return (color.r, color.g, color.b)


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Read-only copy of the raster's RGB content, indexed [x, y]."""
    pixels: np.ndarray

    @property
    def size(self) -> tuple[int, int]:
        return (self.pixels.shape[0], self.pixels.shape[1])


class RasterSurface:
    def __init__(self, width: int, height: int, background: tuple = BACKGROUND_COLOR):
        self.background = parse_color(background)
        self.surface = None
        self.initialize(width, height)

    # --- Lifecycle ---

    def initialize(self, width: int, height: int):
        """Replace the pixel buffer with a fresh background-filled one.

        The old buffer is kept when the dimensions are rejected."""
        if (not isinstance(width, int) or not isinstance(height, int)
                or width <= 0 or height <= 0):
            raise InvalidDimensions(width, height)
        surface = pygame.Surface((width, height))
        surface.fill(self.background)
        self.surface = surface
        logger.debug("Initialized %dx%d raster", width, height)

    def clear(self):
        self.surface.fill(self.background)

    @property
    def size(self) -> tuple[int, int]:
        return self.surface.get_size()

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    # --- Snapshots ---

    def capture_snapshot(self) -> Snapshot:
        pixels = pygame.surfarray.array3d(self.surface)  # copy, shape (W, H, 3)
        pixels.setflags(write=False)
        return Snapshot(pixels)

    def restore_snapshot(self, snapshot: Snapshot):
        if snapshot.size != self.size:
            raise SnapshotMismatch(snapshot.size, self.size)
        view = pygame.surfarray.pixels3d(self.surface)
        view[...] = snapshot.pixels
        del view  # release surface lock

    # --- Paint primitives ---

    def paint_segment(self, start, end, width: int, color):
        """Draw a line segment with round caps at both ends."""
        color = parse_color(color)
        start, end = as_point(start), as_point(end)
        pygame.draw.line(self.surface, color, start, end, width)
        if width > 1:
            radius = width / 2
            pygame.draw.circle(self.surface, color, start, radius)
            pygame.draw.circle(self.surface, color, end, radius)

    def paint_rect(self, p1, p2, width: int, color, filled: bool = False):
        """Draw the axis-aligned rectangle spanning two corners in any order.

        Filled rectangles cover [left, right) x [top, bottom); outlines are
        stroked `width` pixels wide centered on the rectangle's edges."""
        p1, p2 = as_point(p1), as_point(p2)
        left, right = sorted((round(p1.x), round(p2.x)))
        top, bottom = sorted((round(p1.y), round(p2.y)))
        if left == right and top == bottom:
            return
        color = parse_color(color)
        if filled:
            rect = pygame.Rect(left, top, right - left, bottom - top)
            pygame.draw.rect(self.surface, color, rect)
            return
        half = width // 2
        outer = pygame.Rect(left - half, top - half,
                            right - left + width, bottom - top + width)
        pygame.draw.rect(self.surface, color, outer, width)

    def paint_ellipse(self, center, radius: float, width: int, color,
                      filled: bool = False):
        """Draw a circle; the outline is stroked centered on `radius`."""
        if radius < 0:
            raise ValueError(f"Radius must be non-negative, got {radius}")
        if radius == 0:
            return
        color = parse_color(color)
        center = as_point(center)
        if filled:
            pygame.draw.circle(self.surface, color, center, radius)
        else:
            pygame.draw.circle(self.surface, color, center, radius + width / 2, width)

    def paint_triangle(self, p1, p2, p3, width: int, color, filled: bool = False):
        color = parse_color(color)
        points = [as_point(p) for p in (p1, p2, p3)]
        pygame.draw.polygon(self.surface, color, points, 0 if filled else width)

    # --- Read-only operations ---

    def encode_image(self, fmt: str = "png") -> bytes:
        ext = IMAGE_FORMATS.get(fmt.lower().lstrip("."))
        if ext is None:
            raise ValueError(f"Unsupported image format: {fmt}")
        buffer = io.BytesIO()
        pygame.image.save(self.surface, buffer, f"canvas.{ext}")
        return buffer.getvalue()

    def pixel_at(self, point) -> tuple:
        x, y = as_point(point)
        return tuple(self.surface.get_at((int(x), int(y)))[:3])

    def pixels(self) -> np.ndarray:
        """Return a (height, width, 3) copy of the raster."""
        return np.transpose(pygame.surfarray.array3d(self.surface), (1, 0, 2)).copy()

    def get_pixels_rgb(self, x: int = 0, y: int = 0,
                       w: int | None = None, h: int | None = None) -> list[list[list[int]]]:
        """Return a 2D list of [r, g, b] values (row-major) for the given region."""
        if w is None:
            w = self.width - x
        if h is None:
            h = self.height - y
        # Clamp to canvas bounds
        x = max(0, min(x, self.width - 1))
        y = max(0, min(y, self.height - 1))
        w = max(0, min(w, self.width - x))
        h = max(0, min(h, self.height - y))
        return self.pixels()[y:y + h, x:x + w].tolist()
