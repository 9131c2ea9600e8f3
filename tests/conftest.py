import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from raster import RasterSurface
from session import StrokeSession, StrokeStyle

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
RED = (255, 0, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def surface():
    return RasterSurface(50, 50)


@pytest.fixture
def session(surface):
    return StrokeSession(surface)


@pytest.fixture
def outline_style():
    return StrokeStyle(color=BLACK, width_px=2, filled=False)
