"""Error kinds raised by the drawing core."""


class SketchError(Exception):
    """Base class for drawing-core errors. None of them is fatal to the app."""


class InvalidDimensions(SketchError):
    def __init__(self, width, height):
        super().__init__(f"Canvas dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height


class SnapshotMismatch(SketchError):
    def __init__(self, snapshot_size: tuple[int, int], surface_size: tuple[int, int]):
        super().__init__(
            f"Snapshot is {snapshot_size[0]}x{snapshot_size[1]} but the canvas "
            f"is {surface_size[0]}x{surface_size[1]}"
        )
        self.snapshot_size = snapshot_size
        self.surface_size = surface_size


class SessionAlreadyActive(SketchError):
    def __init__(self):
        super().__init__("A gesture is already in progress; end it before starting another")
