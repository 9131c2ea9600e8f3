"""MCP tool definitions. Pushes drawing commands onto a thread-safe queue."""

import json
import queue
import threading
from typing import Optional
from mcp.server.fastmcp import FastMCP

from geometry import ToolKind
from raster import parse_color


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def create_mcp_server(command_queue: queue.Queue) -> FastMCP:
    mcp = FastMCP("sketch-mcp")

    # Tracks pointer_down/pointer_up pairing for this client only
    _pointer_down = [False]

    @mcp.tool()
    def get_canvas_info() -> str:
        """Get the current canvas dimensions and drawing settings."""
        return _request_response({"action": "get_info"})

    @mcp.tool()
    def set_tool(tool: str) -> str:
        """Select the drawing tool: brush, eraser, rectangle, circle or triangle.

        Settings are read when a gesture starts, so changing them mid-drag
        only affects the next gesture."""
        try:
            kind = ToolKind.parse(tool)
        except ValueError as e:
            return f"Error: {e}"
        command_queue.put({"action": "set_tool", "tool": kind.value})
        return f"Tool set to {kind.value}"

    @mcp.tool()
    def set_color(r: int, g: int, b: int) -> str:
        """Set the drawing color (RGB, each 0-255)."""
        r, g, b = clamp(r, 0, 255), clamp(g, 0, 255), clamp(b, 0, 255)
        command_queue.put({"action": "set_color", "r": r, "g": g, "b": b})
        return f"Color set to rgb({r}, {g}, {b})"

    @mcp.tool()
    def set_color_hex(color: str) -> str:
        """Set the drawing color from a CSS-style value: '#f00', '#ff8800',
        'rgb(12, 34, 56)' or a color name such as 'red'."""
        try:
            rgb = parse_color(color)
        except ValueError as e:
            return f"Error: {e}"
        command_queue.put({"action": "set_color", "r": rgb[0], "g": rgb[1], "b": rgb[2]})
        return f"Color set to rgb({rgb[0]}, {rgb[1]}, {rgb[2]})"

    @mcp.tool()
    def set_brush_size(size: int) -> str:
        """Set the brush/stroke width (1-50 pixels)."""
        size = clamp(size, 1, 50)
        command_queue.put({"action": "set_brush_size", "size": size})
        return f"Brush size set to {size}"

    @mcp.tool()
    def set_fill(filled: bool) -> str:
        """Fill rectangles, circles and triangles instead of outlining them."""
        command_queue.put({"action": "set_fill", "filled": filled})
        return f"Shape fill {'enabled' if filled else 'disabled'}"

    @mcp.tool()
    def pointer_down(x: int, y: int) -> str:
        """Press the pointer at (x, y), starting a gesture with the current tool."""
        if _pointer_down[0]:
            return "Blocked: a gesture is already in progress. Call pointer_up first."
        _pointer_down[0] = True
        command_queue.put({"action": "pointer_down", "x": x, "y": y})
        return f"Pointer down at ({x}, {y})"

    @mcp.tool()
    def pointer_move(x: int, y: int) -> str:
        """Drag the pressed pointer to (x, y). Shape tools redraw their live
        preview; brush and eraser paint the segment from the last position."""
        command_queue.put({"action": "pointer_move", "x": x, "y": y})
        return f"Pointer moved to ({x}, {y})"

    @mcp.tool()
    def pointer_up() -> str:
        """Release the pointer, ending the current gesture."""
        _pointer_down[0] = False
        command_queue.put({"action": "pointer_up"})
        return "Pointer up"

    @mcp.tool()
    def draw_gesture(points: list[list[int]], tool: Optional[str] = None) -> str:
        """Perform a whole drag through a list of [x, y] pairs: press on the
        first point, move through the rest, release. Optionally select a tool first."""
        if _pointer_down[0]:
            return "Blocked: a gesture is already in progress. Call pointer_up first."
        if len(points) < 2:
            return "Error: a gesture needs at least two points"
        cmd: dict = {"action": "gesture", "points": points}
        if tool is not None:
            try:
                cmd["tool"] = ToolKind.parse(tool).value
            except ValueError as e:
                return f"Error: {e}"
        command_queue.put(cmd)
        return f"Dragged through {len(points)} points"

    @mcp.tool()
    def clear_canvas() -> str:
        """Clear the entire canvas to white."""
        command_queue.put({"action": "clear"})
        return "Canvas cleared"

    def _request_response(cmd: dict, timeout: float = 5.0):
        """Send a command to the main thread and wait for a response."""
        event = threading.Event()
        result: dict = {}
        cmd["_event"] = event
        cmd["_result"] = result
        command_queue.put(cmd)
        if not event.wait(timeout):
            raise TimeoutError("Main thread did not respond in time")
        if "error" in result:
            raise RuntimeError(result["error"])
        return result["data"]

    @mcp.tool()
    def get_canvas_pixels(x: Optional[int] = None, y: Optional[int] = None,
                          width: Optional[int] = None, height: Optional[int] = None) -> str:
        """Return RGB pixel data from the canvas as a JSON 2D array of [r,g,b] values (row-major).

        All parameters are optional. Omit them to get the full canvas (can be very large!).
        For efficiency, request a small region instead, e.g. x=100, y=100, width=50, height=50."""
        cmd: dict = {"action": "get_pixels"}
        if x is not None:
            cmd["x"] = x
        if y is not None:
            cmd["y"] = y
        if width is not None:
            cmd["w"] = width
        if height is not None:
            cmd["h"] = height
        pixels = _request_response(cmd)
        return json.dumps(pixels)

    @mcp.tool()
    def save_canvas(file_path: Optional[str] = None) -> str:
        """Save the current canvas as an image. The format follows the file
        extension (.png, .jpg, .bmp, .tga); without a path it is saved as
        <epoch-millis>.jpg in the working directory."""
        cmd: dict = {"action": "save_file"}
        if file_path:
            cmd["path"] = file_path
        return _request_response(cmd)

    return mcp
