"""Entry point: starts MCP server thread + pygame main loop."""

import os
# Suppress pygame welcome message before importing — it prints to stdout
# which would corrupt the MCP stdio JSON-RPC stream.
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import logging
import sys
import queue
import threading

import pygame
from canvas import Canvas, default_export_name
from errors import SketchError
from geometry import ToolKind
from input_adapter import InputAdapter
from tools import create_mcp_server

logger = logging.getLogger(__name__)

WIDTH = int(os.environ.get("SKETCH_WIDTH", "800"))
HEIGHT = int(os.environ.get("SKETCH_HEIGHT", "600"))
FPS = int(os.environ.get("SKETCH_FPS", "60"))
LOG_LEVEL = os.environ.get("SKETCH_LOG_LEVEL", "INFO")
TOOLBAR_H = 40

# Toolbar colours
TB_BG = (220, 220, 220)
TB_BTN = (180, 180, 180)
TB_BTN_HOVER = (160, 160, 160)
TB_BTN_ACTIVE = (120, 150, 210)
TB_TEXT = (30, 30, 30)

SWATCHES = [(255, 255, 255), (0, 0, 0), (230, 57, 70), (42, 157, 143), (69, 123, 157)]
TOOL_LABELS = [
    (ToolKind.BRUSH, "Brush"),
    (ToolKind.ERASER, "Eraser"),
    (ToolKind.RECTANGLE, "Rect"),
    (ToolKind.CIRCLE, "Circle"),
    (ToolKind.TRIANGLE, "Triangle"),
]


def run_mcp_server(mcp_server):
    """Target for the daemon thread — runs the MCP stdio server."""
    mcp_server.run(transport="stdio")


def _build_toolbar() -> list[tuple[pygame.Rect, str, object]]:
    """Lay out toolbar widgets left to right as (rect, kind, value)."""
    widgets = []
    x = 8
    for tool, _ in TOOL_LABELS:
        widgets.append((pygame.Rect(x, 7, 72, 26), "tool", tool))
        x += 76
    widgets.append((pygame.Rect(x, 7, 48, 26), "fill", None))
    x += 60
    for color in SWATCHES:
        widgets.append((pygame.Rect(x, 10, 20, 20), "color", color))
        x += 26
    x += 70  # brush size readout
    widgets.append((pygame.Rect(x, 7, 56, 26), "clear", None))
    x += 62
    widgets.append((pygame.Rect(x, 7, 56, 26), "save", None))
    return widgets


def _draw_toolbar(screen: pygame.Surface, font, widgets, canvas: Canvas, mouse_pos):
    pygame.draw.rect(screen, TB_BG, (0, 0, screen.get_width(), TOOLBAR_H))
    labels = dict(TOOL_LABELS)
    for rect, kind, value in widgets:
        if kind == "color":
            pygame.draw.rect(screen, value, rect)
            border = 3 if canvas.state.color == value else 1
            pygame.draw.rect(screen, TB_TEXT, rect, width=border)
            continue
        active = ((kind == "tool" and canvas.state.tool is value)
                  or (kind == "fill" and canvas.state.filled))
        if active:
            btn_color = TB_BTN_ACTIVE
        elif rect.collidepoint(mouse_pos):
            btn_color = TB_BTN_HOVER
        else:
            btn_color = TB_BTN
        pygame.draw.rect(screen, btn_color, rect, border_radius=4)
        pygame.draw.rect(screen, TB_TEXT, rect, width=1, border_radius=4)
        text = labels[value] if kind == "tool" else kind.capitalize()
        label = font.render(text, True, TB_TEXT)
        screen.blit(label, label.get_rect(center=rect.center))

    swatch_end = max(r.right for r, kind, _ in widgets if kind == "color")
    size_label = font.render(f"Size {canvas.state.brush_size}", True, TB_TEXT)
    screen.blit(size_label, size_label.get_rect(midleft=(swatch_end + 10, TOOLBAR_H // 2)))


def _ask_save_path() -> str:
    """Open a Tk file-save dialog (runs on main thread); empty if cancelled."""
    import tkinter as tk
    from tkinter import filedialog
    root = tk.Tk()
    root.withdraw()
    path = filedialog.asksaveasfilename(
        initialfile=default_export_name(),
        defaultextension=".jpg",
        filetypes=[("JPEG image", "*.jpg"), ("PNG image", "*.png"), ("All files", "*.*")],
        title="Save canvas as…",
    )
    root.destroy()
    return path


def _save_dialog_and_write(canvas: Canvas):
    path = _ask_save_path()
    if not path:
        return
    try:
        canvas.save(path)
    except (ValueError, OSError):
        logger.exception("Could not save canvas to %s", path)


def _handle_toolbar_click(pos, widgets, canvas: Canvas):
    for rect, kind, value in widgets:
        if not rect.collidepoint(pos):
            continue
        if kind == "tool":
            canvas.set_tool(value)
        elif kind == "fill":
            canvas.set_fill(not canvas.state.filled)
        elif kind == "color":
            canvas.set_color(value)
        elif kind == "clear":
            canvas.clear()
        elif kind == "save":
            _save_dialog_and_write(canvas)
        return


def _handle_request(cmd: dict, canvas: Canvas):
    """Process a request/response command from the MCP tool thread."""
    event: threading.Event = cmd["_event"]
    result: dict = cmd["_result"]
    action = cmd.get("action")
    try:
        if action == "get_pixels":
            data = canvas.get_pixels_rgb(
                cmd.get("x", 0), cmd.get("y", 0),
                cmd.get("w"), cmd.get("h"),
            )
            result["data"] = data
        elif action == "get_info":
            result["data"] = canvas.describe()
        elif action == "save_file":
            path = canvas.save(cmd.get("path"))
            result["data"] = f"Canvas saved to {path}"
        else:
            result["error"] = f"Unknown request action: {action}"
    except Exception as e:
        logger.exception("Request %s failed", action)
        result["error"] = str(e)
    finally:
        event.set()


def main():
    logging.basicConfig(
        stream=sys.stderr,
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Shared command queue between MCP thread and pygame main thread
    command_queue = queue.Queue()

    # Create MCP server with tool definitions
    mcp_server = create_mcp_server(command_queue)

    # Start MCP server in a background daemon thread
    mcp_thread = threading.Thread(target=run_mcp_server, args=(mcp_server,), daemon=True)
    mcp_thread.start()

    # Initialize pygame on the main thread
    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT + TOOLBAR_H), pygame.RESIZABLE)
    pygame.display.set_caption("Sketch MCP")
    clock = pygame.time.Clock()

    canvas = Canvas(WIDTH, HEIGHT)
    adapter = InputAdapter((0, TOOLBAR_H, WIDTH, HEIGHT), screen.get_size())

    font = pygame.font.SysFont(None, 22)
    widgets = _build_toolbar()

    running = True
    while running:
        mouse_pos = pygame.mouse.get_pos()

        # Handle pygame events
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                width, height = event.w, event.h - TOOLBAR_H
                try:
                    canvas.resize(width, height)
                except SketchError as e:
                    logger.warning("Resize rejected: %s", e)
                    continue
                adapter.resize((0, TOOLBAR_H, width, height), (event.w, event.h))
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_LEFTBRACKET:
                canvas.set_brush_size(canvas.state.brush_size - 1)
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_RIGHTBRACKET:
                canvas.set_brush_size(canvas.state.brush_size + 1)
            elif (event.type == pygame.MOUSEBUTTONDOWN and event.button == 1
                  and event.pos[1] < TOOLBAR_H):
                _handle_toolbar_click(event.pos, widgets, canvas)
            else:
                gesture = adapter.translate(event)
                if gesture is None:
                    continue
                try:
                    canvas.handle(gesture)
                except SketchError as e:
                    logger.warning("Gesture error: %s", e)

        # Drain all pending commands from the queue
        while True:
            try:
                cmd = command_queue.get_nowait()
            except queue.Empty:
                break

            # Request/response bridge commands have an _event key
            if "_event" in cmd:
                _handle_request(cmd, canvas)
            else:
                try:
                    canvas.execute(cmd)
                except SketchError as e:
                    logger.warning("Command %s failed: %s", cmd.get("action"), e)
                except Exception:
                    logger.exception("Command error: %s", cmd.get("action"))

        # --- Render ---
        _draw_toolbar(screen, font, widgets, canvas, mouse_pos)

        # Canvas (offset below toolbar)
        screen.blit(canvas.surface.surface, (0, TOOLBAR_H))
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()


if __name__ == "__main__":
    main()
