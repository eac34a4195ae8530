"""Public API for escape-time fractal rendering."""

from .color import BLACK, PALETTE, Color, escape_color, hsv_to_rgb
from .errors import ConfigurationError, EscapeTimeError, ImageWriteError, RenderError
from .evaluator import HORIZON, MAX_ITERATIONS, escape_iteration, evaluate
from .output import write_single_image
from .pipeline import (
    DEFAULT_WORKERS,
    Channel,
    RenderResult,
    ResultSink,
    WorkerPool,
    WorkItem,
    WorkQueue,
    render_concurrent,
)
from .renderer import render_sequential
from .viewport import PixelGrid, Viewport, map_pixel, new_image_buffer

__all__ = [
    "BLACK",
    "Channel",
    "Color",
    "ConfigurationError",
    "DEFAULT_WORKERS",
    "EscapeTimeError",
    "HORIZON",
    "ImageWriteError",
    "MAX_ITERATIONS",
    "PALETTE",
    "PixelGrid",
    "RenderError",
    "RenderResult",
    "ResultSink",
    "Viewport",
    "WorkItem",
    "WorkQueue",
    "WorkerPool",
    "escape_color",
    "escape_iteration",
    "evaluate",
    "hsv_to_rgb",
    "map_pixel",
    "new_image_buffer",
    "render_concurrent",
    "render_sequential",
    "write_single_image",
]
