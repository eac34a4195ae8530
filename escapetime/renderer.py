"""Single-threaded reference renderer."""

from __future__ import annotations

import logging

import numpy as np

from .evaluator import MAX_ITERATIONS, evaluate
from .viewport import prepare_render

logger = logging.getLogger(__name__)


def render_sequential(
    buffer: np.ndarray,
    top_left: complex,
    bottom_right: complex,
    *,
    max_iterations: int = MAX_ITERATIONS,
) -> int:
    """Evaluate every pixel of ``buffer`` in turn and write its color in place."""

    grid, viewport = prepare_render(buffer, top_left, bottom_right)
    logger.debug("sequential render of %dx%d pixels", grid.width, grid.height)

    for x in range(grid.width):
        for y in range(grid.height):
            c = viewport.map_pixel(x, y, grid)
            buffer[y, x] = evaluate(c, max_iterations)
    return grid.size
