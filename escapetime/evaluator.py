"""Escape-time evaluation of single points of the complex plane."""

from __future__ import annotations

from typing import Optional

from .color import BLACK, Color, escape_color

MAX_ITERATIONS = 2000
HORIZON = 4


def escape_iteration(c: complex, max_iterations: int = MAX_ITERATIONS) -> Optional[int]:
    """Return the iteration on which ``z -> z*z + c`` leaves the horizon.

    ``None`` means the orbit stayed bounded for ``max_iterations`` steps and
    the point is treated as a member of the set.
    """

    z = 0j
    for i in range(max_iterations):
        z = z * z + c
        if abs(z) > HORIZON:
            return i
    return None


def evaluate(c: complex, max_iterations: int = MAX_ITERATIONS) -> Color:
    """Map ``c`` to the color of its escape speed, black inside the set."""

    iteration = escape_iteration(c, max_iterations)
    if iteration is None:
        return BLACK
    return escape_color(iteration)
